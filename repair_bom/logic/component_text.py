"""Text handling for the technician's component-change field.

The field holds free text such as ``"FAULTY 971040@R1 / C12"``: defect
remarks are stripped, the rest is cut into ``/``-separated references and
each reference is split into a part code and a board location.
"""
from __future__ import annotations

import re
from typing import List, NamedTuple

DEFECT_KEYWORDS: tuple[str, ...] = ("FAULTY", "DAMAGE", "BURN", "DEFECTIVE", "BAD", "ERROR")

# Order matters: "@" first so part codes containing "-" survive ("RES-001@R1").
REFERENCE_SEPARATORS: tuple[str, ...] = ("@", "-")

COMPONENT_DELIMITER = "/"

_DEFECT_RE = re.compile("|".join(re.escape(k.upper()) for k in DEFECT_KEYWORDS))


class ComponentReference(NamedTuple):
    part_code: str
    location: str


def normalize_analysis_text(text: str | None) -> str:
    """Uppercase, drop defect keywords and trim.

    Removal is repeated until no keyword is left, since cutting one out can
    join two fragments into another (``"BBADAD"`` -> ``"BAD"``).
    """
    cleaned = (text or "").upper()
    while True:
        cleaned, count = _DEFECT_RE.subn("", cleaned)
        if not count:
            break
    return cleaned.strip()


def split_components(text: str) -> List[str]:
    return [part.strip() for part in text.split(COMPONENT_DELIMITER) if part.strip()]


def parse_reference(token: str) -> ComponentReference:
    """Split ``token`` into part code and location on the first known separator.

    Only the first separator of REFERENCE_SEPARATORS that occurs in the token
    is used, and only at its first occurrence; the location keeps any later
    occurrences (``"A-B-C"`` -> ``("A", "B-C")``). Without a separator the
    whole token is returned as a bare location with an empty part code.
    """
    token = token.strip()
    for sep in REFERENCE_SEPARATORS:
        if sep in token:
            part_code, location = token.split(sep, 1)
            return ComponentReference(part_code.strip(), location.strip())
    return ComponentReference("", token)


__all__ = [
    "DEFECT_KEYWORDS",
    "REFERENCE_SEPARATORS",
    "ComponentReference",
    "normalize_analysis_text",
    "split_components",
    "parse_reference",
]
