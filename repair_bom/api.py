from __future__ import annotations
from fastapi import FastAPI, Depends, UploadFile, File, HTTPException
from fastapi.responses import StreamingResponse
from pydantic import BaseModel
from sqlmodel import Session
from typing import List, Optional
import csv
import io
import logging

from .database import get_session
from .domain.bom_validation import CatalogUnavailableError
from .models import BomEntry
from .services import (
    BOM_TEMPLATE_HEADERS,
    ConsumptionValidationRead,
    ImportReport,
    import_bom_catalog,
    list_bom_entries as svc_list_bom_entries,
    validate_bom_components,
)

logger = logging.getLogger(__name__)

app = FastAPI()


class ConsumptionValidationRequest(BaseModel):
    analysis_text: str = ""
    part_code: Optional[str] = None


@app.get("/hello")
def hello():
    return {"message": "hello"}


@app.post("/consumption/validate", response_model=ConsumptionValidationRead)
def validate_consumption_endpoint(
    request: ConsumptionValidationRequest,
    session: Session = Depends(get_session),
):
    try:
        return validate_bom_components(session, request.analysis_text, request.part_code)
    except CatalogUnavailableError as exc:
        logger.error("validation aborted: %s", exc)
        raise HTTPException(status_code=503, detail="Failed to validate components") from exc


@app.get("/bom/template")
def bom_template():
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(BOM_TEMPLATE_HEADERS)
    output.seek(0)
    return StreamingResponse(
        output,
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=bom_template.csv"},
    )


@app.post("/bom/import", response_model=ImportReport)
def import_bom_endpoint(
    file: UploadFile = File(...),
    session: Session = Depends(get_session),
):
    data = file.file.read()
    if not data:
        raise HTTPException(status_code=400, detail="Uploaded file is empty.")
    report = import_bom_catalog(data, session)
    if report.errors and report.total == 0:
        raise HTTPException(status_code=422, detail=report.errors)
    return report


@app.get("/bom/entries", response_model=List[BomEntry])
def list_bom_entries(
    location: Optional[str] = None,
    part_code: Optional[str] = None,
    session: Session = Depends(get_session),
):
    return svc_list_bom_entries(session, location, part_code)
