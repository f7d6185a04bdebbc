import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("REPAIR_BOM_SETTINGS_PATH", os.path.join(os.getcwd(), "_pytest_settings.toml"))
os.environ.setdefault("REPAIR_BOM_LOG_DIR", os.path.join(os.getcwd(), "_pytest_logs"))
