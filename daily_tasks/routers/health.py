from fastapi import APIRouter, Depends

from daily_tasks.core.config import settings
from daily_tasks.core.deps import get_caps
from daily_tasks.services.schema_capabilities import SchemaCapabilities, LATEST_VERSION

router = APIRouter()

@router.get("/z")
def healthz():
    # Check si l'API est up, et si le mode cloud est configuré
    return {"status": "ok", "cloud_ready": settings.cloud_ready}

@router.get("/schema")
def schema(caps: SchemaCapabilities = Depends(get_caps)):
    return {
        "version": caps.version,
        "latest_version": LATEST_VERSION,
        "missing_columns": sorted(caps.missing),
    }
