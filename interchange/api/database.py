"""
Database file API endpoints
"""
from fastapi import APIRouter, Depends, UploadFile, File
from typing import Optional
import logging

from interchange.config import settings
from interchange.schemas.responses import DatabaseImportResponse
from interchange.services.import_service import require_upload
from interchange.services.snapshot_service import (
    SnapshotSupervisor, get_in_process_supervisor, snapshot_service
)

router = APIRouter(prefix="/database", tags=["database"])
logger = logging.getLogger(__name__)


@router.post("/import", response_model=DatabaseImportResponse)
async def import_database(
    file: Optional[UploadFile] = File(None),
    supervisor: SnapshotSupervisor = Depends(get_in_process_supervisor)
):
    """
    Swap the database file in place without restarting the service

    Pooled connections are closed before the copy and reopened after it.
    """
    require_upload(file)

    content = await file.read()
    staging_path = settings.resolve(settings.SNAPSHOT_STAGING_FILE)
    logger.info(f"In-place database import: {file.filename} ({len(content)} bytes)")

    await snapshot_service.replace(content, supervisor, staging_path)

    return DatabaseImportResponse()
