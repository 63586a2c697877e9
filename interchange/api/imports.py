"""
Bulk import API endpoints
"""
from fastapi import APIRouter, Depends, UploadFile, File, HTTPException
from sqlalchemy.orm import Session
from typing import Optional
import logging

from interchange.database import get_db
from interchange.schemas.responses import ImportSummary
from interchange.services.import_service import import_service, require_upload
from interchange.services.snapshot_service import (
    SnapshotSupervisor, get_script_supervisor, snapshot_service
)
from interchange.utils.errors import InterchangeError

router = APIRouter(prefix="/import", tags=["import"])
logger = logging.getLogger(__name__)


async def _import_json(kind: str, file: Optional[UploadFile], db: Session) -> ImportSummary:
    require_upload(file)

    try:
        raw = await file.read()
        logger.info(f"Importing {kind} file {file.filename} ({len(raw)} bytes)")

        count = import_service.import_json(db, kind, raw)

        return ImportSummary(
            message=import_service.MESSAGES[kind],
            file_name=file.filename,
            count=count,
        )

    except InterchangeError:
        raise
    except Exception as e:
        logger.error(f"Failed to import {kind}: {str(e)}")
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Failed to import {kind}: {str(e)}")


@router.post("/subject", response_model=ImportSummary)
async def import_subject(
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db)
):
    """Import subjects (one object or an array) in a single batch"""
    return await _import_json("subject", file, db)


@router.post("/category", response_model=ImportSummary)
async def import_category(
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db)
):
    """Import categories; every subject_id must already exist"""
    return await _import_json("category", file, db)


@router.post("/flashcard", response_model=ImportSummary)
async def import_flashcard(
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db)
):
    return await _import_json("flashcard", file, db)


@router.post("/user", response_model=ImportSummary)
async def import_user(
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db)
):
    """Import users; passwords are stored exactly as given"""
    return await _import_json("user", file, db)


@router.post("/quiz", response_model=ImportSummary)
async def import_quiz(
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db)
):
    """
    Import quizzes with their questions, options and matching pairs

    - Each quiz is created in its own transaction
    - A failing quiz stops the import; earlier quizzes are kept
    """
    return await _import_json("quiz", file, db)


@router.post("/question-images-zip", response_model=ImportSummary)
async def import_question_images_zip(file: Optional[UploadFile] = File(None)):
    """Extract a zip of question images into the images directory"""
    require_upload(file)

    content = await file.read()
    logger.info(f"Importing question images from {file.filename} ({len(content)} bytes)")

    count = await import_service.import_question_images(content)

    return ImportSummary(message="Images imported", file_name=file.filename, count=count)


@router.post("/db", response_model=ImportSummary)
async def import_db(
    file: Optional[UploadFile] = File(None),
    supervisor: SnapshotSupervisor = Depends(get_script_supervisor)
):
    """
    Replace the whole database with an uploaded snapshot

    The replace script stops the service, swaps the file and starts the
    service again.
    """
    require_upload(file)

    content = await file.read()
    logger.info(f"Database snapshot upload: {file.filename} ({len(content)} bytes)")

    await snapshot_service.replace(content, supervisor)

    return ImportSummary(
        message="Database imported, replaced and backend restarted",
        file_name="quizapp.db",
    )
