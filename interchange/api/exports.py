"""
Bulk export API endpoints
"""
from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.responses import FileResponse, JSONResponse, Response, StreamingResponse
from sqlalchemy.orm import Session
from typing import Optional
import logging

from interchange.database import get_db
from interchange.schemas.responses import FlashcardsJsonResponse, FlashcardsJsonResult
from interchange.services.export_service import export_service
from interchange.services.import_service import import_service, require_upload
from interchange.utils.errors import InterchangeError

router = APIRouter(prefix="/export", tags=["export"])
logger = logging.getLogger(__name__)


@router.get("/json")
async def export_json(
    kind: str = Query(..., alias="type", description="subject, category, quiz, flashcard or user"),
    db: Session = Depends(get_db)
):
    """
    Download every record of one entity kind as indented JSON

    The file can be imported again through /import/{kind}.
    """
    data = export_service.export_json(db, kind)

    return Response(
        content=export_service.render_json(data),
        media_type="application/json",
        headers={"Content-Disposition": f"attachment; filename={kind}.json"},
    )


@router.get("/db")
async def export_db():
    """Download the live database file"""
    path = export_service.database_file()
    return FileResponse(path, filename="quizapp.db", media_type="application/octet-stream")


@router.get("/question-images-zip")
async def export_question_images_zip():
    """Stream the question images directory as a zip archive"""
    return StreamingResponse(
        export_service.question_images_zip(),
        media_type="application/zip",
        headers={"Content-Disposition": "attachment; filename=question-images.zip"},
    )


@router.post("/import/flashcards-json")
async def import_flashcards_json(
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db)
):
    """Legacy flashcard import: the file must contain a JSON array"""
    try:
        require_upload(file)
        count = import_service.import_flashcards_json(db, await file.read())
    except InterchangeError as e:
        logger.warning(f"Flashcards JSON import rejected: {e.message}")
        return JSONResponse(status_code=400, content={"success": False, "error": e.message})

    return FlashcardsJsonResponse(imported=FlashcardsJsonResult(count=count))
