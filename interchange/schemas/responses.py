"""
Pydantic schemas for import and database responses
"""
from pydantic import BaseModel, ConfigDict, Field


class ImportSummary(BaseModel):
    """Summary returned by every import endpoint (never the created rows)"""
    model_config = ConfigDict(populate_by_name=True)

    message: str
    file_name: str = Field(..., alias="fileName")
    count: int = 0


class FlashcardsJsonResult(BaseModel):
    count: int


class FlashcardsJsonResponse(BaseModel):
    success: bool = True
    imported: FlashcardsJsonResult


class DatabaseImportResponse(BaseModel):
    success: bool = True
