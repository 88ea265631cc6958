"""Pydantic response schemas for the FastAPI endpoints."""

from datetime import datetime

from pydantic import BaseModel

from scantext.db.models import RecordSnapshot, RecordStatus


class OcrResponse(BaseModel):
    """Response schema for a finished OCR job."""

    message: str
    record_id: int
    text: str
    confidence: float | None
    image_path: str


class OcrRecordResponse(BaseModel):
    """Response schema for one OCR history record."""

    id: int
    user_id: str
    image_path: str
    status: RecordStatus
    language: str
    extracted_text: str | None = None
    confidence: float | None = None
    created_at: datetime

    @classmethod
    def from_snapshot(cls, record: RecordSnapshot) -> "OcrRecordResponse":
        return cls(
            id=record.id,
            user_id=record.user_id,
            image_path=record.image_path,
            status=record.status,
            language=record.language,
            extracted_text=record.extracted_text,
            confidence=record.confidence,
            created_at=record.created_at,
        )


class HistoryResponse(BaseModel):
    """Response schema listing a user's OCR records, newest first."""

    records: list[OcrRecordResponse]


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
    tesseract_available: bool
