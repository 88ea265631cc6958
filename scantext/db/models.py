"""ORM model and snapshot type for OCR history records."""

from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any

from sqlalchemy import DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class RecordStatus(StrEnum):
    """Lifecycle states of an OCR record."""

    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite drops the offset on read; stored values are always UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class RecordSnapshot:
    """Immutable copy of a record as it was read from the store."""

    id: int
    user_id: str
    image_path: str
    status: RecordStatus
    language: str
    extracted_text: str | None
    confidence: float | None
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        data["created_at"] = self.created_at.isoformat()
        return data


class OcrRecord(Base):
    """Table ocr_records: one row per OCR job, owned by ``user_id``."""

    __tablename__ = "ocr_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    image_path: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=RecordStatus.PROCESSING.value, index=True
    )
    language: Mapped[str] = mapped_column(String(32), nullable=False, default="eng")
    extracted_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    confidence: Mapped[float | None] = mapped_column(Float, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    def to_snapshot(self) -> RecordSnapshot:
        return RecordSnapshot(
            id=self.id,
            user_id=self.user_id,
            image_path=self.image_path,
            status=RecordStatus(self.status),
            language=self.language,
            extracted_text=self.extracted_text,
            confidence=self.confidence,
            created_at=_as_utc(self.created_at),
        )
