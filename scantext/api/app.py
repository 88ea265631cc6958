"""FastAPI application for the scantext OCR API.

Provides REST endpoints to run OCR on an uploaded image, browse and
delete the caller's OCR history, and check service health. The caller's
identity arrives as a single resolved ``X-User-Id`` header; every record
operation is scoped to it.
"""

import shutil
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Annotated

from fastapi import Depends, FastAPI, File, Header, HTTPException, Query, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from scantext import __version__
from scantext.db.session import Database
from scantext.errors import (
    InvalidTransition,
    NotFoundOrForbidden,
    PersistenceFailure,
    RecognitionFailure,
    ValidationError,
)
from scantext.ocr.document_processor import DocumentProcessor
from scantext.ocr.tesseract_engine import TesseractEngine
from scantext.records.lifecycle import RecordLifecycleManager
from scantext.records.store import RecordStore
from scantext.utils.config import AppConfig, load_config
from scantext.utils.logger import get_logger, setup_logging

from .schemas import (
    HealthResponse,
    HistoryResponse,
    MessageResponse,
    OcrRecordResponse,
    OcrResponse,
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Own the database handle for the lifetime of the server."""
    config = load_config()
    setup_logging(config.log_level)
    database = Database(config.database).connect()
    app.state.config = config
    app.state.database = database
    try:
        yield
    finally:
        database.dispose()


app = FastAPI(
    title="scantext OCR API",
    description="Turn photographed documents into layout-preserving text",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_ALLOWED_CONTENT_TYPES = {
    "image/png",
    "image/jpeg",
    "image/tiff",
    "image/bmp",
    "image/webp",
    "application/octet-stream",
}


def get_config(request: Request) -> AppConfig:
    return request.app.state.config


def get_lifecycle(request: Request) -> RecordLifecycleManager:
    config: AppConfig = request.app.state.config
    store = RecordStore(request.app.state.database)
    return RecordLifecycleManager(store, default_language=config.ocr.default_lang)


def get_processor(
    request: Request,
    lifecycle: Annotated[RecordLifecycleManager, Depends(get_lifecycle)],
) -> DocumentProcessor:
    config: AppConfig = request.app.state.config
    engine = TesseractEngine(
        tesseract_cmd=config.ocr.tesseract_cmd,
        default_lang=config.ocr.default_lang,
        psm=config.ocr.psm,
    )
    return DocumentProcessor(engine, lifecycle, config.layout)


def get_current_user(x_user_id: Annotated[str | None, Header()] = None) -> str:
    """Resolve the authenticated user id, or reject the request."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Unauthorized: missing user id")
    return x_user_id.strip()


def _save_upload(content: bytes, filename: str | None, upload_dir: Path) -> Path:
    """Write an upload under a unique name, keeping its extension."""
    upload_dir.mkdir(parents=True, exist_ok=True)
    suffix = Path(filename or "").suffix.lower()
    path = upload_dir / f"{uuid.uuid4().hex}{suffix}"
    path.write_bytes(content)
    return path


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Return system health status."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        tesseract_available=shutil.which("tesseract") is not None,
    )


@app.post("/ocr", response_model=OcrResponse)
async def process_ocr(
    file: Annotated[UploadFile, File(...)],
    user_id: Annotated[str, Depends(get_current_user)],
    processor: Annotated[DocumentProcessor, Depends(get_processor)],
    config: Annotated[AppConfig, Depends(get_config)],
    language: Annotated[str | None, Query()] = None,
) -> OcrResponse:
    """Run OCR on an uploaded image and store the result in the history.

    Args:
        file: Uploaded image (PNG, JPEG, TIFF, BMP or WebP).
        user_id: Resolved caller identity.
        processor: OCR job pipeline.
        config: Application configuration.
        language: OCR language code; the configured default otherwise.

    Returns:
        The stored record id with the formatted text and confidence.
    """
    if file.content_type and file.content_type not in _ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type: {file.content_type}",
        )

    content = await file.read()
    if not content:
        raise HTTPException(status_code=400, detail="No image file provided")
    image_path = _save_upload(content, file.filename, Path(config.storage.upload_dir))

    try:
        result = processor.process(user_id, image_path, language)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except (RecognitionFailure, PersistenceFailure, InvalidTransition) as exc:
        logger.error("OCR processing error: %s", exc)
        raise HTTPException(status_code=500, detail="Error processing image") from exc

    return OcrResponse(
        message="OCR processing completed successfully",
        record_id=result.record.id,
        text=result.text,
        confidence=result.confidence,
        image_path=f"/uploads/{image_path.name}",
    )


@app.get("/ocr/history", response_model=HistoryResponse)
async def get_history(
    user_id: Annotated[str, Depends(get_current_user)],
    lifecycle: Annotated[RecordLifecycleManager, Depends(get_lifecycle)],
) -> HistoryResponse:
    """List the caller's OCR records, most recent first."""
    try:
        records = lifecycle.list_for_user(user_id)
    except PersistenceFailure as exc:
        logger.error("Error fetching OCR history: %s", exc)
        raise HTTPException(status_code=500, detail="Error fetching OCR history") from exc
    return HistoryResponse(records=[OcrRecordResponse.from_snapshot(r) for r in records])


@app.get("/ocr/{record_id}", response_model=OcrRecordResponse)
async def get_record(
    record_id: int,
    user_id: Annotated[str, Depends(get_current_user)],
    lifecycle: Annotated[RecordLifecycleManager, Depends(get_lifecycle)],
) -> OcrRecordResponse:
    """Return one of the caller's OCR records."""
    try:
        record = lifecycle.get(record_id, user_id)
    except NotFoundOrForbidden as exc:
        raise HTTPException(status_code=404, detail="Record not found") from exc
    except PersistenceFailure as exc:
        logger.error("Error fetching OCR record %s: %s", record_id, exc)
        raise HTTPException(status_code=500, detail="Error fetching record") from exc
    return OcrRecordResponse.from_snapshot(record)


@app.delete("/ocr/{record_id}", response_model=MessageResponse)
async def delete_record(
    record_id: int,
    user_id: Annotated[str, Depends(get_current_user)],
    lifecycle: Annotated[RecordLifecycleManager, Depends(get_lifecycle)],
) -> MessageResponse:
    """Delete one of the caller's OCR records."""
    try:
        lifecycle.delete(record_id, user_id)
    except NotFoundOrForbidden as exc:
        raise HTTPException(status_code=404, detail="Record not found") from exc
    except PersistenceFailure as exc:
        logger.error("Error deleting OCR record %s: %s", record_id, exc)
        raise HTTPException(status_code=500, detail="Error deleting record") from exc
    return MessageResponse(message="Record deleted successfully")
