"""OCR job pipeline: record, recognize, format, persist.

Runs one job synchronously for one user. A recognizer error triggers the
compensating failed-status write and is re-raised as
``RecognitionFailure`` whether or not that write succeeded.
"""

from dataclasses import dataclass
from pathlib import Path

from scantext.db.models import RecordSnapshot
from scantext.errors import RecognitionFailure
from scantext.layout.selector import ResultSelector
from scantext.records.lifecycle import RecordLifecycleManager
from scantext.utils.config import LayoutConfig
from scantext.utils.logger import get_logger

from .tesseract_engine import Recognizer

logger = get_logger(__name__)


@dataclass
class ProcessResult:
    """Outcome of a completed OCR job."""

    record: RecordSnapshot
    text: str
    confidence: float


class DocumentProcessor:
    """End-to-end OCR job for an uploaded image.

    Args:
        recognizer: Engine turning an image file into an OCRResult.
        lifecycle: Record lifecycle manager for the job records.
        layout_config: Layout tuning knobs for the result formatting.
    """

    def __init__(
        self,
        recognizer: Recognizer,
        lifecycle: RecordLifecycleManager,
        layout_config: LayoutConfig | None = None,
    ) -> None:
        self.recognizer = recognizer
        self.lifecycle = lifecycle
        self.selector = ResultSelector(layout_config)

    def process(
        self,
        user_id: str,
        image_path: Path | str,
        language: str | None = None,
    ) -> ProcessResult:
        """Run OCR on an image and store the result for ``user_id``.

        Args:
            user_id: Resolved identity of the requesting user.
            image_path: Path of the stored upload.
            language: OCR language code; the lifecycle default otherwise.

        Returns:
            The completed record with its formatted text and confidence.

        Raises:
            ValidationError: If ``user_id`` is missing; nothing is recognized.
            RecognitionFailure: If the recognizer raised.
            PersistenceFailure: If a primary record write failed.
        """
        language = language or self.lifecycle.default_language
        record = self.lifecycle.begin(user_id, str(image_path), language)
        logger.info("OCR start: record=%s user=%s image=%s", record.id, user_id, image_path)

        try:
            result = self.recognizer.recognize(image_path, language)
        except Exception as exc:
            logger.error("OCR failed for record %s: %s", record.id, exc)
            self.lifecycle.mark_failed(record)
            raise RecognitionFailure(f"recognition failed for {image_path}: {exc}") from exc

        text = self.selector.select(result)
        # complete() rejects scores outside 0-100
        confidence = min(max(result.confidence or 0.0, 0.0), 100.0)
        completed = self.lifecycle.complete(record, text, confidence)

        logger.info(
            "OCR completed: record=%s chars=%d confidence=%.2f",
            completed.id,
            len(text),
            confidence,
        )
        return ProcessResult(record=completed, text=text, confidence=confidence)
