"""State machine for a single OCR job record.

Records start in ``processing`` and move exactly once to ``completed``
or ``failed``; both are terminal. The failed transition is a
compensating, best-effort write: if it cannot be stored the record stays
in ``processing``, and callers should treat long-lived ``processing``
records as needing reconciliation rather than as pending work.
"""

from typing import NoReturn

from scantext.db.models import RecordSnapshot, RecordStatus
from scantext.errors import InvalidTransition, NotFoundOrForbidden, ValidationError
from scantext.utils.logger import get_logger

from .store import RecordStore

logger = get_logger(__name__)


def _require_user(user_id: str | None) -> str:
    if user_id is None or not str(user_id).strip():
        raise ValidationError("an owning user id is required")
    return str(user_id)


class RecordLifecycleManager:
    """Owner-scoped operations on OCR records.

    Args:
        store: Record store built on the process-owned database handle.
        default_language: Language recorded when ``begin`` gets none.
    """

    def __init__(self, store: RecordStore, default_language: str = "eng") -> None:
        self.store = store
        self.default_language = default_language

    def begin(
        self,
        user_id: str | None,
        image_path: str,
        language: str | None = None,
    ) -> RecordSnapshot:
        """Create a ``processing`` record for a new job.

        Raises:
            ValidationError: If no owning user is given.
            PersistenceFailure: If the record cannot be inserted.
        """
        owner = _require_user(user_id)
        return self.store.create(
            user_id=owner,
            image_path=str(image_path),
            language=language or self.default_language,
        )

    def complete(
        self,
        record: RecordSnapshot,
        text: str,
        confidence: float | None,
    ) -> RecordSnapshot:
        """Store the recognized text and mark the record completed.

        Raises:
            ValidationError: If confidence is outside 0-100.
            InvalidTransition: If the record is no longer ``processing``.
            NotFoundOrForbidden: If the record is gone.
            PersistenceFailure: If the store rejects the write.
        """
        if confidence is not None and not 0 <= confidence <= 100:
            raise ValidationError(f"confidence {confidence} is outside 0-100")
        if record.status != RecordStatus.PROCESSING:
            raise InvalidTransition(
                f"record {record.id} is {record.status}, cannot complete"
            )

        updated = self.store.transition(
            record.id,
            record.user_id,
            RecordStatus.PROCESSING,
            status=RecordStatus.COMPLETED,
            extracted_text=text,
            confidence=confidence,
        )
        if updated is None:
            self._raise_for_missed_transition(record, "complete")
        return updated

    def mark_failed(self, record: RecordSnapshot) -> RecordSnapshot | None:
        """Try to move a ``processing`` record to ``failed``.

        Never raises: a failure of this write is logged and ``None`` is
        returned, leaving the record in whatever state the store holds.
        """
        try:
            updated = self.store.transition(
                record.id,
                record.user_id,
                RecordStatus.PROCESSING,
                status=RecordStatus.FAILED,
            )
        except Exception:
            logger.exception(
                "Could not mark OCR record id=%s as failed; it may remain processing",
                record.id,
            )
            return None

        if updated is None:
            logger.warning(
                "OCR record id=%s was not processing, failed status not recorded",
                record.id,
            )
        return updated

    def get(self, record_id: int, user_id: str | None) -> RecordSnapshot:
        owner = _require_user(user_id)
        record = self.store.get(record_id, owner)
        if record is None:
            raise NotFoundOrForbidden(f"record {record_id} not found")
        return record

    def delete(self, record_id: int, user_id: str | None) -> None:
        """Delete a record owned by ``user_id``.

        Raises:
            NotFoundOrForbidden: If the record does not exist or belongs
                to another user; the two cases are not distinguished.
        """
        owner = _require_user(user_id)
        if not self.store.delete(record_id, owner):
            raise NotFoundOrForbidden(f"record {record_id} not found")

    def list_for_user(self, user_id: str | None) -> list[RecordSnapshot]:
        """All records owned by ``user_id``, most recent first."""
        return self.store.list_for_user(_require_user(user_id))

    def _raise_for_missed_transition(self, record: RecordSnapshot, action: str) -> NoReturn:
        current = self.store.get(record.id, record.user_id)
        if current is None:
            raise NotFoundOrForbidden(f"record {record.id} not found")
        raise InvalidTransition(f"record {record.id} is {current.status}, cannot {action}")
