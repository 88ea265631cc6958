"""Owner-scoped persistence for OCR records.

Every query filters on the owning user's id, so no operation here can
read or modify another user's record. SQLAlchemy errors are logged and
re-raised as ``PersistenceFailure``.
"""

from datetime import datetime, timezone

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError

from scantext.db.models import OcrRecord, RecordSnapshot, RecordStatus
from scantext.db.session import Database
from scantext.errors import PersistenceFailure
from scantext.utils.logger import get_logger

logger = get_logger(__name__)

# user_id and created_at are write-once.
ALLOWED_UPDATE_FIELDS = frozenset({"status", "extracted_text", "confidence"})


class RecordStore:
    """Record table access through an injected ``Database`` handle.

    Args:
        database: A connected database handle.
    """

    def __init__(self, database: Database) -> None:
        self.database = database

    def create(
        self,
        user_id: str,
        image_path: str,
        language: str,
        status: RecordStatus = RecordStatus.PROCESSING,
    ) -> RecordSnapshot:
        try:
            with self.database.session() as session:
                record = OcrRecord(
                    user_id=user_id,
                    image_path=image_path,
                    language=language,
                    status=status.value,
                    created_at=datetime.now(timezone.utc),
                )
                session.add(record)
                session.flush()
                snapshot = record.to_snapshot()
        except SQLAlchemyError as exc:
            logger.exception("Could not insert OCR record for user %s", user_id)
            raise PersistenceFailure(f"insert failed: {exc}") from exc

        logger.info(
            "Inserted OCR record id=%s user=%s status=%s",
            snapshot.id,
            user_id,
            snapshot.status,
        )
        return snapshot

    def get(self, record_id: int, user_id: str) -> RecordSnapshot | None:
        stmt = select(OcrRecord).where(OcrRecord.id == record_id, OcrRecord.user_id == user_id)
        try:
            with self.database.session() as session:
                record = session.execute(stmt).scalars().one_or_none()
                return record.to_snapshot() if record is not None else None
        except SQLAlchemyError as exc:
            logger.exception("Could not read OCR record id=%s", record_id)
            raise PersistenceFailure(f"read failed: {exc}") from exc

    def transition(
        self,
        record_id: int,
        user_id: str,
        from_status: RecordStatus,
        **fields: object,
    ) -> RecordSnapshot | None:
        """Update a record only while it is still in ``from_status``.

        The status check and the write happen in one UPDATE statement, so
        two racing transitions cannot both succeed.

        Args:
            record_id: Record primary key.
            user_id: Owning user; part of the filter.
            from_status: Status the record must currently have.
            **fields: Columns to set; unknown names are ignored.

        Returns:
            The updated snapshot, or ``None`` when no row matched.
        """
        values = {k: v for k, v in fields.items() if k in ALLOWED_UPDATE_FIELDS}
        if isinstance(values.get("status"), RecordStatus):
            values["status"] = values["status"].value

        stmt = (
            update(OcrRecord)
            .where(
                OcrRecord.id == record_id,
                OcrRecord.user_id == user_id,
                OcrRecord.status == from_status.value,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        try:
            with self.database.session() as session:
                result = session.execute(stmt)
                if result.rowcount == 0:
                    return None
                record = session.execute(
                    select(OcrRecord).where(
                        OcrRecord.id == record_id, OcrRecord.user_id == user_id
                    )
                ).scalar_one()
                snapshot = record.to_snapshot()
        except SQLAlchemyError as exc:
            logger.exception("Could not update OCR record id=%s", record_id)
            raise PersistenceFailure(f"update failed: {exc}") from exc

        logger.info(
            "Updated OCR record id=%s: %s -> %s (fields=%s)",
            record_id,
            from_status,
            snapshot.status,
            sorted(values),
        )
        return snapshot

    def delete(self, record_id: int, user_id: str) -> bool:
        stmt = (
            delete(OcrRecord)
            .where(OcrRecord.id == record_id, OcrRecord.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        try:
            with self.database.session() as session:
                deleted = session.execute(stmt).rowcount
        except SQLAlchemyError as exc:
            logger.exception("Could not delete OCR record id=%s", record_id)
            raise PersistenceFailure(f"delete failed: {exc}") from exc

        if deleted:
            logger.info("Deleted OCR record id=%s user=%s", record_id, user_id)
        return deleted > 0

    def list_for_user(self, user_id: str) -> list[RecordSnapshot]:
        stmt = (
            select(OcrRecord)
            .where(OcrRecord.user_id == user_id)
            .order_by(OcrRecord.created_at.desc(), OcrRecord.id.desc())
        )
        try:
            with self.database.session() as session:
                return [r.to_snapshot() for r in session.execute(stmt).scalars().all()]
        except SQLAlchemyError as exc:
            logger.exception("Could not list OCR records for user %s", user_id)
            raise PersistenceFailure(f"list failed: {exc}") from exc
