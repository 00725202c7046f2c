"""
Alert Store: durable, append-only log of proctoring incidents.

There is intentionally no update or delete; the log is an audit trail.
"""
from datetime import datetime
from typing import List

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from exam_portal.errors import StoreUnavailable
from exam_portal.models.alert import AlertRecord, AlertReason
from exam_portal.schemas import Alert
from exam_portal.timeutils import as_utc, as_naive_utc


def _to_alert(record: AlertRecord) -> Alert:
    return Alert(
        id=record.id,
        student=record.student,
        exam=record.exam,
        reason=record.reason,
        timestamp=as_utc(record.timestamp),
    )


class AlertStore:
    """SQLAlchemy-backed alert log. Every database error surfaces as StoreUnavailable."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def append(self, student: str, exam: str, reason: AlertReason, timestamp: datetime) -> Alert:
        try:
            with self.session_factory() as session:
                record = AlertRecord(
                    student=student,
                    exam=exam,
                    reason=AlertReason(reason),
                    timestamp=as_naive_utc(timestamp),
                )
                session.add(record)
                session.commit()
                session.refresh(record)
                return _to_alert(record)
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"Failed to save alert: {e}") from e

    def recent(self, limit: int) -> List[Alert]:
        """The `limit` newest alerts, newest first; equal timestamps newest insert first."""
        if limit <= 0:
            return []
        query = (
            select(AlertRecord)
            .order_by(AlertRecord.timestamp.desc(), AlertRecord.id.desc())
            .limit(limit)
        )
        try:
            with self.session_factory() as session:
                return [_to_alert(r) for r in session.scalars(query)]
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"Failed to read alerts: {e}") from e

    def count_since(self, instant: datetime) -> int:
        query = select(func.count(AlertRecord.id)).where(
            AlertRecord.timestamp >= as_naive_utc(instant)
        )
        try:
            with self.session_factory() as session:
                return session.scalar(query) or 0
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"Failed to count alerts: {e}") from e
