"""
Alert Pipeline: the single entry point for a detected tab switch.

normalize -> append to the alert store -> snapshot teacher connections ->
fan out `teacher_alert` to each of them.

Persistence failures never stop the broadcast; live visibility of an ongoing
incident matters more than the audit record. Delivery is fire-and-forget and
at-most-once per teacher connected at snapshot time.
"""
import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Deque, Dict, FrozenSet, List, Optional, Set

from fastapi.concurrency import run_in_threadpool

from exam_portal.errors import StoreUnavailable
from exam_portal.models.alert import AlertReason
from exam_portal.schemas import Alert, TeacherAlert
from exam_portal.services.alert_store import AlertStore
from exam_portal.services.connection_registry import ConnectionRegistry
from exam_portal.timeutils import as_utc, iso_utc, utcnow

logger = logging.getLogger(__name__)

UNKNOWN_STUDENT = "Unknown"
UNKNOWN_EXAM = "N/A"
TEACHER_ALERT_EVENT = "teacher_alert"


def _or_sentinel(value: Optional[str], sentinel: str) -> str:
    if value is None:
        return sentinel
    value = str(value).strip()
    return value or sentinel


@dataclass(frozen=True)
class TabSwitchOutcome:
    """What happened to one tab-switch event."""
    payload: Dict[str, Any]
    recipients: FrozenSet[str]
    alert: Optional[Alert] = None
    error: Optional[StoreUnavailable] = None
    queued: bool = False

    @property
    def persisted(self) -> bool:
        return self.alert is not None


class AlertPipeline:
    """
    `sender` is anything with `async send(connection_id, event, data)`;
    in the app it is the ConnectionManager.
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        store: AlertStore,
        sender,
        queue_without_teachers: bool = False,
        pending_limit: int = 100,
    ):
        self.registry = registry
        self.store = store
        self.sender = sender
        # A limit of 0 disables queueing
        self.queue_without_teachers = queue_without_teachers and pending_limit > 0
        self._pending: Deque[Dict[str, Any]] = deque(maxlen=max(pending_limit, 0))
        self._deliveries: Set[asyncio.Task] = set()

    async def handle_tab_switch(
        self,
        student: Optional[str] = None,
        exam: Optional[str] = None,
        detected_at: Optional[datetime] = None,
    ) -> TabSwitchOutcome:
        student = _or_sentinel(student, UNKNOWN_STUDENT)
        exam = _or_sentinel(exam, UNKNOWN_EXAM)
        detected_at = as_utc(detected_at) if detected_at else utcnow()
        logger.info(f"🚨 Tab switch detected! {student} - Exam: {exam}")

        alert = None
        error = None
        try:
            alert = await run_in_threadpool(
                self.store.append, student, exam, AlertReason.TAB_SWITCH, detected_at
            )
        except StoreUnavailable as e:
            error = e
            logger.error(f"❌ Failed to save alert, broadcasting anyway: {e}")

        payload = TeacherAlert(
            student=student, exam_id=exam, timestamp=iso_utc(detected_at)
        ).model_dump(by_alias=True)

        recipients = self.registry.teacher_connections()
        queued = False
        if recipients:
            for connection_id in recipients:
                self._dispatch(connection_id, payload)
        elif self.queue_without_teachers:
            self._pending.append(payload)
            queued = True
            logger.info(f"No teacher connected, queued alert ({len(self._pending)} pending)")
        else:
            logger.info("No teacher connected, alert not delivered")

        return TabSwitchOutcome(
            payload=payload, recipients=recipients, alert=alert, error=error, queued=queued
        )

    def flush_pending(self, connection_id: str) -> int:
        """Hand every queued alert to a newly registered teacher. Returns how many."""
        if not self._pending:
            return 0
        flushed = 0
        while self._pending:
            self._dispatch(connection_id, self._pending.popleft())
            flushed += 1
        logger.info(f"Flushed {flushed} queued alert(s) to {connection_id}")
        return flushed

    @property
    def pending(self) -> List[Dict[str, Any]]:
        return list(self._pending)

    def _dispatch(self, connection_id: str, payload: Dict[str, Any]) -> None:
        task = asyncio.create_task(self._deliver(connection_id, payload))
        self._deliveries.add(task)
        task.add_done_callback(self._deliveries.discard)

    async def _deliver(self, connection_id: str, payload: Dict[str, Any]) -> None:
        try:
            await self.sender.send(connection_id, TEACHER_ALERT_EVENT, payload)
        except Exception as e:
            # Stale connection; the registry catches up on its disconnect.
            logger.debug(f"Delivery to {connection_id} failed: {e}")

    async def drain(self) -> None:
        """Wait for all in-flight deliveries."""
        while self._deliveries:
            await asyncio.gather(*list(self._deliveries), return_exceptions=True)
