"""
Dashboard Aggregator: the teacher's initial view, recomputed on every request.
"""
import logging
from dataclasses import dataclass
from typing import List

from fastapi.concurrency import run_in_threadpool

from exam_portal.errors import AggregationFailed, RepositoryError, StoreUnavailable
from exam_portal.schemas import (
    Alert,
    DashboardAlert,
    DashboardResponse,
    DashboardStats,
    ExamResponse,
)
from exam_portal.services.alert_store import AlertStore
from exam_portal.services.exam_repository import ExamRepository
from exam_portal.timeutils import iso_utc, start_of_day, utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardSnapshot:
    total_students: int
    active_exam_count: int
    alerts_today: int
    average_score: float
    recent_alerts: List[Alert]  # Newest first
    exam_list: List[ExamResponse]

    def to_response(self) -> DashboardResponse:
        return DashboardResponse(
            stats=DashboardStats(
                total_students=self.total_students,
                active_exams=self.active_exam_count,
                alerts_today=self.alerts_today,
                avg_score=self.average_score,
            ),
            alerts=[
                DashboardAlert(
                    id=a.id,
                    student=a.student,
                    exam=a.exam,
                    reason=a.reason.value,
                    time=iso_utc(a.timestamp),
                )
                for a in self.recent_alerts
            ],
            exams=self.exam_list,
        )


class DashboardAggregator:
    def __init__(
        self,
        store: AlertStore,
        exams: ExamRepository,
        recent_limit: int = 10,
        timezone_name: str = "UTC",
    ):
        self.store = store
        self.exams = exams
        self.recent_limit = recent_limit
        self.timezone_name = timezone_name

    def _read(self) -> DashboardSnapshot:
        today = start_of_day(utcnow(), self.timezone_name)
        return DashboardSnapshot(
            total_students=self.exams.count_students(),
            active_exam_count=self.exams.count_exams(),
            alerts_today=self.store.count_since(today),
            average_score=self.exams.average_score(),
            recent_alerts=self.store.recent(self.recent_limit),
            exam_list=self.exams.list_exams(),
        )

    async def snapshot(self) -> DashboardSnapshot:
        """All reads succeed or the whole snapshot fails with AggregationFailed."""
        try:
            return await run_in_threadpool(self._read)
        except (StoreUnavailable, RepositoryError) as e:
            logger.error(f"❌ Error fetching dashboard: {e}")
            raise AggregationFailed("Failed to fetch dashboard data") from e
