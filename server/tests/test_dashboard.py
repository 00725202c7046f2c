from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from exam_portal.errors import AggregationFailed, RepositoryError
from exam_portal.models.alert import AlertReason
from exam_portal.schemas import ExamCreate, SubmissionCreate
from exam_portal.services.dashboard import DashboardAggregator
from exam_portal.timeutils import start_of_day, utcnow


def seed_three_alerts(store):
    now = utcnow()
    store.append("old", "exam-1", AlertReason.TAB_SWITCH, now - timedelta(days=2))
    store.append("yesterday", "exam-1", AlertReason.TAB_SWITCH, now - timedelta(days=1))
    store.append("today", "exam-2", AlertReason.TAB_SWITCH, now)


@pytest.mark.asyncio
async def test_snapshot_counts_only_todays_alerts(store, exams):
    seed_three_alerts(store)
    exams.create_exam(ExamCreate(title="Algebra"))

    snapshot = await DashboardAggregator(store, exams).snapshot()

    assert snapshot.alerts_today == 1
    assert [a.student for a in snapshot.recent_alerts] == ["today", "yesterday", "old"]
    assert snapshot.active_exam_count == 1
    assert [e.title for e in snapshot.exam_list] == ["Algebra"]


@pytest.mark.asyncio
async def test_snapshot_stats_from_submissions(store, exams):
    exam = exams.create_exam(ExamCreate(title="Physics"))
    exams.create_submission(SubmissionCreate(exam_id=exam.id, student="alice", score=80))
    exams.create_submission(SubmissionCreate(exam_id=exam.id, student="alice", score=90))
    exams.create_submission(SubmissionCreate(exam_id=exam.id, student="bob", score=70))

    snapshot = await DashboardAggregator(store, exams).snapshot()

    assert snapshot.total_students == 2
    assert snapshot.average_score == 80.0
    assert snapshot.alerts_today == 0
    assert snapshot.recent_alerts == []


@pytest.mark.asyncio
async def test_recent_alerts_are_bounded(store, exams):
    now = utcnow()
    for i in range(12):
        store.append(f"s{i}", "e", AlertReason.TAB_SWITCH, now - timedelta(minutes=i))

    snapshot = await DashboardAggregator(store, exams, recent_limit=10).snapshot()

    assert len(snapshot.recent_alerts) == 10
    assert snapshot.recent_alerts[0].student == "s0"


@pytest.mark.asyncio
async def test_any_failed_read_fails_the_whole_snapshot(store, exams):
    class BrokenExams:
        def __getattr__(self, name):
            def fail(*args, **kwargs):
                raise RepositoryError("exam storage down")
            return fail

    with pytest.raises(AggregationFailed):
        await DashboardAggregator(store, BrokenExams()).snapshot()


@pytest.mark.asyncio
async def test_store_failure_becomes_aggregation_failed(store, exams, engine):
    from exam_portal.models.alert import AlertRecord

    AlertRecord.__table__.drop(engine)
    with pytest.raises(AggregationFailed):
        await DashboardAggregator(store, exams).snapshot()


def test_start_of_day_honours_timezone():
    moment = datetime(2024, 3, 1, 2, 0, tzinfo=timezone.utc)
    assert start_of_day(moment) == datetime(2024, 3, 1, tzinfo=timezone.utc)
    # 02:00 UTC is still Feb 29 in New York (UTC-5)
    assert start_of_day(moment, "America/New_York") == datetime(2024, 2, 29, 5, 0, tzinfo=timezone.utc)


def test_dashboard_endpoint(app, store):
    seed_three_alerts(store)
    with TestClient(app) as client:
        client.post("/api/exams", json={"title": "Chemistry", "subject": "Science"})
        response = client.get("/api/teacher/dashboard")

    assert response.status_code == 200
    body = response.json()
    assert body["stats"] == {"totalStudents": 0, "activeExams": 1, "alertsToday": 1, "avgScore": 0.0}
    assert [a["student"] for a in body["alerts"]] == ["today", "yesterday", "old"]
    first = body["alerts"][0]
    assert set(first) == {"id", "student", "exam", "reason", "time"}
    assert first["reason"] == "Tab switching detected"
    assert first["time"].endswith("Z")
    assert body["exams"][0]["title"] == "Chemistry"


def test_dashboard_endpoint_reports_failure(app, engine):
    from exam_portal.models.alert import AlertRecord

    with TestClient(app) as client:
        AlertRecord.__table__.drop(engine)
        response = client.get("/api/teacher/dashboard")

    assert response.status_code == 500
    assert response.json() == {"detail": "Failed to fetch dashboard data"}
