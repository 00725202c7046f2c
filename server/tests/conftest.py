import time

import pytest
from sqlalchemy.orm import sessionmaker

from exam_portal.config import Settings
from exam_portal.database import init_db, make_engine
from exam_portal.errors import StoreUnavailable
from exam_portal.main import create_app
from exam_portal.services.alert_store import AlertStore
from exam_portal.services.connection_registry import ConnectionRegistry
from exam_portal.services.exam_repository import ExamRepository


class RecordingSender:
    """Stands in for the ConnectionManager; ids in `gone` behave like closed sockets."""

    def __init__(self):
        self.sent = []
        self.gone = set()

    async def send(self, connection_id, event, data):
        if connection_id in self.gone:
            return False
        self.sent.append((connection_id, event, data))
        return True

    def received_by(self, connection_id):
        return [(event, data) for cid, event, data in self.sent if cid == connection_id]


class UnavailableStore:
    def append(self, *args, **kwargs):
        raise StoreUnavailable("database unreachable")


def wait_for(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture
def engine():
    engine = make_engine("sqlite://")
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def store(session_factory):
    return AlertStore(session_factory)


@pytest.fixture
def exams(session_factory):
    return ExamRepository(session_factory)


@pytest.fixture
def registry():
    return ConnectionRegistry()


@pytest.fixture
def sender():
    return RecordingSender()


@pytest.fixture
def settings():
    return Settings(database_url="sqlite://", cors_origins="http://testserver")


@pytest.fixture
def app(session_factory, settings):
    return create_app(session_factory=session_factory, settings=settings)
