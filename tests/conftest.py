from datetime import datetime, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import scoped_session, sessionmaker

from clickgate import create_app, Base
from clickgate.clock import Clock
from clickgate.config import GateConfig
from clickgate.engine import AdmissionEngine
from clickgate.policy import EscalationPolicy
from clickgate.service import ClickGate
from clickgate.store import SubjectRecordStore

API_TOKEN = 'test-token'
START = datetime(2026, 3, 1, 12, 0, 0)


class FakeClock(Clock):
    def __init__(self, start=START, display_offset_hours=0):
        super().__init__(display_offset_hours)
        self.current = start

    def now(self):
        return self.current

    def advance(self, seconds):
        self.current += timedelta(seconds=seconds)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def policy():
    return EscalationPolicy()


@pytest.fixture
def engine(policy, clock):
    return AdmissionEngine(policy, clock)


def make_sessions(db_path):
    db = create_engine(
        f'sqlite:///{db_path}',
        future=True,
        connect_args={'timeout': 30, 'check_same_thread': False},
    )
    Base.metadata.create_all(bind=db)
    return scoped_session(sessionmaker(bind=db))


@pytest.fixture
def store(tmp_path):
    sessions = make_sessions(tmp_path / 'gate.sqlite3')
    yield SubjectRecordStore(sessions)
    sessions.remove()


@pytest.fixture
def gate(engine, store):
    return ClickGate(engine, store)


@pytest.fixture
def make_app(tmp_path, clock):
    def _make(create_tables=True, **overrides):
        cfg = GateConfig(
            database_url=f"sqlite:///{tmp_path / 'api.sqlite3'}",
            api_token=API_TOKEN,
            **overrides,
        )
        app = create_app(cfg, clock=clock)
        app.config['TESTING'] = True
        if create_tables:
            Base.metadata.create_all(bind=app.db_engine)
        return app
    return _make


@pytest.fixture
def client(make_app):
    return make_app().test_client()
