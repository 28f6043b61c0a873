import pytest
from sqlalchemy import func, select

from bootstrap_schema import run_bootstrap
from config import get_settings
from database import make_engine, make_session_factory
from errors import StatementExecutionError


@pytest.fixture
def engine():
    engine = make_engine("sqlite://")
    yield engine
    engine.dispose()


@pytest.fixture
def bootstrapped(engine):
    run_bootstrap(engine)
    return engine


@pytest.fixture
def session(bootstrapped):
    db = make_session_factory(bootstrapped)()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    for name in ("DATABASE_URL", "CONNECTION_FILE", "LOG_LEVEL", "ADVISORY_LOCK"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def count_rows(engine, model, *criteria):
    with engine.connect() as conn:
        stmt = select(func.count()).select_from(model.__table__)
        if criteria:
            stmt = stmt.where(*criteria)
        return conn.execute(stmt).scalar_one()


class RecordingExecutor:
    """Stands in for StatementExecutor; records labels and fails on request."""

    def __init__(self, fail_on=None, dialect_name="sqlite"):
        self.labels = []
        self.fail_on = fail_on
        self.dialect_name = dialect_name

    def execute(self, statement, label, failure=StatementExecutionError):
        self.labels.append(label)
        if label == self.fail_on:
            raise failure(label, RuntimeError("boom"))
        return 1
