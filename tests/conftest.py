import os
import tempfile

# Must be set before been_there modules are imported
_db_fd, _db_path = tempfile.mkstemp(suffix=".db")
os.close(_db_fd)
os.environ["DB_URL"] = f"sqlite:///{_db_path}"
os.environ["SUPABASE_JWT_SECRET"] = "test-secret"

import pytest
from unittest.mock import MagicMock

from been_there.db.database import Base, engine
from tests.fakes import FakeClock, FakeResponse


@pytest.fixture
def fake_session():
    """A requests.Session stand-in; set .get.return_value or .get.side_effect."""
    session = MagicMock()
    session.get.return_value = FakeResponse(200, {"address": {}, "display_name": None})
    return session


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def clean_db():
    """Fresh tables for every test that touches the database."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def pytest_sessionfinish(session, exitstatus):
    engine.dispose()
    if os.path.exists(_db_path):
        os.unlink(_db_path)
