# tests/conftest.py
import pytest

from eightspots.database.database import Database
from eightspots.services.password_hasher import PasswordHasher


@pytest.fixture
def database():
    """테이블이 생성된 인메모리 SQLite DB."""
    db = Database("sqlite://")
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def db_session(database):
    session = database.session()
    yield session
    session.close()


@pytest.fixture
def fast_hasher() -> PasswordHasher:
    return PasswordHasher(time_cost=1, memory_cost=8, parallelism=1)
