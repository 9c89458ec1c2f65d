"""
Pytest configuration and fixtures.

Every test gets a fresh in-memory SQLite database; the HTTP client has
the session dependency pointed at it.
"""
import os
import tempfile

# Must be set before guessnica reads its settings
os.environ["DB_PATH"] = os.path.join(tempfile.mkdtemp(prefix="guessnica-"), "guessnica.db")
os.environ["ADMIN_TOKEN"] = "test-admin-token"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from guessnica.database import get_session, init_db
from guessnica.main import app
from guessnica.models import User, Location, Riddle, RiddleDifficulty

ADMIN_HEADERS = {"X-Admin-Token": "test-admin-token"}


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine):
    def _get_session_override():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _get_session_override
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session):
    def _make_user(display_name: str = "Anna") -> User:
        user = User(display_name=display_name)
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_riddle(session):
    def _make_riddle(
        latitude: float = 51.2070,
        longitude: float = 16.1550,
        difficulty: RiddleDifficulty = RiddleDifficulty.MEDIUM,
        time_limit_seconds: int = 300,
        max_distance_meters: int = 100,
        description: str = "Find the market square",
    ) -> Riddle:
        location = Location(
            latitude=latitude,
            longitude=longitude,
            image_url="/images/locations/test.jpg",
            short_description="Test location",
        )
        session.add(location)
        session.flush()
        riddle = Riddle(
            description=description,
            difficulty=difficulty,
            time_limit_seconds=time_limit_seconds,
            max_distance_meters=max_distance_meters,
            location_id=location.id,
        )
        session.add(riddle)
        session.commit()
        session.refresh(riddle)
        return riddle

    return _make_riddle
