import os

# Keep the app's own engine off disk; tests use test_engine below
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import random  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session, SQLModel  # noqa: E402

from mexicano.database import create_db_engine, get_session  # noqa: E402
from mexicano.main import app  # noqa: E402

TEST_DATABASE_URL = "sqlite:///:memory:"

# ============================================================================
# Test Database Setup with StaticPool
# ============================================================================
# 1. sqlite:///:memory: gets a StaticPool so ALL sessions share the same DB
# 2. check_same_thread=False for TestClient/threaded access
# 3. All models imported before create_all() (see session_fixture)
# 4. App dependency overridden to use test_engine (see client_fixture)
# 5. Tables dropped and recreated per test so tournament ids never collide
test_engine = create_db_engine(TEST_DATABASE_URL)

PLAYERS_8 = ["Mesut", "Mumtaz", "Berk", "Erdem", "Hulusi", "Emre", "Ahmet", "Batuhan"]
PLAYERS_10 = PLAYERS_8 + ["Sercan", "Okan"]


def override_get_session():
    """Override session to use test engine"""
    with Session(test_engine) as session:
        yield session


@pytest.fixture(name="session", scope="function")
def session_fixture():
    """Provide a test database session on a fresh schema"""
    from mexicano.models.round_match import RoundMatch  # noqa: F401
    from mexicano.models.tournament import Tournament  # noqa: F401
    from mexicano.models.tournament_player import TournamentPlayer  # noqa: F401
    from mexicano.models.tournament_round import TournamentRound  # noqa: F401

    SQLModel.metadata.drop_all(test_engine)
    SQLModel.metadata.create_all(test_engine)

    with Session(test_engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Provide a test client with overridden database session

    Override MUST be set BEFORE TestClient() and stay in place
    for the entire duration so the app never uses its own engine.
    """
    app.dependency_overrides[get_session] = override_get_session

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def players_8():
    return list(PLAYERS_8)


@pytest.fixture
def players_10():
    return list(PLAYERS_10)
