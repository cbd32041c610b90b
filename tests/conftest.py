"""Pytest fixtures and configuration for roadmap scheduler tests."""

import pytest
from datetime import date
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from roadmap.database.database import Base
from roadmap.database import models  # noqa: F401  (registers tables)
from roadmap.database.initiative_repository import InitiativeRepository
from roadmap.database.scheduled_block_repository import ScheduledBlockRepository
from roadmap.database.team_repository import TeamRepository
from roadmap.models.initiative import Initiative
from roadmap.models.scheduled_block import ScheduledBlock, UnavailabilityBlock, UnavailabilityType
from roadmap.models.team import Engineer, Squad


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def db_session():
    """Create a database session for testing.

    Uses an in-memory SQLite database that is created fresh for each test.
    """
    from sqlalchemy import event

    # Create engine with StaticPool for in-memory database
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    # Enable SQLite foreign keys
    @event.listens_for(engine, "connect")
    def set_sqlite_pragmas(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def block_repository(db_session: Session):
    return ScheduledBlockRepository(db_session)


@pytest.fixture
def team(db_session: Session):
    """Two engineers (alice, bob), an inactive engineer and one squad with alice as member."""
    repo = TeamRepository(db_session)
    repo.create_engineer(Engineer(id="alice", name="Alice"))
    repo.create_engineer(Engineer(id="bob", name="Bob"))
    repo.create_engineer(Engineer(id="carol", name="Carol", is_active=False))
    repo.create_squad(Squad(id="platform", name="Platform", member_ids=["alice"]))
    return repo


@pytest.fixture
def make_initiative(db_session: Session, team):
    """Factory that stores an initiative."""
    repo = InitiativeRepository(db_session)

    def _make(initiative_id: str, title: str = None, **overrides) -> Initiative:
        return repo.create(Initiative(id=initiative_id, title=title or initiative_id.title(), **overrides))

    return _make


@pytest.fixture
def make_block(block_repository, make_initiative):
    """Factory that stores a block (creating its initiative when needed)."""
    known = set()

    def _make(block_id: str, start: date, end: date, engineer_id: str = "alice", initiative_id: str = None,
              squad_id: str = None, **initiative_overrides) -> ScheduledBlock:
        initiative_id = initiative_id or f"init-{block_id}"
        if initiative_id not in known:
            make_initiative(initiative_id, **initiative_overrides)
            known.add(initiative_id)
        return block_repository.create(
            ScheduledBlock(
                id=block_id,
                initiative_id=initiative_id,
                engineer_id=None if squad_id else engineer_id,
                squad_id=squad_id,
                start_date=start,
                end_date=end,
            )
        )

    return _make


@pytest.fixture
def alice_pto(team):
    return team.create_unavailability(
        UnavailabilityBlock(
            id="pto-1",
            engineer_id="alice",
            type=UnavailabilityType.PTO,
            start_date=date(2026, 3, 16),
            end_date=date(2026, 3, 18),
        )
    )


@pytest.fixture
def test_client(db_session: Session):
    """Create a FastAPI test client with overridden database dependency."""
    from roadmap.api.app import app
    from roadmap.database.database import get_db

    # Override the get_db dependency to use our test database session
    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Don't close the session here, let the fixture handle it

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as client:
        yield client

    # Clean up dependency overrides
    app.dependency_overrides.clear()
