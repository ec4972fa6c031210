import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app.models.state  # noqa: F401
from app.database import Base
from app.services.engine import OutageEngine
from app.services.persistence import StateStore


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def store(session_factory) -> StateStore:
    return StateStore(session_factory)


@pytest.fixture
def engine(store) -> OutageEngine:
    return OutageEngine(store)
