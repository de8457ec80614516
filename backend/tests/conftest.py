# tests/conftest.py
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from community.core.limiter import limiter
from community.core.security import create_access_token
from community.db import enable_immediate_transactions, get_session
from community.main import app
from community.models import EntityKind
from community.services import entities

BASE_TIME = datetime(2026, 6, 1, 9, 0, 0)


@pytest.fixture(name="engine")
def engine_fixture():
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_immediate_transactions(engine)
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session):
    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    limiter.reset()
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def make_person(session):
    """Factory creating committed person profiles."""

    def _make(
        username: str, first_name: str = "Test", last_name: str = None, visibility=None, **fields
    ):
        person = entities.create_person(
            session,
            {
                "username": username,
                "first_name": first_name,
                "last_name": last_name or username.capitalize(),
                **fields,
            },
            visibility,
        )
        session.commit()
        return person

    return _make


@pytest.fixture
def make_organization(session):
    def _make(creator, slug: str, name: str = None, kinds=None, visibility=None, **fields):
        organization = entities.create_entity(
            session,
            creator.id,
            EntityKind.ORGANIZATION,
            {"slug": slug, "name": name or slug.title(), "kinds": kinds or [], **fields},
            visibility,
        )
        session.commit()
        return organization

    return _make


@pytest.fixture
def make_event(session):
    def _make(
        creator,
        slug: str,
        start_time: datetime = BASE_TIME,
        end_time: datetime = None,
        participant_limit: int = None,
        published: bool = True,
        **fields,
    ):
        event = entities.create_entity(
            session,
            creator.id,
            EntityKind.EVENT,
            {
                "slug": slug,
                "name": fields.pop("name", slug.title()),
                "start_time": start_time,
                "end_time": end_time or start_time + timedelta(hours=8),
                "participant_limit": participant_limit,
                "published": published,
                **fields,
            },
        )
        session.commit()
        return event

    return _make


@pytest.fixture
def make_project(session):
    def _make(creator, slug: str, published: bool = True, **fields):
        project = entities.create_entity(
            session,
            creator.id,
            EntityKind.PROJECT,
            {"slug": slug, "name": fields.pop("name", slug.title()), "published": published, **fields},
        )
        session.commit()
        return project

    return _make


@pytest.fixture
def auth_headers():
    """Bearer header for a person, as issued by the identity provider."""

    def _headers(person) -> dict:
        return {"Authorization": f"Bearer {create_access_token(person.id)}"}

    return _headers
