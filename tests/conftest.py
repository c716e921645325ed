from pathlib import Path

from dotenv import load_dotenv

env_file = Path(__file__).parent.parent / ".env.test"
load_dotenv(env_file)

from unittest.mock import MagicMock  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from quickdesk.core import redis as redis_module  # noqa: E402
from quickdesk.core.security import create_access_token  # noqa: E402
from quickdesk.core.storage import get_storage  # noqa: E402
from quickdesk.db.session import Base, get_db  # noqa: E402
from quickdesk.main import app  # noqa: E402
from tests.utils.factories import (  # noqa: E402
    create_category_factory,
    create_profile_factory,
)


@pytest.fixture
def test_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)

    yield engine

    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def test_session_local(test_engine):
    return sessionmaker(bind=test_engine, autocommit=False, autoflush=False)


@pytest.fixture
def db_session(test_session_local):
    session = test_session_local()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def mock_storage():
    storage = MagicMock()
    storage.upload.side_effect = lambda content, folder, filename, content_type=None: (
        f"{folder}/{filename}"
    )
    storage.public_url.side_effect = lambda path: f"https://files.test/{path}"
    storage.exists.return_value = True
    return storage


@pytest.fixture
async def test_app(db_session, mock_storage):
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: mock_storage

    redis_module.redis_client = None

    yield app

    app.dependency_overrides.clear()
    redis_module.redis_client = None


@pytest.fixture
async def test_client(test_app):
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url="http://test") as client:
        yield client


@pytest.fixture
def test_user(db_session):
    return create_profile_factory(
        db_session, email="user@example.com", full_name="Alex User", role="end_user"
    )


@pytest.fixture
def other_user(db_session):
    return create_profile_factory(
        db_session, email="other@example.com", full_name="Olivia Other", role="end_user"
    )


@pytest.fixture
def test_agent(db_session):
    return create_profile_factory(
        db_session, email="agent@example.com", full_name="Sam Agent", role="support_agent"
    )


@pytest.fixture
def other_agent(db_session):
    return create_profile_factory(
        db_session, email="agent2@example.com", full_name="Kim Agent", role="support_agent"
    )


@pytest.fixture
def test_admin(db_session):
    return create_profile_factory(
        db_session, email="admin@example.com", full_name="Ada Admin", role="admin"
    )


@pytest.fixture
def test_category(db_session):
    return create_category_factory(db_session, name="Technical Support")


def _token_for(profile) -> str:
    return create_access_token({"sub": str(profile.id), "email": profile.email})


@pytest.fixture
def test_user_token(test_user):
    return _token_for(test_user)


@pytest.fixture
def other_user_token(other_user):
    return _token_for(other_user)


@pytest.fixture
def test_agent_token(test_agent):
    return _token_for(test_agent)


@pytest.fixture
def test_admin_token(test_admin):
    return _token_for(test_admin)
