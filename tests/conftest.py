from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine.base import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.session import Session
from sqlalchemy.pool import StaticPool

from photodrop.cache_utils import clear_presigned_url_cache
from photodrop.db import Base
from photodrop.models import Gallery, Image, Photographer  # noqa: F401
from tests.helpers import FakeS3Client


@pytest.fixture(scope="function")
def engine() -> Generator[Engine]:
    """In-memory SQLite engine shared by the test thread and the app's threadpool."""
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(engine: Engine) -> Generator[Session]:
    session = sessionmaker(bind=engine)()
    yield session
    session.close()


@pytest.fixture(scope="function")
def fake_s3() -> FakeS3Client:
    return FakeS3Client()


@pytest.fixture(autouse=True)
def _clear_url_cache():
    clear_presigned_url_cache()
    yield
    clear_presigned_url_cache()


@pytest.fixture(scope="function")
def client(db_session: Session, fake_s3: FakeS3Client) -> Generator[TestClient]:
    """Test client with the database and object storage replaced."""
    from photodrop.db import get_db
    from photodrop.dependencies import get_s3_client
    from photodrop.main import app

    def override_get_db():
        yield db_session

    async def override_get_s3_client():
        yield fake_s3

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_s3_client] = override_get_s3_client

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
