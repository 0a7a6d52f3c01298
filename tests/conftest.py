# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from contextlib import contextmanager
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from creator_stage.api.v1.dependencies import get_session_factory, get_storage_dep
from creator_stage.core.security import create_access_token, hash_password
from creator_stage.db.session import Base, enable_sqlite_savepoints
from creator_stage.db.session import get_db as app_get_session
from creator_stage.main import app as fastapi_app
from creator_stage.models import Content, ContentType, User
from creator_stage.realtime import reset_realtime
from creator_stage.services.storage import MediaStorage, UploadedFile

TEST_DB_URL = "sqlite://"
TEST_PASSWORD = "correct-horse-battery"


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_savepoints(engine)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    # Services commit for real; every table is emptied afterwards.
    session = Session(bind=engine, autoflush=False)
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(autouse=True)
def fresh_realtime() -> Iterator[None]:
    reset_realtime()
    yield
    reset_realtime()


@pytest.fixture()
def storage(tmp_path: Path) -> MediaStorage:
    return MediaStorage(root=tmp_path, public_base_url="http://test")


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_dependencies(app: FastAPI, db_session: Session, storage: MediaStorage) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    @contextmanager
    def _shared_session() -> Iterator[Session]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[get_session_factory] = lambda: _shared_session
    app.dependency_overrides[get_storage_dep] = lambda: storage
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)
        app.dependency_overrides.pop(get_session_factory, None)
        app.dependency_overrides.pop(get_storage_dep, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Factory persisting users with a known password."""

    def _make_user(username: str, **fields: object) -> User:
        user = User(
            username=username,
            email=f"{username.lower()}@example.com",
            password_hash=hash_password(TEST_PASSWORD),
            **fields,
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make_user


@pytest.fixture()
def test_user(make_user: Callable[..., User]) -> User:
    """Create and return a persisted test user."""
    return make_user("alice")


@pytest.fixture()
def other_user(make_user: Callable[..., User]) -> User:
    """Create and return a second persisted user."""
    return make_user("bob")


@pytest.fixture()
def auth_token(test_user: User) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    return {"Authorization": f"Bearer {create_access_token(test_user.id)}"}


@pytest.fixture()
def other_auth_token(other_user: User) -> dict[str, str]:
    """Return authorization headers for the secondary test user."""
    return {"Authorization": f"Bearer {create_access_token(other_user.id)}"}


@pytest.fixture()
def make_content(db_session: Session) -> Callable[..., Content]:
    """Factory inserting content rows directly, bypassing uploads."""

    def _make_content(
        creator: User | None,
        title: str = "Sunset",
        *,
        type: ContentType = ContentType.IMAGE,
        published: bool = True,
        tags: list[str] | None = None,
        **fields: object,
    ) -> Content:
        content = Content(
            title=title,
            type=type,
            media_path=f"uploads/content/media/{title.lower().replace(' ', '-')}.bin",
            thumbnail_path=(
                "uploads/content/thumbnail/poster.png" if type is ContentType.VIDEO else None
            ),
            creator_id=creator.id if creator is not None else None,
            is_published=published,
            **fields,
        )
        content.tag_names = tags or []
        db_session.add(content)
        db_session.commit()
        return content

    return _make_content


@pytest.fixture()
def image_file() -> Callable[..., UploadedFile]:
    """Factory for small in-memory PNG uploads."""

    def _image_file(name: str = "image.png", size: int = 16) -> UploadedFile:
        return UploadedFile(filename=name, content_type="image/png", data=b"\x89PNG" + b"0" * size)

    return _image_file


@pytest.fixture()
def video_file() -> Callable[..., UploadedFile]:
    """Factory for small in-memory MP4 uploads."""

    def _video_file(name: str = "clip.mp4", size: int = 32) -> UploadedFile:
        return UploadedFile(filename=name, content_type="video/mp4", data=b"\x00" * size)

    return _video_file
