import os
import sys
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import pytest

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from httpx import AsyncClient, ASGITransport

# Test env, applied before the sitecms package is imported
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("CORS_ORIGINS", '["http://test"]')
os.environ.setdefault("UPLOAD_TMP_DIR", os.path.join(tempfile.gettempdir(), "sitecms-test-uploads"))

# make the 'sitecms' package importable without installing it
repo_root = Path(__file__).resolve().parents[2]
backend_path = repo_root / "backend"
if str(backend_path) not in sys.path:
    sys.path.insert(0, str(backend_path))

from sitecms.main import app
from sitecms.database import Base
from sitecms.database import get_db as real_get_db
from sitecms.media.uploader import UploadedImage, get_uploader as real_get_uploader
from sitecms.auth.service import create_access_token
from sitecms.users import service as user_service
from sitecms.users.schema import UserCreate


@dataclass
class FakeUploader:
    """Stands in for the media host and records what it was asked to do."""
    uploads: List[str] = field(default_factory=list)
    staged_existed: List[bool] = field(default_factory=list)
    destroyed: List[str] = field(default_factory=list)
    fail_with: Optional[Exception] = None

    async def upload(self, path: str) -> UploadedImage:
        self.uploads.append(path)
        self.staged_existed.append(os.path.exists(path))
        if self.fail_with is not None:
            raise self.fail_with
        n = len(self.uploads)
        return UploadedImage(url=f"https://media.test/siteassets/img{n}.png", public_id=f"siteassets/img{n}")

    async def destroy(self, public_id: str) -> None:
        self.destroyed.append(public_id)


@pytest.fixture()
async def test_engine():
    # one in-memory database per test, shared by every connection
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
async def db(test_engine):
    async_session = sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@pytest.fixture()
def uploader():
    return FakeUploader()


@pytest.fixture(autouse=True)
async def override_dependencies(db, uploader):
    async def _get_db():
        yield db
    app.dependency_overrides[real_get_db] = _get_db
    app.dependency_overrides[real_get_uploader] = lambda: uploader
    yield
    app.dependency_overrides.clear()


@pytest.fixture()
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture()
async def make_user(db):
    """Create a user straight through the service and hand back (user, auth headers)."""
    async def _make(name: str = "alice", email: Optional[str] = None, password: str = "password123"):
        user = await user_service.create_user(
            UserCreate(name=name, email=email or f"{name}@example.com", password=password), db
        )
        token = create_access_token(user.id, user.name)
        return user, {"Authorization": f"Bearer {token}"}
    return _make


def _image_file(size: int = 64, content_type: str = "image/png", filename: str = "pic.png"):
    return {"image": (filename, b"\x89PNG" + b"0" * max(size - 4, 0), content_type)}


@pytest.fixture()
def image_file():
    """Multipart `files=` payload builder for the image field."""
    return _image_file
