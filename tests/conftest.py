from __future__ import annotations

import dataclasses
import io
import sys
from pathlib import Path

import pytest
from PIL import Image

# Garantiza que el paquete ayni sea importable durante los tests locales
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from ayni.core.config import Settings  # noqa: E402
from ayni.core.errors import UpstreamFailure  # noqa: E402
from ayni.db.session import Database  # noqa: E402
from ayni.repositories.json_storage import JSONRepository  # noqa: E402
from ayni.repositories.sql_repository import SQLRepository  # noqa: E402
from ayni.services.media_service import MediaNotFound  # noqa: E402


def make_settings(tmp_path: Path, **overrides) -> Settings:
    base = Settings(
        app_env="test",
        secret_key="test-secret",
        session_ttl_seconds=86400,
        storage_backend="json",
        database_url="",
        data_dir=str(tmp_path / "data"),
        media_dir=str(tmp_path / "media"),
        media_base_url="/media",
        media_folder="studio-ayni",
        media_max_dimension=1000,
        cors_origins=("http://localhost:5173", "https://*.vercel.app"),
        default_payment_method="whatsapp",
        admin_email="admin@ayni.com",
        admin_password="admin123",
        log_level="WARNING",
    )
    return dataclasses.replace(base, **overrides)


def image_bytes(size=(10, 10), fmt="PNG", color="red") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


class FakeMediaStore:
    """In-memory media store that records every call and can be told to fail."""

    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}
        self.deleted: list[str] = []
        self.fail_upload = False
        self.fail_delete = False
        self.delete_error: Exception | None = None
        self._seq = 0

    def describe(self) -> str:
        return "fake"

    def upload(self, data: bytes, filename: str = "", content_type: str = "") -> str:
        if self.fail_upload:
            raise UpstreamFailure()
        self._seq += 1
        ref = f"https://media.test/studio-ayni/{self._seq}.png"
        self.objects[ref] = data
        return ref

    def delete(self, reference: str) -> None:
        self.deleted.append(reference)
        if self.delete_error is not None:
            raise self.delete_error
        if self.fail_delete:
            raise UpstreamFailure()
        if reference not in self.objects:
            raise MediaNotFound()
        del self.objects[reference]


@pytest.fixture()
def fake_media() -> FakeMediaStore:
    return FakeMediaStore()


@pytest.fixture(params=["sql", "json"])
def repository(request, tmp_path):
    """Both persistence strategies, so every behavioural test runs twice."""
    if request.param == "sql":
        database = Database(f"sqlite:///{tmp_path / 'test.db'}")
        repo = SQLRepository(database)
        repo.initialize()
        yield repo
        database.dispose()
    else:
        repo = JSONRepository(tmp_path / "data")
        repo.initialize()
        yield repo
