import io
import json
import re
import zipfile
from pathlib import Path

import httpx
import pytest
from pytest_httpx import HTTPXMock

from projectcache.config import Settings
from projectcache.errors import NetworkError, NotFoundError
from projectcache.models import Project
from projectcache.storage import ProjectStorage

STORAGE_URL = "https://storage.test"


def make_zip(files: dict[str, bytes | str]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, content in files.items():
            zf.writestr(name, content)
    return buffer.getvalue()


class RemoteStore:
    """
    In-memory object store. Signed urls are plain urls on STORAGE_URL, which are served
    by an httpx_mock callback.
    """

    def __init__(self):
        self.objects: dict[str, bytes] = {}
        self.signed: list[str] = []
        self.fail_signing: set[str] = set()
        self.fail_download: set[str] = set()

    def publish(self, project: str, hash: str, thumbnail: bytes = b"PNG", bundle: dict | None = None, **extra):
        """Put a complete project state in the store"""
        metadata = {"Hash": hash, **extra}
        self.objects[f"projects/{project}/metadata.json"] = json.dumps(metadata).encode("utf-8")
        self.objects[f"projects/{project}/thumbnail.png"] = thumbnail
        files = bundle if bundle is not None else {"a.txt": "a", "b.txt": "b"}
        self.objects[f"cache/{project}/{hash}/model-view.zip"] = make_zip(files)

    async def create_signed_url(self, key: str) -> str:
        if key in self.fail_signing:
            raise NetworkError(f"Signing {key} failed")
        if key not in self.objects:
            raise NotFoundError(f"Object {key} not found in object storage")
        self.signed.append(key)
        return f"{STORAGE_URL}/{key}"

    def respond(self, request: httpx.Request) -> httpx.Response:
        key = request.url.path.lstrip("/")
        if key in self.fail_download:
            return httpx.Response(status_code=500)
        if key not in self.objects:
            return httpx.Response(status_code=404)
        return httpx.Response(status_code=200, content=self.objects[key])


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(local_root=tmp_path / "cache")


@pytest.fixture()
def project() -> Project:
    return Project(name="P1")


@pytest.fixture()
def storage(project, settings) -> ProjectStorage:
    return ProjectStorage(project, settings)


@pytest.fixture()
def remote(httpx_mock: HTTPXMock) -> RemoteStore:
    store = RemoteStore()
    httpx_mock.add_callback(store.respond, url=re.compile(re.escape(STORAGE_URL) + "/.*"), is_reusable=True, is_optional=True)
    return store
