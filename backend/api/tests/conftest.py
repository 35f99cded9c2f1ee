# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# Sets up environment variables before any archive_cms import, and provides
# an isolated SQLite database plus a fake content API for every test.
# =============================================================================

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["JWT_SECRET"] = "test-secret-for-archive-cms"
os.environ["JWT_ALG"] = "HS256"
os.environ.setdefault("CONTENT_API_BASE_URL", "http://content.test")

import httpx  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402

from archive_cms.auth import build_access_token  # noqa: E402
from archive_cms.content_client import ContentApiClient  # noqa: E402
from archive_cms.dashboard import get_content_client  # noqa: E402
from archive_cms.db import get_engine  # noqa: E402
from archive_cms.main import app  # noqa: E402
from archive_cms.models import metadata  # noqa: E402


# =============================================================================
# Sample records (external API shape)
# =============================================================================

def article_record(id, updated_at, *, title=None, published_at=None, slug=None):
    return {
        "id": id,
        "title": title or f"Article {id}",
        "author": "林小明",
        "slug": slug or f"article-{id}",
        "publishedAt": published_at,
        "createdAt": "2024-01-01T00:00:00.000Z",
        "updatedAt": updated_at,
    }


def photograph_record(id, updated_at, *, title=None, description=None, photo_date="2023-12-24T00:00:00.000Z"):
    return {
        "id": id,
        "title": title or f"Photo {id}",
        "author": "陳大華",
        "description": description or f"description {id}",
        "photoDate": photo_date,
        "createdAt": "2024-01-01T00:00:00.000Z",
        "updatedAt": updated_at,
    }


class FakeContentApi:
    """
    In-memory stand-in for the Article/Photograph APIs, served through
    httpx.MockTransport. Set `articles`/`photographs` to a list of records,
    or to an httpx.Response / exception to simulate failures.
    """

    def __init__(self):
        self.articles = []
        self.photographs = []
        self.delete_response = None
        self.requests = []

    def _list(self, source):
        if isinstance(source, Exception):
            raise source
        if isinstance(source, httpx.Response):
            return source
        return httpx.Response(200, json={"success": True, "data": source})

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if request.method == "GET" and path == "/api/articles":
            return self._list(self.articles)
        if request.method == "GET" and path == "/api/photographs":
            return self._list(self.photographs)

        if request.method == "DELETE":
            if self.delete_response is not None:
                if isinstance(self.delete_response, Exception):
                    raise self.delete_response
                return self.delete_response
            kind, _, record_id = path.removeprefix("/api/").partition("/")
            records = self.articles if kind == "articles" else self.photographs
            before = len(records)
            records[:] = [r for r in records if r["id"] != record_id]
            if len(records) == before:
                return httpx.Response(404, json={"success": False, "error": "not found"})
            return httpx.Response(200, json={"success": True, "message": "deleted"})

        return httpx.Response(404, json={"success": False, "error": "no route"})

    def client(self) -> ContentApiClient:
        return ContentApiClient("http://content.test", transport=httpx.MockTransport(self.handler))


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def engine(tmp_path):
    eng = create_engine(
        f"sqlite:///{tmp_path / 'archive.db'}",
        connect_args={"check_same_thread": False},
        future=True,
    )
    metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def broken_engine(tmp_path):
    # No tables: every query raises OperationalError.
    eng = create_engine(
        f"sqlite:///{tmp_path / 'empty.db'}",
        connect_args={"check_same_thread": False},
        future=True,
    )
    yield eng
    eng.dispose()


@pytest.fixture
def content_api():
    return FakeContentApi()


@pytest.fixture
def client(engine, content_api):
    app.dependency_overrides[get_engine] = lambda: engine
    app.dependency_overrides[get_content_client] = content_api.client
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def admin_token():
    return build_access_token(subject="admin@example.org", role="admin")


@pytest.fixture
def editor_token():
    return build_access_token(subject="editor@example.org", role="editor")


@pytest.fixture
def viewer_token():
    return build_access_token(subject="viewer@example.org", role="viewer")


@pytest.fixture
def admin_headers(admin_token):
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def editor_headers(editor_token):
    return {"Authorization": f"Bearer {editor_token}"}


@pytest.fixture
def viewer_headers(viewer_token):
    return {"Authorization": f"Bearer {viewer_token}"}


@pytest.fixture
def sample_archive():
    return {
        "Class": "museum",
        "WebName": "國立故宮博物院",
        "OrgName": "National Palace Museum",
        "OrgWebLink": "https://www.npm.gov.tw",
    }
