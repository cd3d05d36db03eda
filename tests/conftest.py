import textwrap

import pycouchdb
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from postmill.db.postgres.base import Base, init_db


class FakeCouchDB:
    """
    Minimal in-memory CouchDB stand-in.
    Set track_calls=True to record the order of get() calls.
    """

    def __init__(self, docs: dict, track_calls: bool = False):
        self.docs = docs
        self.track_calls = track_calls
        self.calls = []

    def get(self, doc_id: str) -> dict:
        if self.track_calls:
            self.calls.append(doc_id)
        if doc_id not in self.docs:
            raise pycouchdb.exceptions.NotFound(doc_id)
        return self.docs[doc_id]

    def all(self, include_docs: bool = True):
        if self.track_calls:
            self.calls.append(f"all(include_docs={include_docs})")
        if include_docs:
            return [{"doc": doc} for doc in self.docs.values()]
        return list(self.docs.values())


class FakeStore:
    """
    Async in-memory document storage keyed by path.
    Records every get_text() call so tests can tell cache hits from reads.
    """

    def __init__(self, files: dict[str, str] | None = None, failing: set | None = None):
        self.files = {key: _dedent(text) for key, text in (files or {}).items()}
        self.failing = failing or set()
        self.reads = []

    async def list_keys(self, prefix: str):
        return [key for key in self.files if key.startswith(prefix)]

    async def get_text(self, key: str):
        self.reads.append(key)
        if key in self.failing:
            raise RuntimeError(f"storage unavailable for {key}")
        return self.files.get(key)


class FakeCache:
    """Async dict-backed cache with the same surface as CacheRepo."""

    def __init__(self, entries: dict | None = None):
        self.entries = dict(entries or {})
        self.puts = []
        self.deletes = []

    async def get(self, key: str):
        return self.entries.get(key)

    async def put(self, key: str, value) -> None:
        self.puts.append(key)
        self.entries[key] = value

    async def delete(self, key: str) -> None:
        self.deletes.append(key)
        self.entries.pop(key, None)

    async def list_keys(self, prefix: str):
        return [key for key in self.entries if key.startswith(prefix)]


class FakeEnricher:
    def __init__(self):
        self.calls = 0

    async def enrich(self, html: str) -> str:
        self.calls += 1
        return html


class FakePostsService:
    """
    Minimal posts service stand-in for router tests.
    """

    def __init__(
        self,
        list_posts_return=None,
        get_post_return=None,
        adjacent_return=None,
        error: Exception | None = None,
    ):
        self._list_posts_return = list_posts_return or []
        self._get_post_return = get_post_return
        self._adjacent_return = adjacent_return
        self.error = error
        self.invalidated = []

    async def list_posts(self):
        if self.error:
            raise self.error
        return self._list_posts_return

    async def get_post(self, slug: str):
        if self.error:
            raise self.error
        return self._get_post_return

    async def get_posts_by_category(self, category: str):
        return [p for p in self._list_posts_return if category in p.categories]

    async def get_adjacent_posts(self, slug: str):
        return self._adjacent_return

    async def invalidate_cache(self, slug=None):
        if self.error:
            raise self.error
        self.invalidated.append(slug)


def _dedent(text: str) -> str:
    return textwrap.dedent(text).lstrip()


def make_document(slug: str, date: str = "2024-01-01", body: str = "Body.", **fields) -> str:
    lines = ["---", f"title: {fields.pop('title', slug.title())}", f"slug: {slug}", f"date: {date}"]
    lines.extend(f"{key}: {value}" for key, value in fields.items())
    lines.extend(["---", "", body])
    return "\n".join(lines)


@pytest.fixture
def sqlite_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    session = sessionmaker(bind=engine, expire_on_commit=False)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
