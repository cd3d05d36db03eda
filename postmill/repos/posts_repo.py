import logging
import urllib.parse
from typing import List, Optional

import pycouchdb
from starlette.concurrency import run_in_threadpool

from postmill.services.content_parser import ContentParser

logger = logging.getLogger(__name__)


class CouchPostsRepo:
    """
    Durable document storage backed by a CouchDB LiveSync database.

    Keys are vault paths such as ``posts/hello.md``. The pycouchdb client is
    blocking, so public methods hand the work to the threadpool.
    """

    def __init__(self, couch_db, parser: Optional[ContentParser] = None):
        self.db = couch_db
        self.parser = parser or ContentParser(couch_db)

    async def list_keys(self, prefix: str) -> List[str]:
        return await run_in_threadpool(self._list_keys, prefix)

    async def get_text(self, key: str) -> Optional[str]:
        return await run_in_threadpool(self._get_text, key)

    def _list_keys(self, prefix: str) -> List[str]:
        all_docs = [row.get("doc", row) for row in self.db.all(include_docs=True)]
        return [
            self._path(doc)
            for doc in all_docs
            if self._is_valid(doc) and self._path(doc).startswith(prefix)
        ]

    def _get_text(self, key: str) -> Optional[str]:
        doc = self._get_doc(key)
        if doc is None:
            return None
        return self.parser.get_markdown_content(doc)

    def _get_doc(self, key: str) -> Optional[dict]:
        for doc_id in (urllib.parse.quote(key, safe=""), key):
            try:
                doc = self.db.get(doc_id)
            except pycouchdb.exceptions.NotFound:
                continue
            if self._is_valid(doc):
                return doc
        logger.debug(f"No stored document for {key}")
        return None

    @staticmethod
    def _path(doc: dict) -> str:
        return doc.get("path", doc.get("_id", ""))

    @staticmethod
    def _is_valid(doc: dict | None) -> bool:
        if not doc:
            return False
        return doc.get("type") == "plain" and not doc.get("deleted", False)
