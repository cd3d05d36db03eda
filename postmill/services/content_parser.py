import logging

import pycouchdb

logger = logging.getLogger(__name__)


class ContentParser:
    """Reassembles document text stored as LiveSync leaf chunks in CouchDB."""

    def __init__(self, db):
        self.db = db

    def get_markdown_content(self, doc: dict) -> str:
        """Get the full markdown content from a document (decoded as text)."""
        raw = self._get_raw_content(doc)
        if isinstance(raw, bytes):
            # If somehow bytes slipped in, decode to string
            return raw.decode("utf-8", errors="ignore")
        return raw or ""

    def _get_raw_content(self, doc: dict) -> str | bytes | None:
        # Small notes are stored inline
        for key in ("data", "content"):
            if key in doc:
                return doc[key]

        children = doc.get("children")
        if not children:
            return None

        parts = []
        for c in children:
            try:
                child_doc = self.db.get(c)
            except pycouchdb.exceptions.NotFound:
                logger.warning(f"Missing chunk {c} for {doc.get('_id')}, skipping")
                continue
            if child_doc.get("type") == "leaf" and "data" in child_doc:
                data = child_doc["data"]
                if isinstance(data, bytes):
                    data = data.decode("utf-8", errors="ignore")
                parts.append(data)

        return "".join(parts) if parts else None
