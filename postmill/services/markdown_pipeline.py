import logging
import re
from typing import Any, Dict, List, Optional

from postmill.schemas.blog import Post, PostMeta
from postmill.services.callouts import convert_callouts
from postmill.services.embeds import convert_embeds
from postmill.services.emoji_service import convert_emoji
from postmill.services.front_matter import split_front_matter
from postmill.services.markdown_renderer import render_markdown
from postmill.services.toc import build_toc_html
from postmill.settings import settings

logger = logging.getLogger(__name__)

# Synchronous HTML rewrites, in order. Embeds must run before GitHub cards.
HTML_STAGES = (convert_callouts, convert_embeds)

ELLIPSIS = "…"

EXCERPT_RULES = [
    (re.compile(r"```[\s\S]*?```"), ""),  # fenced code
    (re.compile(r"!\[[^\]]*\]\([^)]*\)"), ""),  # images
    (re.compile(r"\[([^\]]+)\]\([^)]*\)"), r"\1"),  # links -> text
    (re.compile(r"^#{1,6}\s+.*$", re.MULTILINE), ""),  # heading lines
    (re.compile(r"[*_`~]"), ""),  # emphasis / code markers
    (re.compile(r"<[^>]+>"), ""),  # html tags
    (re.compile(r"\s+"), " "),
]

SCRIPT_CLOSE_PATTERN = re.compile(r"</(script)", re.IGNORECASE)


def generate_excerpt(content: str, max_length: Optional[int] = None) -> str:
    """Derive a plain-text excerpt from a markdown body."""
    if max_length is None:
        max_length = settings.EXCERPT_LENGTH

    text = content
    for pattern, replacement in EXCERPT_RULES:
        text = pattern.sub(replacement, text)
    text = text.strip()

    if len(text) <= max_length:
        return text
    return f"{text[:max_length]}{ELLIPSIS}"


def neutralize_script_close(body: str) -> str:
    """Make the body safe to embed verbatim inside a <script type="text/plain">."""
    return SCRIPT_CLOSE_PATTERN.sub(r"<\\/\1", body)


def _as_string(value: Any, default: str) -> str:
    return str(value) if value else default


def _as_string_list(value: Any) -> List[str]:
    if isinstance(value, list):
        return [str(item) for item in value]
    return []


def build_meta(metadata: Dict[str, Any], body: str) -> Dict[str, Any]:
    excerpt = _as_string(metadata.get("excerpt"), "") or generate_excerpt(body)
    image = metadata.get("image")
    return {
        "title": _as_string(metadata.get("title"), "Untitled"),
        "slug": _as_string(metadata.get("slug"), ""),
        "date": _as_string(metadata.get("date"), ""),
        "categories": _as_string_list(metadata.get("categories")),
        "tags": _as_string_list(metadata.get("tags")),
        "excerpt": excerpt,
        "image": str(image) if image else None,
        "fixedPage": metadata.get("fixedPage") is True,
        "noAds": metadata.get("noAds") is True,
    }


def parse_front_matter(raw: str) -> PostMeta:
    """Read only the metadata of a document, without rendering the body."""
    metadata, body = split_front_matter(raw)
    return PostMeta(**build_meta(metadata, body))


async def parse_markdown(raw: str, enricher=None) -> Post:
    """
    Render a raw document into a Post.

    Stages run in a fixed order: front matter, markdown with heading/code
    hooks, table of contents, callouts, embeds, GitHub cards (only when an
    enricher is given), then emoji over the ToC and body together.
    """
    metadata, body = split_front_matter(raw)
    meta = build_meta(metadata, body)

    html, toc_items = render_markdown(body)
    toc_html = build_toc_html(toc_items, fixed_page=meta["fixedPage"])

    for stage in HTML_STAGES:
        html = stage(html)

    if enricher is not None:
        html = await enricher.enrich(html)

    html = convert_emoji(toc_html + html)

    logger.debug(
        f"Rendered '{meta['slug'] or meta['title']}' with {len(toc_items)} heading(s)"
    )
    return Post(**meta, content=html, rawContent=neutralize_script_close(body))
