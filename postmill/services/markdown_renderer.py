import html
import re
from typing import List, Set, Tuple

from markdown_it import MarkdownIt

from postmill.schemas.blog import TocItem

TOC_LEVELS = (2, 3)

# \w is unicode-aware, so kana/kanji and other word characters survive
ID_STRIP_PATTERN = re.compile(r"[^\w\s-]")
WHITESPACE_PATTERN = re.compile(r"\s+")
HYPHENS_PATTERN = re.compile(r"-+")


def generate_heading_id(text: str) -> str:
    heading_id = ID_STRIP_PATTERN.sub("", text.lower())
    heading_id = WHITESPACE_PATTERN.sub("-", heading_id)
    heading_id = HYPHENS_PATTERN.sub("-", heading_id)
    return heading_id.strip("-")


def escape_html(text: str) -> str:
    return html.escape(text, quote=True)


def _heading_text(inline_token) -> str:
    children = inline_token.children or []
    return "".join(
        child.content for child in children if child.type in ("text", "code_inline")
    ).strip()


def render_heading_open(self, tokens, idx, options, env):
    token = tokens[idx]
    level = int(token.tag[1])
    if level not in TOC_LEVELS:
        return self.renderToken(tokens, idx, options, env)

    text = _heading_text(tokens[idx + 1])
    base_id = generate_heading_id(text)

    # every assigned id, so a suffixed id never collides with a later natural one
    used: Set[str] = env.setdefault("heading_ids", set())
    heading_id = base_id
    suffix = 0
    while heading_id in used:
        suffix += 1
        heading_id = f"{base_id}-{suffix}"
    used.add(heading_id)

    env.setdefault("toc_items", []).append(
        TocItem(level=level, text=text, id=heading_id)
    )
    token.attrSet("id", heading_id)
    return self.renderToken(tokens, idx, options, env)


def render_fence(self, tokens, idx, options, env):
    token = tokens[idx]
    info = token.info.strip()
    language = info.split()[0] if info else "text"
    return (
        f'<pre><code class="language-{escape_html(language)}">'
        f"{escape_html(token.content)}</code></pre>\n"
    )


def create_markdown() -> MarkdownIt:
    md = MarkdownIt("commonmark", {"html": True, "linkify": True}).enable(
        ["table", "strikethrough", "linkify"]
    )
    # scheme-prefixed URLs only; bare domains stay text
    md.linkify.set({"fuzzy_link": False})
    md.add_render_rule("heading_open", render_heading_open)
    md.add_render_rule("fence", render_fence)
    return md


_md = create_markdown()


def render_markdown(body: str) -> Tuple[str, List[TocItem]]:
    """Render a markdown body to HTML and return the h2/h3 headings in document order."""
    env: dict = {"toc_items": [], "heading_ids": set()}
    rendered = _md.render(body, env)
    return rendered, env["toc_items"]
