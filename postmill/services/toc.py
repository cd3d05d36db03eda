from typing import Sequence

from postmill.schemas.blog import TocItem
from postmill.services.markdown_renderer import escape_html

MIN_TOC_ITEMS = 3
TOC_SUMMARY = "Contents"


def build_toc_html(items: Sequence[TocItem], fixed_page: bool = False) -> str:
    """
    Build a nested table of contents from h2/h3 headings.

    Short documents (fewer than three headings) and fixed pages get no ToC.
    """
    if fixed_page or len(items) < MIN_TOC_ITEMS:
        return ""

    parts = [f'<nav class="toc"><details><summary>{TOC_SUMMARY}</summary><ul>']
    prev_level = 2

    for item in items:
        if item.level > prev_level:
            parts.append("<ul>" * (item.level - prev_level))
        elif item.level < prev_level:
            parts.append("</ul>" * (prev_level - item.level))
        parts.append(f'<li><a href="#{item.id}">{escape_html(item.text)}</a></li>')
        prev_level = item.level

    # one list per level above h1 is still open
    parts.append("</ul>" * (prev_level - 1))
    parts.append("</details></nav>")
    return "".join(parts)
