import re
from typing import Dict, NamedTuple


class Callout(NamedTuple):
    icon: str
    label: str
    class_name: str


CALLOUTS: Dict[str, Callout] = {
    "NOTE": Callout("ℹ️", "Note", "alert-note"),
    "TIP": Callout("💡", "Tip", "alert-tip"),
    "IMPORTANT": Callout("📝", "Important", "alert-important"),
    "WARNING": Callout("⚠️", "Warning", "alert-warning"),
    "CAUTION": Callout("❗", "Caution", "alert-caution"),
}

# A blockquote holding exactly one paragraph that opens with [!KIND]
CALLOUT_PATTERN = re.compile(
    r"<blockquote>\s*<p>\[!(NOTE|TIP|IMPORTANT|WARNING|CAUTION)\][ \t]*\n?"
    r"((?:(?!</p>)[\s\S])*?)</p>\s*</blockquote>",
    re.IGNORECASE,
)


def _render_callout(match: re.Match) -> str:
    callout = CALLOUTS.get(match.group(1).upper())
    if callout is None:
        return match.group(0)

    content = match.group(2).strip()
    return (
        f'<div class="github-alert {callout.class_name}">'
        f'<div class="alert-title">{callout.icon} {callout.label}</div>'
        f'<div class="alert-content"><p>{content}</p></div>'
        "</div>"
    )


def convert_callouts(html: str) -> str:
    """Turn ``> [!NOTE]`` style blockquotes into styled alert blocks."""
    return CALLOUT_PATTERN.sub(_render_callout, html)
