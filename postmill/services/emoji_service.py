import re

import emoji

PROTECTED_PATTERN = re.compile(r"<(pre|code)[^>]*>[\s\S]*?</\1>", re.IGNORECASE)
# placeholders are wrapped in a private-use code point
PLACEHOLDER_MARK = "\ue000"
PLACEHOLDER_PATTERN = re.compile(PLACEHOLDER_MARK + r"(\d+)" + PLACEHOLDER_MARK)


def convert_emoji(html: str) -> str:
    """Replace :shortcode: emoji with glyphs, leaving <pre> and <code> contents alone."""
    protected = []

    def protect(match: re.Match) -> str:
        protected.append(match.group(0))
        return f"{PLACEHOLDER_MARK}{len(protected) - 1}{PLACEHOLDER_MARK}"

    def restore(match: re.Match) -> str:
        index = int(match.group(1))
        return protected[index] if index < len(protected) else match.group(0)

    html = PROTECTED_PATTERN.sub(protect, html)
    html = emoji.emojize(html, language="alias")
    return PLACEHOLDER_PATTERN.sub(restore, html)
