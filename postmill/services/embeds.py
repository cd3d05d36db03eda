import re
from typing import Callable, List, NamedTuple, Optional

# Three shapes a standalone URL takes once markdown has been rendered
LINK_PARAGRAPH = r'<p><a href="(?P<url>{pattern})(?P<rest>[^"]*)">(?P<text>[^<]*)</a></p>'
BARE_PARAGRAPH = r"<p>(?P<url>{pattern})(?P<rest>[^\s<]*)</p>"
LIST_ITEM = r'<li><a href="(?P<url>{pattern})(?P<rest>[^"]*)">(?P<text>[^<]*)</a>'

CONTEXTS = (LINK_PARAGRAPH, BARE_PARAGRAPH, LIST_ITEM)


class EmbedProvider(NamedTuple):
    name: str
    pattern: str
    render: Callable[[re.Match, Optional[str]], str]


def render_twitter(match: re.Match, _title: Optional[str]) -> str:
    tweet_url = f"https://twitter.com/{match.group('user')}/status/{match.group('tweet')}"
    return (
        '<div class="embed-card embed-twitter">'
        '<blockquote class="twitter-tweet" data-dnt="true">'
        f'<a href="{tweet_url}"></a>'
        "</blockquote></div>"
    )


def render_youtube(match: re.Match, _title: Optional[str]) -> str:
    return (
        '<div class="embed-card embed-youtube">'
        f'<iframe src="https://www.youtube.com/embed/{match.group("video")}" '
        'frameborder="0" allowfullscreen loading="lazy"></iframe>'
        "</div>"
    )


def render_gist(match: re.Match, _title: Optional[str]) -> str:
    gist_url = f"https://gist.github.com/{match.group('user')}/{match.group('gist')}"
    return f'<div class="embed-card embed-gist"><script src="{gist_url}.js"></script></div>'


def render_amazon(match: re.Match, title: Optional[str]) -> str:
    url = match.group("url") + match.group("rest")
    return (
        '<div class="embed-card embed-amazon">'
        f'<a href="{url}" target="_blank" rel="noopener noreferrer sponsored">'
        '<span class="amazon-icon">🛒</span>'
        f'<span class="amazon-title">{title or url}</span>'
        "</a></div>"
    )


PROVIDERS: List[EmbedProvider] = [
    EmbedProvider(
        "twitter",
        r"https?://(?:www\.)?(?:x|twitter)\.com/(?P<user>[A-Za-z0-9_]+)/status/(?P<tweet>\d+)",
        render_twitter,
    ),
    EmbedProvider(
        "youtube",
        r"https?://(?:www\.|m\.)?youtube\.com/watch\?v=(?P<video>[A-Za-z0-9_-]+)",
        render_youtube,
    ),
    EmbedProvider(
        "youtube-short",
        r"https?://youtu\.be/(?P<video>[A-Za-z0-9_-]+)",
        render_youtube,
    ),
    EmbedProvider(
        "gist",
        r"https?://gist\.github\.com/(?P<user>[A-Za-z0-9_-]+)/(?P<gist>[A-Za-z0-9]+)",
        render_gist,
    ),
    EmbedProvider(
        "amazon",
        r"https?://(?:www\.)?amazon\.(?:co\.jp|com)/(?:[^\"\s<]*/)?(?:dp|gp/product)/(?P<asin>[A-Z0-9]{10})",
        render_amazon,
    ),
    EmbedProvider(
        "amazon-short",
        r"https?://(?:amzn\.to|amzn\.asia)/(?P<code>[A-Za-z0-9_-]+)",
        render_amazon,
    ),
]


def _compile(provider: EmbedProvider) -> List[re.Pattern]:
    return [re.compile(context.format(pattern=provider.pattern)) for context in CONTEXTS]


COMPILED = [(provider, _compile(provider)) for provider in PROVIDERS]


def _replacer(provider: EmbedProvider):
    def replace(match: re.Match) -> str:
        title = match.groupdict().get("text")
        card = provider.render(match, title)
        if match.group(0).startswith("<li>"):
            return f"<li>{card}"
        return card

    return replace


def convert_embeds(html: str) -> str:
    """
    Rewrite standalone provider URLs (X, YouTube, Gist, Amazon) into embeds.

    Only URLs that stand alone in a paragraph, or lead a list item, are
    rewritten; inline links inside running text are left as they are.
    """
    for provider, patterns in COMPILED:
        for pattern in patterns:
            html = pattern.sub(_replacer(provider), html)
    return html
