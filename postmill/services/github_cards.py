import asyncio
import logging
import re
from typing import Dict, List, NamedTuple, Optional

import httpx
from pydantic import ValidationError

from postmill.schemas.github import RepoMetadata
from postmill.services.markdown_renderer import escape_html
from postmill.settings import settings

logger = logging.getLogger(__name__)

# Repository root URLs only; deeper paths (issues, blobs, ...) stay plain links
REPO_URL = (
    r"https?://github\.com/(?P<owner>[A-Za-z0-9_.-]+)/(?P<repo>[A-Za-z0-9_.-]+?)"
    r"(?:\.git)?/?"
)

REFERENCE_PATTERNS = [
    re.compile(rf'<p><a href="{REPO_URL}">[^<]*</a></p>'),
    re.compile(rf"<p>{REPO_URL}</p>"),
    re.compile(rf'<li><a href="{REPO_URL}">[^<]*</a>'),
]


class RepoReference(NamedTuple):
    source: str  # exact substring to replace
    owner: str
    repo: str

    @property
    def key(self) -> str:
        return f"{self.owner}/{self.repo}"


def find_repo_references(html: str) -> List[RepoReference]:
    references = []
    for pattern in REFERENCE_PATTERNS:
        for match in pattern.finditer(html):
            references.append(
                RepoReference(match.group(0), match.group("owner"), match.group("repo"))
            )
    return references


def render_repo_card(key: str, metadata: Optional[RepoMetadata]) -> str:
    parts = [
        '<div class="embed-card embed-github">',
        f'<a href="https://github.com/{key}" target="_blank" rel="noopener noreferrer">',
        f'<div class="github-card-title">{escape_html(key)}</div>',
    ]
    if metadata is not None:
        if metadata.description:
            parts.append(
                f'<p class="github-card-description">{escape_html(metadata.description)}</p>'
            )
        meta = []
        if metadata.language:
            meta.append(
                f'<span class="github-card-language">{escape_html(metadata.language)}</span>'
            )
        meta.append(f'<span class="github-card-stars">★ {metadata.stargazers_count:,}</span>')
        parts.append(f'<div class="github-card-meta">{"".join(meta)}</div>')
    parts.append("</a></div>")
    return "".join(parts)


class GitHubCardEnricher:
    """
    Replaces standalone GitHub repository links with cards showing the
    repository description, star count and primary language.

    Each repository is looked up once per document no matter how often it is
    referenced, and all lookups run concurrently. A failed lookup renders a
    bare card instead of failing the document.
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_url = (api_url or settings.GITHUB_API_URL).rstrip("/")
        self.token = token if token is not None else settings.GITHUB_TOKEN
        self.timeout = timeout if timeout is not None else settings.GITHUB_API_TIMEOUT
        self.client = client

    @property
    def headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "postmill",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def enrich(self, html: str) -> str:
        references = find_repo_references(html)
        if not references:
            return html

        keys = list(dict.fromkeys(ref.key for ref in references))
        if self.client is not None:
            results = await self._fetch_all(self.client, keys)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                results = await self._fetch_all(client, keys)
        metadata_by_key = dict(zip(keys, results))

        replacements: Dict[str, str] = {}
        for ref in references:
            card = render_repo_card(ref.key, metadata_by_key[ref.key])
            if ref.source.startswith("<li>"):
                card = f"<li>{card}"
            replacements[ref.source] = card

        for source, card in replacements.items():
            html = html.replace(source, card)

        logger.debug(
            f"Rendered {len(references)} GitHub card(s) from {len(keys)} lookup(s)"
        )
        return html

    async def _fetch_all(
        self, client: httpx.AsyncClient, keys: List[str]
    ) -> List[Optional[RepoMetadata]]:
        return await asyncio.gather(*(self._fetch(client, key) for key in keys))

    async def _fetch(
        self, client: httpx.AsyncClient, key: str
    ) -> Optional[RepoMetadata]:
        url = f"{self.api_url}/repos/{key}"
        try:
            response = await client.get(url, headers=self.headers)
        except httpx.HTTPError as e:
            logger.warning(f"GitHub lookup failed for {key}: {e}")
            return None

        if not response.is_success:
            logger.warning(
                f"GitHub lookup for {key} returned status {response.status_code}"
            )
            return None

        try:
            return RepoMetadata.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.warning(f"Unreadable GitHub response for {key}: {e}")
            return None
