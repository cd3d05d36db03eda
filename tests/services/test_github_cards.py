import httpx
import pytest
import respx

from postmill.schemas.github import RepoMetadata
from postmill.services.github_cards import (
    GitHubCardEnricher,
    find_repo_references,
    render_repo_card,
)
from postmill.services.markdown_renderer import render_markdown

API = "https://api.github.test"


def repo_link(owner="psf", repo="requests", text=None):
    url = f"https://github.com/{owner}/{repo}"
    return f'<p><a href="{url}">{text or url}</a></p>'


def test_find_repo_references_covers_all_three_contexts():
    html = "\n".join(
        [
            repo_link(),
            "<p>https://github.com/pallets/flask</p>",
            '<ul>\n<li><a href="https://github.com/encode/httpx/">httpx</a></li>\n</ul>',
        ]
    )

    refs = find_repo_references(html)

    assert sorted(ref.key for ref in refs) == ["encode/httpx", "pallets/flask", "psf/requests"]


def test_find_repo_references_skips_deep_links_and_inline_links():
    html = (
        '<p><a href="https://github.com/psf/requests/issues/1">issue</a></p>\n'
        '<p>See <a href="https://github.com/psf/requests">requests</a> docs.</p>'
    )

    assert find_repo_references(html) == []


def test_render_repo_card_without_metadata_has_no_meta_line():
    card = render_repo_card("psf/requests", None)

    assert '<div class="github-card-title">psf/requests</div>' in card
    assert "github-card-description" not in card
    assert "github-card-meta" not in card


def test_render_repo_card_with_metadata():
    card = render_repo_card(
        "psf/requests",
        RepoMetadata(description="HTTP for <Humans>", stargazers_count=51234, language="Python"),
    )

    assert '<p class="github-card-description">HTTP for &lt;Humans&gt;</p>' in card
    assert '<span class="github-card-language">Python</span>' in card
    assert "★ 51,234" in card


@pytest.mark.asyncio
@respx.mock
async def test_enrich_deduplicates_lookups_and_replaces_every_occurrence():
    route = respx.get(f"{API}/repos/psf/requests").respond(
        200,
        json={"description": "HTTP for Humans", "stargazers_count": 10, "language": "Python"},
    )
    html = "\n".join([repo_link()] * 3 + ["<p>https://github.com/psf/requests</p>"])

    result = await GitHubCardEnricher(api_url=API).enrich(html)

    assert route.call_count == 1
    assert result.count("HTTP for Humans") == 4
    assert result.count('<div class="embed-card embed-github">') == 4
    assert "<p><a" not in result


@pytest.mark.asyncio
@respx.mock
async def test_enrich_failed_lookup_renders_bare_card_and_others_succeed():
    respx.get(f"{API}/repos/psf/requests").respond(404, json={"message": "Not Found"})
    respx.get(f"{API}/repos/pallets/flask").mock(side_effect=httpx.ConnectError("down"))
    respx.get(f"{API}/repos/encode/httpx").respond(
        200, json={"description": "Async HTTP", "stargazers_count": 5, "language": "Python"}
    )
    html = "\n".join(
        [repo_link(), repo_link("pallets", "flask"), repo_link("encode", "httpx")]
    )

    result = await GitHubCardEnricher(api_url=API).enrich(html)

    assert result.count('<div class="embed-card embed-github">') == 3
    assert result.count("github-card-meta") == 1
    assert "Async HTTP" in result


@pytest.mark.asyncio
@respx.mock
async def test_enrich_without_references_makes_no_requests():
    route = respx.get(url__startswith=API)
    html = '<p><a href="https://example.com">example</a></p>'

    result = await GitHubCardEnricher(api_url=API).enrich(html)

    assert result == html
    assert route.call_count == 0


@pytest.mark.asyncio
@respx.mock
async def test_enrich_sends_token_when_configured():
    route = respx.get(f"{API}/repos/psf/requests").respond(200, json={})

    await GitHubCardEnricher(api_url=API, token="t0k3n").enrich(repo_link())

    request = route.calls.last.request
    assert request.headers["Authorization"] == "Bearer t0k3n"
    assert request.headers["Accept"] == "application/vnd.github+json"


@pytest.mark.asyncio
@respx.mock
async def test_enrich_list_item_keeps_list_wrapper():
    respx.get(f"{API}/repos/encode/httpx").respond(200, json={"stargazers_count": 1})
    html = '<ul>\n<li><a href="https://github.com/encode/httpx">httpx</a></li>\n</ul>'

    result = await GitHubCardEnricher(api_url=API).enrich(html)

    assert result.startswith('<ul>\n<li><div class="embed-card embed-github">')
    assert result.endswith("</li>\n</ul>")


@pytest.mark.asyncio
@respx.mock
async def test_enrich_bare_url_list_item_from_markdown():
    respx.get(f"{API}/repos/encode/httpx").respond(
        200, json={"description": "A next-generation HTTP client.", "stargazers_count": 12}
    )
    html, _ = render_markdown("- https://github.com/encode/httpx\n")

    result = await GitHubCardEnricher(api_url=API).enrich(html)

    assert result.startswith('<ul>\n<li><div class="embed-card embed-github">')
    assert "A next-generation HTTP client." in result
