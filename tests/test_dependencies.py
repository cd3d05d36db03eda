from postmill.dependencies import (
    get_cache_repo,
    get_github_enricher,
    get_posts_repo,
    get_posts_service,
)
from postmill.repos.cache_repo import CacheRepo
from postmill.repos.posts_repo import CouchPostsRepo
from postmill.services.content_parser import ContentParser
from postmill.services.github_cards import GitHubCardEnricher
from postmill.services.posts_service import PostsService


def test_get_posts_repo_constructs_repo_with_parser():
    class FakeCouch:
        pass

    couch_db = FakeCouch()
    repo = get_posts_repo(couch=couch_db)

    assert isinstance(repo, CouchPostsRepo)
    assert repo.db is couch_db
    assert isinstance(repo.parser, ContentParser)
    assert repo.parser.db is couch_db


def test_get_cache_repo_wraps_session():
    class FakeSession:
        pass

    session = FakeSession()
    repo = get_cache_repo(db=session)

    assert isinstance(repo, CacheRepo)
    assert repo.db is session


def test_get_github_enricher_uses_settings():
    enricher = get_github_enricher()

    assert isinstance(enricher, GitHubCardEnricher)
    assert enricher.client is None
    assert not enricher.api_url.endswith("/")


def test_get_posts_service_constructs_service():
    repo, cache, enricher = object(), object(), object()

    svc = get_posts_service(repo=repo, cache=cache, enricher=enricher)

    assert isinstance(svc, PostsService)
    assert svc.repo is repo
    assert svc.cache is cache
    assert svc.enricher is enricher
    assert svc.posts_prefix == "posts/"
    assert svc.pages_prefix == "pages/"
