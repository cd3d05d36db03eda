from fastapi import Depends

from postmill.db.couchdb import get_couch
from postmill.db.postgres.base import get_db
from postmill.repos.cache_repo import CacheRepo
from postmill.repos.posts_repo import CouchPostsRepo
from postmill.services.github_cards import GitHubCardEnricher
from postmill.services.posts_service import PostsService


def get_posts_repo(couch=Depends(get_couch)):
    return CouchPostsRepo(couch)


def get_cache_repo(db=Depends(get_db)):
    return CacheRepo(db)


def get_github_enricher():
    return GitHubCardEnricher()


def get_posts_service(
    repo=Depends(get_posts_repo),
    cache=Depends(get_cache_repo),
    enricher=Depends(get_github_enricher),
):
    return PostsService(repo=repo, cache=cache, enricher=enricher)
