import asyncio
import logging

from postmill.db.couchdb import get_couch
from postmill.db.postgres.base import SessionLocal, init_db
from postmill.repos.cache_repo import CacheRepo
from postmill.repos.posts_repo import CouchPostsRepo
from postmill.services.github_cards import GitHubCardEnricher
from postmill.services.posts_service import PostsService

logger = logging.getLogger(__name__)


async def warm_cache(service) -> int:
    """Render the index and every listed post. Returns how many posts were cached."""
    index = await service.list_posts()
    warmed = 0
    for meta in index:
        try:
            if await service.get_post(meta.slug):
                warmed += 1
        except Exception as e:
            logger.warning(f"Could not warm {meta.slug}: {e}")
    return warmed


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
    session = SessionLocal()
    try:
        service = PostsService(
            repo=CouchPostsRepo(get_couch()),
            cache=CacheRepo(session),
            enricher=GitHubCardEnricher(),
        )
        count = asyncio.run(warm_cache(service))
        logger.info(f"Warm-up completed: {count} posts cached.")
    except Exception as e:
        logger.error(f"Warm-up failed: {e}", exc_info=True)
    finally:
        session.close()
