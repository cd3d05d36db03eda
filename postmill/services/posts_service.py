import datetime
import logging
from typing import List, Optional

from postmill.schemas.blog import AdjacentPosts, Post, PostMeta
from postmill.services.markdown_pipeline import parse_front_matter, parse_markdown
from postmill.settings import settings

logger = logging.getLogger(__name__)

INDEX_KEY = "index"
DOC_KEY_PREFIX = "doc:"


def doc_cache_key(slug: str) -> str:
    return f"{DOC_KEY_PREFIX}{slug}"


class PostsService:
    """
    Cache-aside access to rendered posts.

    The post index and every rendered post are cached without expiry. Edits
    in storage only become visible after invalidate_cache() is called.
    """

    def __init__(
        self,
        repo,
        cache,
        enricher=None,
        posts_prefix: Optional[str] = None,
        pages_prefix: Optional[str] = None,
    ):
        self.repo = repo
        self.cache = cache
        self.enricher = enricher
        self.posts_prefix = posts_prefix or settings.POSTS_PREFIX
        self.pages_prefix = pages_prefix or settings.PAGES_PREFIX

    async def list_posts(self) -> List[PostMeta]:
        cached = await self.cache.get(INDEX_KEY)
        if cached is not None:
            logger.debug("Post index cache hit")
            return [PostMeta.model_validate(item) for item in cached]

        logger.debug("Post index cache miss, reading storage")
        posts = []
        for key in await self.repo.list_keys(self.posts_prefix):
            try:
                text = await self.repo.get_text(key)
            except Exception as e:
                logger.warning(f"Skipping unreadable document {key}: {e}")
                continue
            if not text:
                continue

            meta = parse_front_matter(text)
            if meta.slug:
                posts.append(meta)

        # stable sort keeps storage order for equal dates
        posts.sort(key=_date_sort_key, reverse=True)
        await self.cache.put(INDEX_KEY, [post.model_dump() for post in posts])
        return posts

    async def get_post(self, slug: str) -> Optional[Post]:
        if not slug:
            return None

        cache_key = doc_cache_key(slug)
        cached = await self.cache.get(cache_key)
        if cached is not None:
            logger.debug(f"Post cache hit for {slug}")
            return Post.model_validate(cached)

        for prefix in (self.posts_prefix, self.pages_prefix):
            for key in await self.repo.list_keys(prefix):
                text = await self.repo.get_text(key)
                if not text or parse_front_matter(text).slug != slug:
                    continue

                post = await parse_markdown(text, enricher=self.enricher)
                await self.cache.put(cache_key, post.model_dump())
                logger.info(f"Rendered and cached {key} as {slug}")
                return post

        return None

    async def get_posts_by_category(self, category: str) -> List[PostMeta]:
        posts = await self.list_posts()
        return [post for post in posts if category in post.categories]

    async def get_adjacent_posts(self, slug: str) -> AdjacentPosts:
        """Neighbours in the date-descending index: next is newer, prev is older."""
        posts = await self.list_posts()
        index = next((i for i, post in enumerate(posts) if post.slug == slug), None)
        if index is None:
            return AdjacentPosts()

        newer = posts[index - 1] if index > 0 else None
        older = posts[index + 1] if index < len(posts) - 1 else None
        return AdjacentPosts(prev=older, next=newer)

    async def invalidate_cache(self, slug: Optional[str] = None) -> None:
        await self.cache.delete(INDEX_KEY)

        if slug:
            await self.cache.delete(doc_cache_key(slug))
            logger.info(f"Invalidated cache for {slug} and the post index")
            return

        keys = await self.cache.list_keys(DOC_KEY_PREFIX)
        for key in keys:
            await self.cache.delete(key)
        logger.info(f"Invalidated post index and {len(keys)} cached post(s)")


def _date_sort_key(post: PostMeta) -> datetime.datetime:
    try:
        parsed = datetime.datetime.fromisoformat(post.date)
    except ValueError:
        return datetime.datetime.min
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(datetime.timezone.utc).replace(tzinfo=None)
    return parsed
