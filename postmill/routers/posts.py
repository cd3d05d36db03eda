import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from postmill import dependencies as deps
from postmill.schemas.blog import AdjacentPosts, Post, PostMeta
from postmill.security import get_admin_key
from postmill.services.posts_service import PostsService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/posts", response_model=List[PostMeta])
async def list_posts(service: PostsService = Depends(deps.get_posts_service)):
    """Get all published posts, newest first."""
    try:
        return await service.list_posts()
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error listing posts: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve posts")


@router.get("/posts/{slug}", response_model=Post)
async def get_post(
    slug: str,
    service: PostsService = Depends(deps.get_posts_service),
):
    """Get a single rendered post or page by slug."""
    try:
        post = await service.get_post(slug)
        if not post:
            raise HTTPException(status_code=404, detail="Post not found")
        return post
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error retrieving post {slug}: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve post")


@router.get("/posts/{slug}/adjacent", response_model=AdjacentPosts)
async def get_adjacent_posts(
    slug: str,
    service: PostsService = Depends(deps.get_posts_service),
):
    try:
        return await service.get_adjacent_posts(slug)
    except Exception as e:
        logger.error(f"Unexpected error finding neighbours of {slug}: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve posts")


@router.get("/categories/{category}", response_model=List[PostMeta])
async def list_posts_by_category(
    category: str,
    service: PostsService = Depends(deps.get_posts_service),
):
    try:
        return await service.get_posts_by_category(category)
    except Exception as e:
        logger.error(f"Unexpected error listing category {category}: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve posts")


@router.post("/api/invalidate", dependencies=[Depends(get_admin_key)])
async def invalidate_cache(
    slug: Optional[str] = None,
    service: PostsService = Depends(deps.get_posts_service),
):
    """Drop cached renders: one post (and the index) with ?slug=, otherwise everything."""
    try:
        await service.invalidate_cache(slug)
    except Exception as e:
        logger.error(f"Failed to invalidate cache for {slug or 'all'}: {e}")
        raise HTTPException(status_code=500, detail="Failed to invalidate cache")
    return {"ok": True, "slug": slug or "all"}
