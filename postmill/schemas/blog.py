from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PostMeta(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str = "Untitled"
    slug: str = ""
    date: str = ""
    categories: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    excerpt: str = ""
    image: Optional[str] = None
    fixedPage: bool = False
    noAds: bool = False


class Post(PostMeta):
    content: str  # Enriched HTML
    rawContent: str  # Markdown body, safe to embed in a text/plain script tag


class TocItem(BaseModel):
    level: int
    text: str
    id: str


class AdjacentPosts(BaseModel):
    prev: Optional[PostMeta] = None  # older
    next: Optional[PostMeta] = None  # newer
