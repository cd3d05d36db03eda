from typing import Optional

from pydantic import BaseModel


class RepoMetadata(BaseModel):
    description: Optional[str] = None
    stargazers_count: int = 0
    language: Optional[str] = None
