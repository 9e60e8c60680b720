from enum import Enum
from typing import List
from pydantic import BaseModel, Field

from app.modules.posts.schemas.post import Post

class FeedMode(str, Enum):
    """How a caller combines a fetched page with what it already holds"""
    RESET = "reset"    # first load or refresh: replace
    APPEND = "append"  # load more: add to the end

class FeedPage(BaseModel):
    posts: List[Post] = Field(default_factory=list)
    page: int
    limit: int
    # True when the page came back full; more rows may or may not exist
    has_more: bool
    mode: FeedMode = FeedMode.RESET
