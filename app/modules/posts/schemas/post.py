from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.config import settings
from app.core.validation import sanitize_text
from app.modules.categories.services.category import normalize_category_names

class PostCreate(BaseModel):
    title: str
    content: str
    image_url: Optional[str] = None
    category_names: List[str] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def clean_title(cls, v: str) -> str:
        return sanitize_text(v, settings.TITLE_MAX_LENGTH, "title")

    @field_validator("content")
    @classmethod
    def clean_content(cls, v: str) -> str:
        return sanitize_text(v, settings.CONTENT_MAX_LENGTH, "content")

    @field_validator("category_names")
    @classmethod
    def clean_categories(cls, v: List[str]) -> List[str]:
        return normalize_category_names(v)

class PostUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None

    @field_validator("title")
    @classmethod
    def clean_title(cls, v: Optional[str]) -> Optional[str]:
        return sanitize_text(v, settings.TITLE_MAX_LENGTH, "title") if v is not None else v

    @field_validator("content")
    @classmethod
    def clean_content(cls, v: Optional[str]) -> Optional[str]:
        return sanitize_text(v, settings.CONTENT_MAX_LENGTH, "content") if v is not None else v

class PostInDBBase(BaseModel):
    id: str
    author_id: str
    title: str
    content: str
    image_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

class Post(PostInDBBase):
    """Post model returned to client"""
    username: Optional[str] = None
    avatar_url: Optional[str] = None
    categories: List[str] = Field(default_factory=list)
    like_count: int = 0
    dislike_count: int = 0
    comment_count: int = 0
    user_reaction: Optional[str] = None

class PostDeleted(BaseModel):
    message: str = "Post deleted"
