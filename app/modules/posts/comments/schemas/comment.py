from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.config import settings
from app.core.validation import sanitize_text

class CommentCreate(BaseModel):
    content: str
    parent_id: Optional[str] = None

    @field_validator("content")
    @classmethod
    def clean_content(cls, v: str) -> str:
        return sanitize_text(v, settings.COMMENT_MAX_LENGTH, "comment")

class CommentUpdate(BaseModel):
    content: str

    @field_validator("content")
    @classmethod
    def clean_content(cls, v: str) -> str:
        return sanitize_text(v, settings.COMMENT_MAX_LENGTH, "comment")

class CommentInDBBase(BaseModel):
    id: str
    post_id: str
    author_id: str
    content: str
    parent_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

class Comment(CommentInDBBase):
    """Comment model returned to client"""
    username: Optional[str] = None
    avatar_url: Optional[str] = None
    like_count: int = 0
    dislike_count: int = 0

class ThreadComment(Comment):
    """Top-level comment with its direct replies"""
    replies: List[Comment] = Field(default_factory=list)
