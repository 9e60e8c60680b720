from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict

class UserPublic(BaseModel):
    """User fields visible to everyone"""
    id: str
    username: str
    avatar_url: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class User(UserPublic):
    """User model returned to its owner"""
    email: str
