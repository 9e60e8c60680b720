from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

class TargetType(str, Enum):
    POST = "post"
    COMMENT = "comment"

class ReactionAction(str, Enum):
    LIKE = "like"
    DISLIKE = "dislike"

class ReactionState(str, Enum):
    NONE = "none"
    LIKED = "liked"
    DISLIKED = "disliked"

class ReactionRequest(BaseModel):
    action: ReactionAction

class ReactionCounts(BaseModel):
    """Aggregate counts for one target, serialized as likeCount/dislikeCount"""
    like_count: int = 0
    dislike_count: int = 0

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class ReactionResult(ReactionCounts):
    """Counts after a toggle plus the caller's resulting state"""
    user_reaction: Optional[ReactionState] = None
