from typing import Any, Optional

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.deps import get_current_user_id, get_optional_user_id
from app.modules.posts.reactions.schemas.reaction import (
    ReactionRequest, ReactionResult, TargetType
)
from app.modules.posts.reactions.services.reaction import ReactionLedger

router = APIRouter()

def _read_reactions(db: Session, target_type: TargetType, target_id: str, user_id: Optional[str]) -> ReactionResult:
    ledger = ReactionLedger(db)
    ledger.ensure_target_exists(target_type, target_id)
    counts = ledger.counts(target_type, target_id)
    return ReactionResult(
        like_count=counts.like_count,
        dislike_count=counts.dislike_count,
        user_reaction=ledger.user_reaction(user_id, target_type, target_id) if user_id else None,
    )

@router.post("/posts/{post_id}/reactions", response_model=ReactionResult)
def toggle_post_reaction(
    *,
    db: Session = Depends(get_db),
    post_id: str = Path(..., description="The ID of the post to react to"),
    reaction_in: ReactionRequest,
    user_id: str = Depends(get_current_user_id),
) -> Any:
    """Like or dislike a post; repeating the same action removes it"""
    return ReactionLedger(db).toggle(user_id, TargetType.POST, post_id, reaction_in.action)

@router.get("/posts/{post_id}/reactions", response_model=ReactionResult)
def read_post_reactions(
    *,
    db: Session = Depends(get_db),
    post_id: str = Path(..., description="The ID of the post"),
    user_id: Optional[str] = Depends(get_optional_user_id),
) -> Any:
    """Like/dislike counts for a post"""
    return _read_reactions(db, TargetType.POST, post_id, user_id)

@router.post("/comments/{comment_id}/reactions", response_model=ReactionResult)
def toggle_comment_reaction(
    *,
    db: Session = Depends(get_db),
    comment_id: str = Path(..., description="The ID of the comment to react to"),
    reaction_in: ReactionRequest,
    user_id: str = Depends(get_current_user_id),
) -> Any:
    """Like or dislike a comment; repeating the same action removes it"""
    return ReactionLedger(db).toggle(user_id, TargetType.COMMENT, comment_id, reaction_in.action)

@router.get("/comments/{comment_id}/reactions", response_model=ReactionResult)
def read_comment_reactions(
    *,
    db: Session = Depends(get_db),
    comment_id: str = Path(..., description="The ID of the comment"),
    user_id: Optional[str] = Depends(get_optional_user_id),
) -> Any:
    """Like/dislike counts for a comment"""
    return _read_reactions(db, TargetType.COMMENT, comment_id, user_id)
