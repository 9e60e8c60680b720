from typing import Any, List

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.deps import get_current_user_id
from app.modules.posts.comments.schemas.comment import (
    Comment as CommentSchema, CommentCreate, CommentUpdate, ThreadComment
)
from app.modules.posts.comments.services.comment import (
    CommentThreadAssembler, create_comment, delete_comment, get_post_comment, update_comment
)

router = APIRouter()

@router.get("", response_model=List[ThreadComment])
def read_comments_by_post_id(
    *,
    db: Session = Depends(get_db),
    post_id: str = Path(..., description="The ID of the post to get comments for"),
) -> Any:
    """Top-level comments of a post, oldest first, each with its replies"""
    return CommentThreadAssembler(db).get_thread(post_id)

@router.post("", response_model=CommentSchema, status_code=status.HTTP_201_CREATED)
def create_new_comment(
    *,
    db: Session = Depends(get_db),
    post_id: str = Path(..., description="The ID of the post to comment on"),
    comment_in: CommentCreate,
    user_id: str = Depends(get_current_user_id),
) -> Any:
    """Comment on a post, or reply to one of its top-level comments with parent_id"""
    comment = create_comment(db, post_id, comment_in, user_id)
    return CommentThreadAssembler(db).to_schema(comment)

@router.put("/{comment_id}", response_model=CommentSchema)
def update_comment_by_id(
    *,
    db: Session = Depends(get_db),
    post_id: str = Path(..., description="The ID of the post"),
    comment_id: str,
    comment_in: CommentUpdate,
    user_id: str = Depends(get_current_user_id),
) -> Any:
    """Update a comment"""
    comment = update_comment(db, get_post_comment(db, post_id, comment_id), comment_in, user_id)
    return CommentThreadAssembler(db).to_schema(comment)

@router.delete("/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_comment_by_id(
    *,
    db: Session = Depends(get_db),
    post_id: str = Path(..., description="The ID of the post"),
    comment_id: str,
    user_id: str = Depends(get_current_user_id),
) -> None:
    """Delete a comment together with its replies"""
    delete_comment(db, get_post_comment(db, post_id, comment_id), user_id)
