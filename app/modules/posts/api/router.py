from typing import Any, List, Optional, Tuple
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.deps import get_current_user_id, get_optional_user_id, get_pagination
from app.modules.home_feed.services.feed import PostFeedPaginator
from app.modules.posts.schemas.post import Post as PostSchema, PostCreate, PostDeleted, PostUpdate
from app.modules.posts.services.post import (
    create_post, delete_post, get_post_or_404, to_post_schemas, update_post
)

logger = logging.getLogger("app")

router = APIRouter()

@router.get("", response_model=List[PostSchema])
def read_posts(
    db: Session = Depends(get_db),
    paging: Tuple[Optional[int], Optional[int]] = Depends(get_pagination),
    viewer_id: Optional[str] = Depends(get_optional_user_id),
) -> Any:
    """
    Retrieve posts newest first. A response as long as the requested limit
    means another page may exist.
    """
    page, limit = paging
    return PostFeedPaginator(db).page(page, limit, viewer_id=viewer_id).posts

@router.get("/liked", response_model=List[PostSchema])
def read_liked_posts(
    db: Session = Depends(get_db),
    paging: Tuple[Optional[int], Optional[int]] = Depends(get_pagination),
    user_id: str = Depends(get_current_user_id),
) -> Any:
    """Posts the current user likes"""
    page, limit = paging
    return PostFeedPaginator(db).liked_page(user_id, page, limit).posts

@router.get("/mine", response_model=List[PostSchema])
def read_my_posts(
    db: Session = Depends(get_db),
    paging: Tuple[Optional[int], Optional[int]] = Depends(get_pagination),
    user_id: str = Depends(get_current_user_id),
) -> Any:
    """Posts written by the current user"""
    page, limit = paging
    return PostFeedPaginator(db).user_page(user_id, page, limit).posts

@router.post("", response_model=PostSchema, status_code=status.HTTP_201_CREATED)
def create_new_post(
    *,
    db: Session = Depends(get_db),
    post_in: PostCreate,
    user_id: str = Depends(get_current_user_id),
) -> Any:
    """
    Create new post.
    """
    post = create_post(db, post_in, user_id)
    return to_post_schemas(db, [post], user_id)[0]

@router.get("/{post_id}", response_model=PostSchema)
def read_post_by_id(
    post_id: str,
    db: Session = Depends(get_db),
    viewer_id: Optional[str] = Depends(get_optional_user_id),
) -> Any:
    """
    Get post by ID.
    """
    post = get_post_or_404(db, post_id)
    return to_post_schemas(db, [post], viewer_id)[0]

@router.put("/{post_id}", response_model=PostSchema)
def update_post_by_id(
    *,
    db: Session = Depends(get_db),
    post_id: str,
    post_in: PostUpdate,
    user_id: str = Depends(get_current_user_id),
) -> Any:
    """
    Update a post. Only its author may do this.
    """
    post = update_post(db, get_post_or_404(db, post_id), post_in, user_id)
    return to_post_schemas(db, [post], user_id)[0]

@router.delete("/{post_id}", response_model=PostDeleted)
def delete_post_by_id(
    *,
    db: Session = Depends(get_db),
    post_id: str,
    user_id: str = Depends(get_current_user_id),
) -> Any:
    """
    Delete a post and all associated data (comments, replies and reactions).
    Only its author may do this.
    """
    delete_post(db, get_post_or_404(db, post_id), user_id)
    return PostDeleted()
