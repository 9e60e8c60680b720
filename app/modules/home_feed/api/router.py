from typing import Any, Optional, Tuple
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.deps import get_optional_user_id, get_pagination
from app.modules.home_feed.schemas.feed import FeedMode, FeedPage
from app.modules.home_feed.services.feed import PostFeedPaginator

router = APIRouter()

@router.get("", response_model=FeedPage)
def read_home_feed(
    *,
    db: Session = Depends(get_db),
    paging: Tuple[Optional[int], Optional[int]] = Depends(get_pagination),
    mode: FeedMode = Query(FeedMode.RESET, description="reset replaces the client's list, append extends it"),
    viewer_id: Optional[str] = Depends(get_optional_user_id),
) -> Any:
    """One feed page with its paging metadata"""
    page, limit = paging
    return PostFeedPaginator(db).page(page, limit, mode=mode, viewer_id=viewer_id)
