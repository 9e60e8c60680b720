"""
Reverse-chronological post feeds with page/limit paging.

``has_more`` is a heuristic: a page that comes back exactly full is assumed
to have a successor. When exactly ``limit`` posts remain the next page is
empty; no count query is issued to tell the two cases apart.
"""
from typing import List, Optional
import logging

from sqlalchemy.orm import Query, Session

from app.core.config import settings
from app.core.errors import ValidationError
from app.modules.home_feed.schemas.feed import FeedMode, FeedPage
from app.modules.posts.models.post import Post as PostModel
from app.modules.posts.reactions.models.reaction import Reaction
from app.modules.posts.reactions.schemas.reaction import TargetType
from app.modules.posts.schemas.post import Post as PostSchema
from app.modules.posts.services.post import to_post_schemas

logger = logging.getLogger("app")

# largest OFFSET a 64-bit SQL integer can hold
MAX_OFFSET = 2 ** 63 - 1

class PostFeedPaginator:
    def __init__(
        self,
        db: Session,
        default_limit: int = settings.FEED_DEFAULT_LIMIT,
        max_limit: int = settings.FEED_MAX_LIMIT,
    ):
        self.db = db
        self.default_limit = default_limit
        self.max_limit = max_limit

    def clamp_limit(self, limit: Optional[int]) -> int:
        if limit is None or limit < 1:
            return self.default_limit
        return min(limit, self.max_limit)

    @staticmethod
    def clamp_page(page: Optional[int]) -> int:
        if page is None or page < 1:
            return 1
        return page

    def page(
        self,
        page_number: Optional[int] = 1,
        limit: Optional[int] = None,
        mode: FeedMode = FeedMode.RESET,
        viewer_id: Optional[str] = None,
    ) -> FeedPage:
        """All posts, newest first"""
        return self._paginate(self.db.query(PostModel), page_number, limit, mode, viewer_id)

    def user_page(
        self,
        user_id: str,
        page_number: Optional[int] = 1,
        limit: Optional[int] = None,
        mode: FeedMode = FeedMode.RESET,
    ) -> FeedPage:
        """Posts authored by ``user_id``"""
        query = self.db.query(PostModel).filter(PostModel.author_id == user_id)
        return self._paginate(query, page_number, limit, mode, user_id)

    def liked_page(
        self,
        user_id: str,
        page_number: Optional[int] = 1,
        limit: Optional[int] = None,
        mode: FeedMode = FeedMode.RESET,
    ) -> FeedPage:
        """Posts ``user_id`` currently likes"""
        query = (
            self.db.query(PostModel)
            .join(
                Reaction,
                (Reaction.target_id == PostModel.id)
                & (Reaction.target_type == TargetType.POST.value),
            )
            .filter(Reaction.user_id == user_id, Reaction.value == "like")
        )
        return self._paginate(query, page_number, limit, mode, user_id)

    def _paginate(
        self,
        query: Query,
        page_number: Optional[int],
        limit: Optional[int],
        mode: FeedMode,
        viewer_id: Optional[str],
    ) -> FeedPage:
        page_number = self.clamp_page(page_number)
        limit = self.clamp_limit(limit)
        offset = (page_number - 1) * limit
        if offset > MAX_OFFSET:
            raise ValidationError("page is out of range")

        posts = (
            query.order_by(PostModel.created_at.desc(), PostModel.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        logger.debug(f"Feed page {page_number} (limit={limit}, offset={offset}) returned {len(posts)} posts")

        return FeedPage(
            posts=to_post_schemas(self.db, posts, viewer_id),
            page=page_number,
            limit=limit,
            has_more=len(posts) == limit,
            mode=FeedMode(mode),
        )

def merge_pages(existing: List[PostSchema], page: FeedPage) -> List[PostSchema]:
    """Combine a caller's accumulated posts with a freshly fetched page"""
    if page.mode is FeedMode.RESET:
        return list(page.posts)

    seen = {post.id for post in existing}
    return list(existing) + [post for post in page.posts if post.id not in seen]
