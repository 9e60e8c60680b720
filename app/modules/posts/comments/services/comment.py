from typing import Dict, Iterable, List, Optional
import uuid
import logging
from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session, aliased

from app.core.errors import NotFoundError, ValidationError, translate_storage_errors
from app.modules.auth.services.authorization import authorize_owner
from app.modules.posts.comments.models.comment import Comment
from app.modules.posts.comments.schemas.comment import (
    CommentCreate, CommentUpdate, Comment as CommentSchema, ThreadComment
)
from app.modules.posts.models.post import Post
from app.modules.posts.reactions.schemas.reaction import ReactionCounts, TargetType
from app.modules.posts.reactions.services.reaction import ReactionLedger
from app.modules.user_management.models.user import User as UserModel

logger = logging.getLogger("app")

def _ordered(query):
    # created_at ties are broken by id so repeated reads return the same order
    return query.order_by(Comment.created_at.asc(), Comment.id.asc())

def _ensure_post_exists(db: Session, post_id: str) -> None:
    if not db.query(Post.id).filter(Post.id == post_id).first():
        raise NotFoundError("Post not found")

def get_comment(db: Session, comment_id: str) -> Optional[Comment]:
    """Get comment by ID"""
    return db.query(Comment).filter(Comment.id == comment_id).first()

def get_post_comment(db: Session, post_id: str, comment_id: str) -> Comment:
    """Get a comment that belongs to ``post_id`` or raise NotFoundError"""
    _ensure_post_exists(db, post_id)
    comment = get_comment(db, comment_id)
    if not comment or comment.post_id != post_id:
        raise NotFoundError("Comment not found")
    return comment

class CommentThreadAssembler:
    """
    Builds a post's comments as a two-level structure: top-level comments,
    each carrying its direct replies. Read-only.
    """

    def __init__(self, db: Session):
        self.db = db
        self.ledger = ReactionLedger(db)

    def top_level(self, post_id: str) -> List[Comment]:
        return _ordered(
            self.db.query(Comment).filter(Comment.post_id == post_id, Comment.parent_id.is_(None))
        ).all()

    def replies_for(self, parent_ids: List[str]) -> Dict[str, List[Comment]]:
        """Direct replies grouped by parent id, each list in creation order"""
        grouped: Dict[str, List[Comment]] = {parent_id: [] for parent_id in parent_ids}
        if not parent_ids:
            return grouped
        rows = _ordered(self.db.query(Comment).filter(Comment.parent_id.in_(parent_ids))).all()
        for reply in rows:
            grouped[reply.parent_id].append(reply)
        return grouped

    def get_thread(self, post_id: str) -> List[ThreadComment]:
        _ensure_post_exists(self.db, post_id)

        top = self.top_level(post_id)
        replies = self.replies_for([comment.id for comment in top])
        # Rows replying to a reply never get here: their parent is not top-level.

        all_comments = top + [reply for group in replies.values() for reply in group]
        authors = self._authors({comment.author_id for comment in all_comments})
        counts = self.ledger.counts_for_many(TargetType.COMMENT, [comment.id for comment in all_comments])

        return [
            ThreadComment(
                **self._to_schema(comment, authors, counts).model_dump(),
                replies=[self._to_schema(reply, authors, counts) for reply in replies[comment.id]],
            )
            for comment in top
        ]

    def _authors(self, author_ids: Iterable[str]) -> Dict[str, UserModel]:
        author_ids = list(author_ids)
        if not author_ids:
            return {}
        return {user.id: user for user in self.db.query(UserModel).filter(UserModel.id.in_(author_ids))}

    @staticmethod
    def _to_schema(comment: Comment, authors: Dict[str, UserModel], counts: Dict[str, ReactionCounts]) -> CommentSchema:
        author = authors.get(comment.author_id)
        comment_counts = counts.get(comment.id, ReactionCounts())
        return CommentSchema(
            id=comment.id,
            post_id=comment.post_id,
            author_id=comment.author_id,
            content=comment.content,
            parent_id=comment.parent_id,
            created_at=comment.created_at,
            updated_at=comment.updated_at,
            username=author.username if author else None,
            avatar_url=author.avatar_url if author else None,
            like_count=comment_counts.like_count,
            dislike_count=comment_counts.dislike_count,
        )

    def to_schema(self, comment: Comment) -> CommentSchema:
        """Single comment with author and counts"""
        return self._to_schema(
            comment,
            self._authors([comment.author_id]),
            self.ledger.counts_for_many(TargetType.COMMENT, [comment.id]),
        )

def count_thread(thread: List[ThreadComment]) -> int:
    """Top-level comments plus all their replies"""
    return len(thread) + sum(len(comment.replies) for comment in thread)

def count_comments_for_posts(db: Session, post_ids: List[str]) -> Dict[str, int]:
    """Displayed comment count per post: top-level comments and their direct replies"""
    if not post_ids:
        return {}

    parent = aliased(Comment)
    rows = (
        db.query(Comment.post_id, func.count(Comment.id))
        .outerjoin(parent, Comment.parent_id == parent.id)
        .filter(Comment.post_id.in_(post_ids))
        .filter(or_(Comment.parent_id.is_(None), and_(parent.id.isnot(None), parent.parent_id.is_(None))))
        .group_by(Comment.post_id)
        .all()
    )
    return {post_id: count for post_id, count in rows}

def create_comment(db: Session, post_id: str, comment_in: CommentCreate, author_id: str) -> Comment:
    """Create a top-level comment or a reply to a top-level comment"""
    _ensure_post_exists(db, post_id)

    if comment_in.parent_id:
        parent = get_comment(db, comment_in.parent_id)
        if not parent or parent.post_id != post_id:
            raise NotFoundError("Parent comment not found")
        if parent.parent_id is not None:
            raise ValidationError("Replies to replies are not supported")

    comment = Comment(
        id=str(uuid.uuid4()),
        post_id=post_id,
        author_id=author_id,
        content=comment_in.content,
        parent_id=comment_in.parent_id,
    )
    with translate_storage_errors(db, "create comment"):
        db.add(comment)
        db.commit()
    db.refresh(comment)

    logger.info(f"User {author_id} {'replied to ' + comment.parent_id if comment.parent_id else 'commented'} on post {post_id}")
    return comment

def update_comment(db: Session, comment: Comment, comment_in: CommentUpdate, user_id: str) -> Comment:
    """Update comment content; only the author may do this"""
    authorize_owner(user_id, comment.author_id)

    with translate_storage_errors(db, "update comment"):
        comment.content = comment_in.content
        db.commit()
    db.refresh(comment)
    return comment

def _descendant_ids(db: Session, root_id: str) -> List[str]:
    """Ids of every comment below ``root_id``; normally just its replies"""
    found: List[str] = []
    frontier = [root_id]
    while frontier:
        frontier = [cid for (cid,) in db.query(Comment.id).filter(Comment.parent_id.in_(frontier))]
        frontier = [cid for cid in frontier if cid not in found]
        found.extend(frontier)
    return found

def delete_comment(db: Session, comment: Comment, user_id: str) -> None:
    """Delete a comment with its replies and their reactions; author only"""
    authorize_owner(user_id, comment.author_id)
    comment_id = comment.id

    with translate_storage_errors(db, "delete comment"):
        descendants = _descendant_ids(db, comment_id)
        ReactionLedger(db).delete_for_targets(TargetType.COMMENT, descendants + [comment_id])
        # deepest rows first so no parent is removed before its children
        for cid in reversed(descendants):
            db.query(Comment).filter(Comment.id == cid).delete(synchronize_session=False)
        db.query(Comment).filter(Comment.id == comment_id).delete(synchronize_session=False)
        db.commit()

    logger.info(f"Deleted comment {comment_id} with {len(descendants)} replies")

def delete_comments_for_post(db: Session, post_id: str) -> int:
    """Remove a post's whole comment tree and its reactions. Does not commit."""
    comment_ids = [cid for (cid,) in db.query(Comment.id).filter(Comment.post_id == post_id)]
    ReactionLedger(db).delete_for_targets(TargetType.COMMENT, comment_ids)
    # replies first; one statement, so foreign keys are checked once at its end
    db.query(Comment).filter(Comment.post_id == post_id, Comment.parent_id.isnot(None)).delete(synchronize_session=False)
    return db.query(Comment).filter(Comment.post_id == post_id).delete(synchronize_session=False)
