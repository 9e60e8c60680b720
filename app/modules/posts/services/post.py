from typing import List, Optional
import uuid
import logging
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, translate_storage_errors
from app.modules.auth.services.authorization import authorize_owner
from app.modules.categories.models.category import post_categories
from app.modules.categories.services.category import get_or_create_categories
from app.modules.posts.comments.services.comment import count_comments_for_posts, delete_comments_for_post
from app.modules.posts.models.post import Post
from app.modules.posts.reactions.schemas.reaction import ReactionCounts, ReactionState, TargetType
from app.modules.posts.reactions.services.reaction import ReactionLedger
from app.modules.posts.schemas.post import Post as PostSchema, PostCreate, PostUpdate
from app.modules.user_management.models.user import User as UserModel

logger = logging.getLogger("app")

def get_post(db: Session, post_id: str) -> Optional[Post]:
    """Get post by ID"""
    return db.query(Post).filter(Post.id == post_id).first()

def get_post_or_404(db: Session, post_id: str) -> Post:
    post = get_post(db, post_id)
    if not post:
        raise NotFoundError("Post not found")
    return post

def to_post_schemas(db: Session, posts: List[Post], viewer_id: Optional[str] = None) -> List[PostSchema]:
    """
    Enrich posts with author, categories, reaction and comment counts.

    Only the given posts are queried, so a "load more" page costs the same
    as the first page.
    """
    if not posts:
        return []

    post_ids = [post.id for post in posts]
    author_ids = {post.author_id for post in posts}
    authors = {user.id: user for user in db.query(UserModel).filter(UserModel.id.in_(author_ids))}

    ledger = ReactionLedger(db)
    counts = ledger.counts_for_many(TargetType.POST, post_ids)
    reactions = ledger.user_reactions_for_many(viewer_id, TargetType.POST, post_ids)
    comment_counts = count_comments_for_posts(db, post_ids)

    result = []
    for post in posts:
        author = authors.get(post.author_id)
        post_counts = counts.get(post.id, ReactionCounts())
        reaction = reactions.get(post.id, ReactionState.NONE) if viewer_id else None
        result.append(PostSchema(
            id=post.id,
            author_id=post.author_id,
            title=post.title,
            content=post.content,
            image_url=post.image_url,
            created_at=post.created_at,
            updated_at=post.updated_at,
            username=author.username if author else None,
            avatar_url=author.avatar_url if author else None,
            categories=[category.name for category in post.categories],
            like_count=post_counts.like_count,
            dislike_count=post_counts.dislike_count,
            comment_count=comment_counts.get(post.id, 0),
            user_reaction=reaction.value if reaction else None,
        ))
    return result

def create_post(db: Session, post_in: PostCreate, author_id: str) -> Post:
    """Create new post"""
    logger.info(f"Creating post for author ID: {author_id}")
    with translate_storage_errors(db, "create post"):
        post = Post(
            id=str(uuid.uuid4()),
            author_id=author_id,
            title=post_in.title,
            content=post_in.content,
            image_url=post_in.image_url,
        )
        post.categories = get_or_create_categories(db, post_in.category_names)
        db.add(post)
        db.commit()
    db.refresh(post)
    return post

def update_post(db: Session, post: Post, post_in: PostUpdate, user_id: str) -> Post:
    """Update post; only the author may do this"""
    authorize_owner(user_id, post.author_id)
    logger.info(f"Updating post with ID: {post.id}")

    update_data = post_in.model_dump(exclude_unset=True, exclude_none=True)
    with translate_storage_errors(db, "update post"):
        for field, value in update_data.items():
            setattr(post, field, value)
        db.commit()
    db.refresh(post)
    return post

def delete_post(db: Session, post: Post, user_id: str) -> None:
    """
    Delete post and everything hanging off it, in one transaction:
    1. Reactions on the post's comments, the replies, the comments
    2. Reactions on the post
    3. Category links
    4. The post itself
    """
    authorize_owner(user_id, post.author_id)
    post_id = post.id
    logger.info(f"Deleting post with ID: {post_id}")

    with translate_storage_errors(db, "delete post"):
        removed_comments = delete_comments_for_post(db, post_id)
        ReactionLedger(db).delete_for_targets(TargetType.POST, [post_id])
        db.execute(post_categories.delete().where(post_categories.c.post_id == post_id))
        db.query(Post).filter(Post.id == post_id).delete(synchronize_session=False)
        db.commit()

    logger.info(f"Deleted post {post_id} and {removed_comments} top-level comments")
