from sqlalchemy import Column, String, DateTime, Text, ForeignKey

from app.core.security import utcnow
from app.db.session import Base

class Comment(Base):
    __tablename__ = "comments"

    id = Column(String, primary_key=True, index=True)
    content = Column(Text, nullable=False)
    author_id = Column(String, ForeignKey("users.id"), nullable=False)
    post_id = Column(String, ForeignKey("posts.id"), nullable=False, index=True)
    # null for top-level comments; replies point at a top-level comment
    parent_id = Column(String, ForeignKey("comments.id"), nullable=True, index=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
