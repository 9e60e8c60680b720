from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint, CheckConstraint

from app.core.security import utcnow
from app.db.session import Base

class Reaction(Base):
    __tablename__ = "reactions"

    id = Column(String, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False)
    target_type = Column(String, nullable=False)  # post, comment
    target_id = Column(String, nullable=False)
    value = Column(String, nullable=False)  # like, dislike
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "target_type", "target_id", name="uq_reaction_user_target"),
        CheckConstraint("target_type IN ('post', 'comment')", name="ck_reaction_target_type"),
        CheckConstraint("value IN ('like', 'dislike')", name="ck_reaction_value"),
    )
