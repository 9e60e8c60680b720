from sqlalchemy import Column, String, DateTime, ForeignKey

from app.core.security import utcnow
from app.db.session import Base

class UserSession(Base):
    __tablename__ = "sessions"

    id = Column(String, primary_key=True)  # opaque token sent as the session cookie
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
