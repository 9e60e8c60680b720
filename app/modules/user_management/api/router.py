from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError
from app.db.session import get_db
from app.modules.user_management.schemas.user import UserPublic
from app.modules.user_management.services.user import get_user

router = APIRouter()

@router.get("/{user_id}", response_model=UserPublic)
def read_user_by_id(
    user_id: str,
    db: Session = Depends(get_db),
) -> Any:
    """Get a user's public profile"""
    user = get_user(db, user_id=user_id)
    if not user:
        raise NotFoundError("User not found")
    return user
