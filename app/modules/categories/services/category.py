from typing import List, Sequence
import logging

from sqlalchemy.orm import Session

from app.modules.categories.models.category import Category

logger = logging.getLogger("app")

MAX_CATEGORY_NAME_LENGTH = 50

def get_categories(db: Session) -> List[Category]:
    """Get all categories ordered by name"""
    return db.query(Category).order_by(Category.name).all()

def normalize_category_names(names: Sequence[str]) -> List[str]:
    """Trim, drop blanks and de-duplicate while keeping first-seen order"""
    seen = set()
    result = []
    for name in names:
        name = name.strip()
        if not name or name.lower() in seen:
            continue
        if len(name) > MAX_CATEGORY_NAME_LENGTH:
            raise ValueError(f"category name exceeds maximum length of {MAX_CATEGORY_NAME_LENGTH} characters")
        seen.add(name.lower())
        result.append(name)
    return result

def get_or_create_categories(db: Session, names: Sequence[str]) -> List[Category]:
    """
    Resolve category names to rows, creating the missing ones.

    Flushes but does not commit: the caller owns the transaction.
    """
    categories = []
    for name in names:
        category = db.query(Category).filter(Category.name == name).first()
        if category is None:
            logger.info(f"Creating category: {name}")
            category = Category(name=name)
            db.add(category)
            db.flush()
        categories.append(category)
    return categories
