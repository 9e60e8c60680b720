# Import all models here so Alembic and create_all can detect them
from app.db.session import Base

# Import all models below
from app.modules.user_management.models.user import User
from app.modules.auth.models.session import UserSession
from app.modules.categories.models.category import Category, post_categories
from app.modules.posts.models.post import Post
from app.modules.posts.comments.models.comment import Comment
from app.modules.posts.reactions.models.reaction import Reaction
