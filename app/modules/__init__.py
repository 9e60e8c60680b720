"""
Feature modules of the forum API. Each one holds its own models, schemas,
services and router; importing them here registers them with the app.
"""

from app.modules import auth
from app.modules import user_management
from app.modules import categories
from app.modules import posts
from app.modules import home_feed
