"""
Database entity models.

Modules:
- users: Admin, agent and writer accounts
- listings: Property listings and their moderation state
- blog_posts: Blog posts and their moderation state
- activities: Activity audit log
"""

from .activities import Activity
from .blog_posts import BlogPost
from .listings import Listing
from .users import User

__all__ = ["Activity", "BlogPost", "Listing", "User"]
