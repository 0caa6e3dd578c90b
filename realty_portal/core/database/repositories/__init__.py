"""
Database repository layer.

Modules:
- base: AsyncBaseRepository and QueryBuilder utilities
- users: User account operations
- listings: Property listing operations
- blog_posts: Blog post operations
- activities: Activity audit log operations
"""

from .activities import ActivityRepository
from .blog_posts import BlogPostRepository
from .listings import ListingFilters, ListingRepository
from .users import UserRepository

__all__ = [
    "ActivityRepository",
    "BlogPostRepository",
    "ListingFilters",
    "ListingRepository",
    "UserRepository",
]
