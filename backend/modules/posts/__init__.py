"""
Private blog posts module.

Public API:
- PrivatePostStore: Per-user private post persistence
- PrivatePost: Post model
"""

from .models import PRIVATE_POSTS_KEY, PrivatePost
from .service import PrivatePostStore

__all__ = [
    "PRIVATE_POSTS_KEY",
    "PrivatePost",
    "PrivatePostStore",
]
