"""
Private post store.

Reads and writes the signed-in user's private posts through the user
storage module. Without a user id nothing is persisted.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Callable, Optional

from pydantic import ValidationError as PydanticValidationError

from modules.storage.interfaces import IUserStorage
from modules.storage.service import get_user_storage

from .models import PRIVATE_POSTS_KEY, PrivatePost

logger = logging.getLogger(__name__)


class PrivatePostStore:
    """Private blog posts for one user at a time, oldest first."""

    def __init__(
        self,
        storage: Optional[IUserStorage] = None,
        clock: Callable[[], float] = time.time,
    ):
        self._storage = storage if storage is not None else get_user_storage()
        self._clock = clock

    def list_posts(self, user_id: Optional[str]) -> list[PrivatePost]:
        raw = self._storage.get(PRIVATE_POSTS_KEY, user_id, [])
        if not isinstance(raw, list):
            logger.warning(f"Ignoring {PRIVATE_POSTS_KEY} for user {user_id}: not a list")
            return []

        posts = []
        for item in raw:
            try:
                posts.append(PrivatePost.model_validate(item))
            except PydanticValidationError as e:
                logger.warning(f"Skipping unreadable private post: {e.error_count()} errors")
        return posts

    def add_post(self, user_id: Optional[str], post: PrivatePost) -> PrivatePost:
        """Append a post, assigning id and created_at when missing."""
        update = {}
        if not post.id:
            update["id"] = str(int(self._clock() * 1000))
        if post.created_at is None:
            update["created_at"] = datetime.now(timezone.utc)
        new_post = post.model_copy(update=update) if update else post

        posts = self.list_posts(user_id)
        posts.append(new_post)
        self._save(user_id, posts)
        return new_post

    def delete_post(self, user_id: Optional[str], post_id: str) -> bool:
        posts = self.list_posts(user_id)
        remaining = [p for p in posts if p.id != post_id]
        if len(remaining) == len(posts):
            return False
        self._save(user_id, remaining)
        return True

    def _save(self, user_id: Optional[str], posts: list[PrivatePost]) -> None:
        self._storage.set(
            PRIVATE_POSTS_KEY,
            [p.model_dump(mode="json", by_alias=True) for p in posts],
            user_id,
        )
