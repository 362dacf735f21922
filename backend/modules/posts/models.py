"""
Private blog post models.

Private posts never leave the device; they are kept in the author's
namespace of the local store.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


PRIVATE_POSTS_KEY = "privateBlogPosts"


class PrivatePost(BaseModel):
    """A blog post visible only to its author."""

    id: Optional[str] = Field(None, description="Millisecond timestamp id")
    title: str = Field(..., min_length=1, description="Post title")
    location: Optional[str] = Field(None, description="Where the post is about")
    description: str = Field(default="", description="Post body")
    rating: int = Field(default=0, ge=0, le=5, description="Star rating, 0 for none")
    image: Optional[str] = Field(None, description="Cover image URL or preview")
    is_private: bool = Field(default=True, alias="isPrivate")
    author: Optional[str] = Field(None, description="Username or email of the author")
    created_at: Optional[datetime] = None

    model_config = {
        "extra": "allow",
        "populate_by_name": True,
    }
