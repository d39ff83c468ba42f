"""SQLAlchemy models for the profile store."""

from .base import Base
from .profile import Profile

__all__ = [
    "Base",
    "Profile",
]
