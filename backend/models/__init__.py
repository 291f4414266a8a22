"""SQLAlchemy ORM models."""

from .user_preference import UserPreference
from .utils import ensure_utc, generate_uuid, utcnow

__all__ = ["UserPreference", "ensure_utc", "generate_uuid", "utcnow"]
