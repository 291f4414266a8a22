"""UserPreference model - one row per (user, deployment, key)."""

from sqlalchemy import Column, DateTime, String, Text, UniqueConstraint

from database import Base
from models.utils import generate_uuid, utcnow


class UserPreference(Base):
    """A single string-valued preference owned by a user within a deployment."""

    __tablename__ = "user_preference"
    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "deployment_id",
            "preference_key",
            name="uq_user_preference_user_deployment_key",
        ),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(255), index=True, nullable=False)
    deployment_id = Column(String(255), nullable=False)
    preference_key = Column(String(255), nullable=False)
    preference_value = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
