"""Persona model for platform-specific social-media profiles."""

from sqlalchemy import Column, Integer, String, Text, DateTime, JSON, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from personaforge.config.database import Base
from .base import ReprMixin, utcnow


class Persona(Base, ReprMixin):
    """
    One social-media persona derived from an identity.

    Exactly one row per platform per identity.
    """

    __tablename__ = "personas"

    id = Column(Integer, primary_key=True, autoincrement=True)
    identity_id = Column(
        String(36),
        ForeignKey("identities.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Facebook, Instagram, Twitter, LinkedIn
    platform = Column(String(20), nullable=False)

    username = Column(String(100), nullable=False)
    bio = Column(Text, nullable=True)

    # Audience
    followers = Column(Integer, nullable=False, default=0)
    following = Column(Integer, nullable=False, default=0)
    posts_count = Column(Integer, nullable=False, default=0)

    # ["Photography", "Travel", ...]
    interests = Column(JSON, nullable=False, default=list)

    # Platform-specific payload, shape depends on platform
    # {"platform": "Instagram", "content_themes": [...], "avg_likes": 42, ...}
    details = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("identity_id", "platform", name="uq_personas_identity_platform"),
    )

    # Relationships
    identity = relationship("Identity", back_populates="personas")

    def __repr__(self) -> str:
        return f"<Persona(id={self.id}, platform={self.platform}, username={self.username})>"
