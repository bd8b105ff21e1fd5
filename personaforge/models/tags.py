"""Tag model and the identity/tag association table."""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Table
from sqlalchemy.orm import relationship

from personaforge.config.database import Base
from .base import ReprMixin, utcnow


DEFAULT_TAG_COLOR = "#3B82F6"


identity_tags = Table(
    "identity_tags",
    Base.metadata,
    Column(
        "identity_id",
        String(36),
        ForeignKey("identities.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "tag_id",
        Integer,
        ForeignKey("tags.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Tag(Base, ReprMixin):
    """
    Labels shared across identities.

    Created lazily on first use and never removed when an identity is deleted.
    """

    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), unique=True, nullable=False)  # case-sensitive
    color = Column(String(20), nullable=False, default=DEFAULT_TAG_COLOR)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    # Relationships
    identities = relationship("Identity", secondary=identity_tags, back_populates="tags")

    def __repr__(self) -> str:
        return f"<Tag(id={self.id}, name={self.name})>"
