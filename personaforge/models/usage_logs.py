"""Usage log model for the identity audit trail."""

import enum

from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, Index
from sqlalchemy.orm import relationship

from personaforge.config.database import Base
from .base import utcnow


class UsageAction(str, enum.Enum):
    """Recorded operator actions."""

    GENERATED = "GENERATED"
    VIEWED = "VIEWED"
    TAGGED = "TAGGED"


class UsageLog(Base):
    """
    Append-only audit trail of what operators did with an identity.

    Rows are only removed by cascade when their identity is deleted.
    """

    __tablename__ = "usage_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)

    identity_id = Column(
        String(36),
        ForeignKey("identities.id", ondelete="CASCADE"),
        nullable=False,
    )
    operator_id = Column(
        Integer,
        ForeignKey("operators.id"),
        nullable=False,
    )

    # GENERATED, VIEWED, TAGGED
    action = Column(String(20), nullable=False)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        Index("idx_usage_logs_identity", "identity_id"),
    )

    # Relationships
    identity = relationship("Identity", back_populates="usage_logs")

    def __repr__(self) -> str:
        return f"<UsageLog(id={self.id}, action={self.action})>"
