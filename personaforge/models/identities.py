"""Identity model for synthesized base identities."""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship

from personaforge.config.database import Base
from .base import TimestampMixin, ReprMixin
from .tags import identity_tags


class Identity(Base, TimestampMixin, ReprMixin):
    """
    A synthesized base identity.

    Immutable once created. Deleting it removes its personas, tag links and
    usage log entries.
    """

    __tablename__ = "identities"

    id = Column(String(36), primary_key=True)  # UUID4

    # Legal name & contact
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)

    # Demographics
    gender = Column(String(10), nullable=False)  # male, female
    nationality = Column(String(10), nullable=True)
    age = Column(Integer, nullable=False)
    date_of_birth = Column(DateTime, nullable=True)
    photo_url = Column(String(500), nullable=True)

    # Address
    street = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)
    country = Column(String(100), nullable=True)
    postcode = Column(String(20), nullable=True)

    # Upstream registration date, kept for realism
    registered_at = Column(DateTime, nullable=True)

    # Owner
    created_by = Column(
        Integer,
        ForeignKey("operators.id"),
        nullable=False,
    )

    __table_args__ = (
        Index("idx_identities_owner_created", "created_by", "created_at"),
    )

    # Relationships
    owner = relationship("Operator", back_populates="identities")
    personas = relationship(
        "Persona",
        back_populates="identity",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Persona.id",
    )
    tags = relationship(
        "Tag",
        secondary=identity_tags,
        back_populates="identities",
        order_by="Tag.name",
    )
    usage_logs = relationship(
        "UsageLog",
        back_populates="identity",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<Identity(id={self.id}, name={self.full_name})>"
