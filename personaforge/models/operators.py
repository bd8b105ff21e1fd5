"""Operator model for authenticated principals."""

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship

from personaforge.config.database import Base
from .base import TimestampMixin, ReprMixin


class Operator(Base, TimestampMixin, ReprMixin):
    """
    Authenticated operators.

    Every generated identity is owned by the operator who created it.
    """

    __tablename__ = "operators"

    id = Column(Integer, primary_key=True, autoincrement=True)

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    matricule = Column(String(20), unique=True, nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)

    # UI language preference: en, fr, nl
    language = Column(String(5), nullable=False, default="fr")

    last_login = Column(DateTime, nullable=True)

    # Relationships
    identities = relationship("Identity", back_populates="owner")

    def __repr__(self) -> str:
        return f"<Operator(id={self.id}, email={self.email})>"
