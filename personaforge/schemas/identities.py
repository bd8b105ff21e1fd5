"""Pydantic schemas for identity endpoints."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field, model_validator

from .base import CamelModel
from .personas import DerivedPersonaResponse, PersonaResponse
from .tags import TagResponse


class GenerateIdentityRequest(CamelModel):
    """Optional filters for a new synthetic identity."""

    nationality: Optional[str] = Field(None, min_length=2, max_length=10)
    gender: Optional[Literal["male", "female"]] = None
    min_age: Optional[int] = Field(None, ge=18, le=100)
    max_age: Optional[int] = Field(None, ge=18, le=100)

    @model_validator(mode="after")
    def check_age_bounds(self):
        if self.min_age is not None and self.max_age is not None and self.min_age > self.max_age:
            raise ValueError("minAge cannot be greater than maxAge")
        return self


class IdentityResponse(CamelModel):
    """Schema for a stored identity."""

    id: str
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    gender: str
    nationality: Optional[str] = None
    age: int
    date_of_birth: Optional[datetime] = None
    photo_url: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postcode: Optional[str] = None
    registered_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class IdentityListItem(IdentityResponse):
    """Identity in list response, with its personas and tag names."""

    tags: list[str] = []
    personas: list[PersonaResponse] = []


class IdentityDetailResponse(CamelModel):
    """Identity with personas and full tag records."""

    identity: IdentityResponse
    personas: list[PersonaResponse]
    tags: list[TagResponse]


class SynthesisResponse(CamelModel):
    """Result of a generate call."""

    identity: IdentityResponse
    personas: list[DerivedPersonaResponse]


class UsageLogResponse(CamelModel):
    """Schema for an audit trail entry."""

    id: int
    identity_id: str
    operator_id: int
    action: str
    notes: Optional[str] = None
    created_at: datetime
