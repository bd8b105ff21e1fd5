"""Pydantic schemas for operator authentication."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import EmailStr, Field

from .base import CamelModel

NAME_PATTERN = r"^[A-Za-zÀ-ÿ\s\-']+$"

Language = Literal["en", "fr", "nl"]


class RegisterRequest(CamelModel):
    """New operator account."""

    first_name: str = Field(..., min_length=2, max_length=100, pattern=NAME_PATTERN)
    last_name: str = Field(..., min_length=2, max_length=100, pattern=NAME_PATTERN)
    matricule: str = Field(..., pattern=r"^4\d{8}$")
    email: EmailStr
    password: str
    language: Language = "fr"


class LoginRequest(CamelModel):
    """Email/password login."""

    email: EmailStr
    password: str = Field(..., min_length=6)


class LanguageUpdate(CamelModel):
    """Change the operator's UI language."""

    language: Language


class OperatorResponse(CamelModel):
    """Operator profile."""

    id: int
    first_name: str
    last_name: str
    email: str
    matricule: str
    language: str
    created_at: datetime
    last_login: Optional[datetime] = None


class TokenResponse(CamelModel):
    """Issued access token."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int
    operator: OperatorResponse
