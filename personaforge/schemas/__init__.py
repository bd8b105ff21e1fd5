"""Pydantic schemas for API request/response validation.

All schemas use CamelCase for JSON field names (via alias_generator).
"""

from .base import CamelModel, PaginatedResponse, PaginationMeta, MessageResponse

from .auth import (
    RegisterRequest,
    LoginRequest,
    LanguageUpdate,
    OperatorResponse,
    TokenResponse,
)
from .personas import (
    PlatformDetails,
    FacebookDetails,
    InstagramDetails,
    TwitterDetails,
    LinkedInDetails,
    PersonaResponse,
    DerivedPersonaResponse,
)
from .tags import TagAttachRequest, TagResponse
from .identities import (
    GenerateIdentityRequest,
    IdentityResponse,
    IdentityListItem,
    IdentityDetailResponse,
    SynthesisResponse,
    UsageLogResponse,
)

__all__ = [
    # Base
    "CamelModel",
    "PaginatedResponse",
    "PaginationMeta",
    "MessageResponse",
    # Auth
    "RegisterRequest",
    "LoginRequest",
    "LanguageUpdate",
    "OperatorResponse",
    "TokenResponse",
    # Personas
    "PlatformDetails",
    "FacebookDetails",
    "InstagramDetails",
    "TwitterDetails",
    "LinkedInDetails",
    "PersonaResponse",
    "DerivedPersonaResponse",
    # Tags
    "TagAttachRequest",
    "TagResponse",
    # Identities
    "GenerateIdentityRequest",
    "IdentityResponse",
    "IdentityListItem",
    "IdentityDetailResponse",
    "SynthesisResponse",
    "UsageLogResponse",
]
