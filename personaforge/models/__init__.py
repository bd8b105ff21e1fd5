"""SQLAlchemy ORM models for PersonaForge.

All models are imported here to ensure they're registered with Base.metadata
before any database operations.
"""

# Import base first
from personaforge.config.database import Base

# Principals
from .operators import Operator

# Bundle models
from .tags import Tag, identity_tags, DEFAULT_TAG_COLOR
from .identities import Identity
from .personas import Persona

# Audit models
from .usage_logs import UsageLog, UsageAction

__all__ = [
    "Base",
    # Principals
    "Operator",
    # Bundle
    "Identity",
    "Persona",
    "Tag",
    "identity_tags",
    "DEFAULT_TAG_COLOR",
    # Audit
    "UsageLog",
    "UsageAction",
]
