"""Synthesis pipeline: acquire an identity, derive personas, store the bundle."""

import random
from dataclasses import dataclass
from typing import Optional

import structlog
from sqlalchemy.orm import Session

from personaforge.models import Identity
from personaforge.services.bundle_store import BundleStore
from personaforge.services.identity_source import IdentityAcquirer, IdentityFilters
from personaforge.services.persona_engine import DerivedPersona, derive_personas

logger = structlog.get_logger()


@dataclass
class SynthesisResult:
    """Stored identity plus its personas in platform order."""

    identity: Identity
    personas: list[DerivedPersona]


async def synthesize(
    db: Session,
    owner_id: int,
    filters: Optional[IdentityFilters] = None,
    acquirer: Optional[IdentityAcquirer] = None,
    rng: Optional[random.Random] = None,
) -> SynthesisResult:
    """
    Run the full pipeline for one operator.

    Nothing is written until every persona has been derived, so a failure or
    cancellation before the final step leaves the store untouched.

    Raises:
        ValidationAPIError, UpstreamUnavailableError, RetryExhaustedError,
        PersistenceFailedError
    """
    acquirer = acquirer or IdentityAcquirer()

    base = await acquirer.acquire(filters)
    personas = derive_personas(base, rng=rng)
    stored = BundleStore(db).persist(base, personas, owner_id)

    logger.info(
        "Identity synthesized",
        identity_id=stored.id,
        owner_id=owner_id,
        nationality=stored.nationality,
    )
    return SynthesisResult(identity=stored, personas=personas)
