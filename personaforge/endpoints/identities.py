"""Identity synthesis, retrieval, tagging and deletion endpoints."""

import random
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from personaforge.config.database import get_db
from personaforge.models import Identity
from personaforge.schemas.base import PaginatedResponse, PaginationMeta
from personaforge.schemas.identities import (
    GenerateIdentityRequest,
    IdentityDetailResponse,
    IdentityListItem,
    IdentityResponse,
    SynthesisResponse,
    UsageLogResponse,
)
from personaforge.schemas.personas import DerivedPersonaResponse, PersonaResponse
from personaforge.schemas.tags import TagAttachRequest, TagResponse
from personaforge.services.bundle_store import BundleStore
from personaforge.services.identity_source import IdentityAcquirer, IdentityFilters
from personaforge.services.principal import get_current_operator_id
from personaforge.services.synthesis import synthesize

logger = structlog.get_logger()
router = APIRouter()


def get_identity_acquirer() -> IdentityAcquirer:
    """Acquirer backed by the configured upstream source."""
    return IdentityAcquirer()


def get_rng() -> Optional[random.Random]:
    """Random source for persona derivation (None = fresh system-seeded source)."""
    return None


def _list_item(identity: Identity) -> IdentityListItem:
    base = IdentityResponse.model_validate(identity).model_dump()
    return IdentityListItem(
        **base,
        tags=[t.name for t in identity.tags],
        personas=[PersonaResponse.model_validate(p) for p in identity.personas],
    )


@router.post("/generate", response_model=SynthesisResponse, status_code=201)
async def generate_identity(
    data: GenerateIdentityRequest,
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_current_operator_id),
    acquirer: IdentityAcquirer = Depends(get_identity_acquirer),
    rng: Optional[random.Random] = Depends(get_rng),
) -> SynthesisResponse:
    """Synthesize an identity and its four platform personas."""
    filters = IdentityFilters(
        nationality=data.nationality,
        gender=data.gender,
        min_age=data.min_age,
        max_age=data.max_age,
    )
    result = await synthesize(db, owner_id, filters=filters, acquirer=acquirer, rng=rng)

    return SynthesisResponse(
        identity=IdentityResponse.model_validate(result.identity),
        personas=[
            DerivedPersonaResponse(
                platform=p.platform.value,
                username=p.username,
                bio=p.bio,
                followers=p.followers,
                following=p.following,
                posts_count=p.posts_count,
                interests=p.interests,
                details=p.details,
            )
            for p in result.personas
        ],
    )


@router.get("", response_model=PaginatedResponse[IdentityListItem])
async def list_identities(
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_current_operator_id),
    search: Optional[str] = Query(None, max_length=100),
    tag: Optional[str] = Query(None, max_length=100),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    """List the caller's identities, newest first."""
    rows, total = BundleStore(db).list_for_owner(
        owner_id,
        search=search,
        tag=tag,
        limit=limit,
        offset=offset,
    )
    return PaginatedResponse(
        data=[_list_item(row) for row in rows],
        meta=PaginationMeta(limit=limit, offset=offset, total=total),
    )


@router.get("/{identity_id}", response_model=IdentityDetailResponse)
async def get_identity(
    identity_id: str,
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_current_operator_id),
) -> IdentityDetailResponse:
    """Get an identity with its personas and tags. Records a VIEWED entry."""
    store = BundleStore(db)
    store.record_view(identity_id, owner_id)
    identity = store.get_for_owner(identity_id, owner_id)

    return IdentityDetailResponse(
        identity=IdentityResponse.model_validate(identity),
        personas=[PersonaResponse.model_validate(p) for p in identity.personas],
        tags=[TagResponse.model_validate(t) for t in identity.tags],
    )


@router.get("/{identity_id}/history", response_model=list[UsageLogResponse])
async def get_identity_history(
    identity_id: str,
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_current_operator_id),
) -> list[UsageLogResponse]:
    """Usage log entries for an identity, newest first."""
    entries = BundleStore(db).usage_history(identity_id, owner_id)
    return [UsageLogResponse.model_validate(e) for e in entries]


@router.delete("/{identity_id}", status_code=204)
async def delete_identity(
    identity_id: str,
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_current_operator_id),
) -> Response:
    """Delete an identity together with its personas, tag links and logs."""
    BundleStore(db).delete_bundle(identity_id, owner_id)
    return Response(status_code=204)


@router.post("/{identity_id}/tags", response_model=TagResponse)
async def add_tag(
    identity_id: str,
    data: TagAttachRequest,
    db: Session = Depends(get_db),
    owner_id: int = Depends(get_current_operator_id),
) -> TagResponse:
    """Attach a tag to an identity. Attaching the same tag again is a no-op."""
    tag = BundleStore(db).attach_tag(identity_id, owner_id, data.tag_name, data.color)
    return TagResponse.model_validate(tag)
