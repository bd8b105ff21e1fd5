"""Tag listing endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from personaforge.config.database import get_db
from personaforge.schemas.tags import TagResponse
from personaforge.services.bundle_store import BundleStore
from personaforge.services.principal import get_current_user

router = APIRouter()


@router.get("", response_model=list[TagResponse])
async def list_tags(
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
) -> list[TagResponse]:
    """All tags, alphabetically. Tags are shared between operators."""
    return [TagResponse.model_validate(t) for t in BundleStore(db).list_tags()]
