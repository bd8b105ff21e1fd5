"""Transactional persistence of identity bundles.

A bundle is one identity row, one persona row per platform and a GENERATED
usage log entry. Bundles are written in a single transaction. Every read or
write is scoped to the owning operator; a foreign or unknown id raises the
same NotFoundError.
"""

import re
from typing import Optional, Sequence

import structlog
from sqlalchemy import or_
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from personaforge.middleware.error_handler import (
    NotFoundError,
    PersistenceFailedError,
    ValidationAPIError,
)
from personaforge.models import (
    DEFAULT_TAG_COLOR,
    Identity,
    Persona,
    Tag,
    UsageAction,
    UsageLog,
    identity_tags,
)
from personaforge.services.identity_source import BaseIdentity
from personaforge.services.persona_engine import DerivedPersona, Platform

logger = structlog.get_logger()

TAG_COLOR_PATTERN = re.compile(r"^#(?:[0-9A-Fa-f]{3}|[0-9A-Fa-f]{6})$")
MAX_TAG_NAME_LENGTH = 100

# Dialects with a native INSERT ... ON CONFLICT DO NOTHING
_CONFLICT_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


class BundleStore:
    """Owner-scoped storage for identities, personas, tags and usage logs."""

    def __init__(self, db: Session):
        self.db = db

    # =====================
    # Writes
    # =====================

    def persist(
        self,
        identity: BaseIdentity,
        personas: Sequence[DerivedPersona],
        owner_id: int,
    ) -> Identity:
        """Store an identity with its personas and a GENERATED log entry.

        Either all rows become visible or none do.

        Raises:
            ValidationAPIError: Personas are not exactly one per platform
            PersistenceFailedError: Any store error; the transaction is rolled back
        """
        platforms = [Platform(p.platform) for p in personas]
        if len(platforms) != len(Platform) or set(platforms) != set(Platform):
            raise ValidationAPIError(
                "A bundle needs exactly one persona per platform",
                field="personas",
            )

        row = Identity(
            id=identity.id,
            first_name=identity.first_name,
            last_name=identity.last_name,
            email=identity.email,
            phone=identity.phone,
            gender=identity.gender,
            nationality=identity.nationality,
            age=identity.age,
            date_of_birth=identity.date_of_birth,
            photo_url=identity.photo_url,
            street=identity.street,
            city=identity.city,
            state=identity.state,
            country=identity.country,
            postcode=identity.postcode,
            registered_at=identity.registered_at,
            created_by=owner_id,
        )
        row.personas = [
            Persona(
                platform=Platform(p.platform).value,
                username=p.username,
                bio=p.bio,
                followers=p.followers,
                following=p.following,
                posts_count=p.posts_count,
                interests=list(p.interests),
                details=p.details.model_dump(mode="json"),
            )
            for p in personas
        ]
        row.usage_logs = [
            UsageLog(
                operator_id=owner_id,
                action=UsageAction.GENERATED.value,
                notes="Profile generated",
            )
        ]

        try:
            self.db.add(row)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(
                "Bundle persistence failed",
                identity_id=identity.id,
                owner_id=owner_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise PersistenceFailedError(details={"identity_id": identity.id}) from e

        self.db.refresh(row)
        logger.info(
            "Bundle persisted",
            identity_id=row.id,
            owner_id=owner_id,
            personas=len(row.personas),
        )
        return row

    def record_view(self, identity_id: str, principal_id: int) -> UsageLog:
        """Append a VIEWED entry for an identity the principal owns."""
        self.get_for_owner(identity_id, principal_id)
        entry = UsageLog(
            identity_id=identity_id,
            operator_id=principal_id,
            action=UsageAction.VIEWED.value,
            notes="Profile viewed",
        )
        self.db.add(entry)
        self._commit("record_view", identity_id)
        return entry

    def delete_bundle(self, identity_id: str, owner_id: int) -> None:
        """Delete an identity; personas, tag links and usage logs cascade."""
        row = self.get_for_owner(identity_id, owner_id)
        self.db.delete(row)
        self._commit("delete_bundle", identity_id)
        logger.info("Bundle deleted", identity_id=identity_id, owner_id=owner_id)

    def attach_tag(
        self,
        identity_id: str,
        owner_id: int,
        tag_name: str,
        color: Optional[str] = None,
    ) -> Tag:
        """Link a tag to an identity, creating the tag on first use.

        Repeating the call changes nothing: both the tag and the link are
        written with a conflict-ignoring insert. An existing tag keeps its
        original color.
        """
        if not tag_name or not tag_name.strip():
            raise ValidationAPIError("Tag name is required", field="tagName")
        if len(tag_name) > MAX_TAG_NAME_LENGTH:
            raise ValidationAPIError(
                f"Tag name must be at most {MAX_TAG_NAME_LENGTH} characters",
                field="tagName",
            )
        color = color or DEFAULT_TAG_COLOR
        if not TAG_COLOR_PATTERN.match(color):
            raise ValidationAPIError("Color must be a hex code like #3B82F6", field="color")

        self.get_for_owner(identity_id, owner_id)

        try:
            self._insert_ignoring_conflict(Tag.__table__, {"name": tag_name, "color": color})
            tag = self.db.query(Tag).filter(Tag.name == tag_name).one()
            linked = self._insert_ignoring_conflict(
                identity_tags,
                {"identity_id": identity_id, "tag_id": tag.id},
            )
            if linked:
                self.db.add(UsageLog(
                    identity_id=identity_id,
                    operator_id=owner_id,
                    action=UsageAction.TAGGED.value,
                    notes=f"Tagged {tag_name}",
                ))
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Tag attach failed", identity_id=identity_id, tag=tag_name, error=str(e))
            raise PersistenceFailedError("Failed to attach tag", details={"identity_id": identity_id}) from e

        logger.info("Tag attached", identity_id=identity_id, tag=tag_name, created_link=linked)
        return tag

    # =====================
    # Reads
    # =====================

    def get_for_owner(self, identity_id: str, owner_id: int) -> Identity:
        """Load an identity the caller owns.

        Raises:
            NotFoundError: Unknown id or owned by someone else
        """
        row = (
            self.db.query(Identity)
            .filter(Identity.id == identity_id, Identity.created_by == owner_id)
            .first()
        )
        if not row:
            raise NotFoundError("Identity", identity_id)
        return row

    def list_for_owner(
        self,
        owner_id: int,
        search: Optional[str] = None,
        tag: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Identity], int]:
        """List the caller's identities, newest first.

        Args:
            search: Case-insensitive substring of first name, last name or email
            tag: Exact tag name the identity must carry

        Returns:
            (identities with personas and tags loaded, total matching count)
        """
        query = self.db.query(Identity).filter(Identity.created_by == owner_id)

        if search:
            # ILIKE on PostgreSQL; lower() LIKE lower() on SQLite, where lower()
            # is replaced with a Unicode-aware function per connection
            query = query.filter(
                or_(
                    Identity.first_name.icontains(search, autoescape=True),
                    Identity.last_name.icontains(search, autoescape=True),
                    Identity.email.icontains(search, autoescape=True),
                )
            )

        if tag:
            query = query.filter(Identity.tags.any(Tag.name == tag))

        total = query.count()

        rows = (
            query.options(selectinload(Identity.personas), selectinload(Identity.tags))
            .order_by(Identity.created_at.desc(), Identity.id)
            .offset(offset)
            .limit(limit)
            .all()
        )
        return rows, total

    def list_tags(self) -> list[Tag]:
        """All tags, alphabetically."""
        return self.db.query(Tag).order_by(Tag.name).all()

    def usage_history(self, identity_id: str, owner_id: int) -> list[UsageLog]:
        """Usage log entries for an owned identity, newest first."""
        self.get_for_owner(identity_id, owner_id)
        return (
            self.db.query(UsageLog)
            .filter(UsageLog.identity_id == identity_id)
            .order_by(UsageLog.created_at.desc(), UsageLog.id.desc())
            .all()
        )

    # =====================
    # Helpers
    # =====================

    def _commit(self, operation: str, identity_id: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Store commit failed", operation=operation, identity_id=identity_id, error=str(e))
            raise PersistenceFailedError(details={"identity_id": identity_id}) from e

    def _insert_ignoring_conflict(self, table, values: dict) -> bool:
        """Insert a row unless a unique/primary key already holds it.

        Returns:
            True if a row was inserted
        """
        dialect = self.db.get_bind().dialect.name
        insert = _CONFLICT_INSERTS.get(dialect)
        if insert is not None:
            result = self.db.execute(insert(table).values(**values).on_conflict_do_nothing())
            return result.rowcount == 1

        # Other backends: let the constraint decide inside a savepoint
        try:
            with self.db.begin_nested():
                self.db.execute(table.insert().values(**values))
            return True
        except IntegrityError:
            return False
