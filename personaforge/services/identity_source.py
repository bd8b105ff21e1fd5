"""Base identity acquisition from the upstream random identity source.

Applies nationality/gender filters upstream and age bounds locally through
bounded rejection sampling: each rejected record triggers a fresh upstream
call, up to ``IDENTITY_MAX_ATTEMPTS`` calls in total.
"""

import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Optional

import structlog

from personaforge.config.settings import settings
from personaforge.integrations.randomuser import RandomUserClient
from personaforge.middleware.error_handler import (
    RetryExhaustedError,
    UpstreamUnavailableError,
    ValidationAPIError,
)

logger = structlog.get_logger()

VALID_GENDERS = ("male", "female")
MIN_FILTER_AGE = 18
MAX_FILTER_AGE = 100


@dataclass(frozen=True)
class IdentityFilters:
    """Optional constraints on the acquired identity."""

    nationality: Optional[str] = None
    gender: Optional[str] = None
    min_age: Optional[int] = None
    max_age: Optional[int] = None

    def validate(self) -> None:
        """Reject malformed filters before any upstream call.

        Raises:
            ValidationAPIError: On an unknown gender, bad nationality code or
                inconsistent age bounds
        """
        if self.gender is not None and self.gender not in VALID_GENDERS:
            raise ValidationAPIError(f"gender must be one of {', '.join(VALID_GENDERS)}", field="gender")

        if self.nationality is not None and not 2 <= len(self.nationality) <= 10:
            raise ValidationAPIError("nationality must be 2-10 characters", field="nationality")

        for name in ("min_age", "max_age"):
            value = getattr(self, name)
            if value is not None and not MIN_FILTER_AGE <= value <= MAX_FILTER_AGE:
                raise ValidationAPIError(
                    f"{name} must be between {MIN_FILTER_AGE} and {MAX_FILTER_AGE}",
                    field=name,
                )

        if self.min_age is not None and self.max_age is not None and self.min_age > self.max_age:
            raise ValidationAPIError("min_age cannot be greater than max_age", field="min_age")

    def accepts_age(self, age: int) -> bool:
        if self.min_age is not None and age < self.min_age:
            return False
        if self.max_age is not None and age > self.max_age:
            return False
        return True


@dataclass(frozen=True)
class BaseIdentity:
    """A normalized identity, ready for persona derivation and storage."""

    id: str
    first_name: str
    last_name: str
    email: str
    gender: str
    age: int
    phone: Optional[str] = None
    nationality: Optional[str] = None
    photo_url: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postcode: Optional[str] = None
    date_of_birth: Optional[datetime] = None
    registered_at: Optional[datetime] = None


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an upstream ISO-8601 timestamp into naive UTC."""
    if not value:
        return None
    parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def age_on(birth: datetime, today: date) -> int:
    """Whole years between a birth date and ``today``."""
    years = today.year - birth.year
    if (today.month, today.day) < (birth.month, birth.day):
        years -= 1
    return years


def _required_text(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{field_name} is missing or blank")
    return value


def normalize_identity(raw: dict[str, Any], today: date = None) -> BaseIdentity:
    """
    Map a raw randomuser.me record onto a BaseIdentity.

    Assigns a fresh UUID, flattens the nested location into address parts and
    stringifies the postcode (upstream sends ints for some nationalities).

    Raises:
        UpstreamUnavailableError: If required fields are missing or malformed
    """
    today = today or datetime.now(timezone.utc).date()
    try:
        name = raw["name"]
        location = raw.get("location") or {}
        street = location.get("street") or {}
        dob = raw.get("dob") or {}

        first_name = _required_text(name.get("first"), "name.first")
        last_name = _required_text(name.get("last"), "name.last")
        email = _required_text(raw.get("email"), "email")

        date_of_birth = parse_timestamp(dob.get("date"))
        upstream_age = dob.get("age")
        if isinstance(upstream_age, int) and not isinstance(upstream_age, bool):
            age = upstream_age
        elif date_of_birth is not None:
            age = age_on(date_of_birth, today)
        else:
            raise ValueError("no age or date of birth")
        if age < 0:
            raise ValueError(f"negative age {age}")

        gender = raw["gender"]
        if gender not in VALID_GENDERS:
            raise ValueError(f"unexpected gender {gender!r}")

        street_line = " ".join(
            str(part) for part in (street.get("number"), street.get("name")) if part not in (None, "")
        )
        postcode = location.get("postcode")

        return BaseIdentity(
            id=str(uuid.uuid4()),
            first_name=first_name,
            last_name=last_name,
            email=email,
            phone=raw.get("phone"),
            gender=gender,
            nationality=raw.get("nat"),
            age=age,
            photo_url=(raw.get("picture") or {}).get("large"),
            street=street_line or None,
            city=location.get("city"),
            state=location.get("state"),
            country=location.get("country"),
            postcode=str(postcode) if postcode not in (None, "") else None,
            date_of_birth=date_of_birth,
            registered_at=parse_timestamp((raw.get("registered") or {}).get("date")),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        logger.error("Malformed identity record", error=str(e), error_type=type(e).__name__)
        raise UpstreamUnavailableError(
            "Identity source returned a malformed record",
            details={"error": str(e)},
        ) from e


class IdentityAcquirer:
    """Obtains one BaseIdentity matching the requested filters."""

    def __init__(self, client: RandomUserClient = None, max_attempts: int = None):
        self.client = client or RandomUserClient()
        self.max_attempts = max_attempts or settings.IDENTITY_MAX_ATTEMPTS

    async def acquire(self, filters: IdentityFilters = None) -> BaseIdentity:
        """Acquire a normalized identity.

        Raises:
            ValidationAPIError: Malformed filters
            UpstreamUnavailableError: Upstream failure or malformed payload
            RetryExhaustedError: No record within the age bounds after
                ``max_attempts`` upstream calls
        """
        filters = filters or IdentityFilters()
        filters.validate()

        for attempt in range(1, self.max_attempts + 1):
            raw = await self.client.fetch_one(
                nationality=filters.nationality,
                gender=filters.gender,
            )
            identity = normalize_identity(raw)

            if filters.accepts_age(identity.age):
                logger.info(
                    "Identity acquired",
                    identity_id=identity.id,
                    nationality=identity.nationality,
                    age=identity.age,
                    attempts=attempt,
                )
                return identity

            logger.debug(
                "Identity rejected by age filter",
                age=identity.age,
                min_age=filters.min_age,
                max_age=filters.max_age,
                attempt=attempt,
            )

        logger.warning(
            "Age filter not satisfied",
            attempts=self.max_attempts,
            min_age=filters.min_age,
            max_age=filters.max_age,
        )
        raise RetryExhaustedError(self.max_attempts, filters.min_age, filters.max_age)
