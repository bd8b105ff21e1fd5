"""Derivation of consistent social-media personas from a base identity.

Shared attributes (profession, company, university, interests) are drawn once
per bundle and passed into one shaping function per platform, so every
persona tells the same story while differing in presentation. All randomness
comes from the ``random.Random`` passed in; seeding it reproduces the output.
"""

import enum
import random
import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Callable, Optional

import structlog

from personaforge.middleware.error_handler import ValidationAPIError
from personaforge.schemas.personas import (
    EducationEntry,
    FacebookDetails,
    InstagramDetails,
    LinkedInDetails,
    PlatformDetails,
    Position,
    TwitterDetails,
    WorkEntry,
)
from personaforge.services.identity_source import BaseIdentity

logger = structlog.get_logger()


class Platform(str, enum.Enum):
    """Supported social networks."""

    FACEBOOK = "Facebook"
    INSTAGRAM = "Instagram"
    TWITTER = "Twitter"
    LINKEDIN = "LinkedIn"


# =====================
# Reference lists
# =====================

INTERESTS = (
    "Photography", "Travel", "Cooking", "Fitness", "Reading", "Music", "Art", "Technology",
    "Sports", "Gaming", "Fashion", "Food", "Nature", "Movies", "Books", "DIY", "Pets",
    "Yoga", "Dancing", "Writing", "Hiking", "Cycling", "Swimming", "Running", "Meditation",
)

PROFESSIONS = (
    "Software Engineer", "Marketing Manager", "Graphic Designer", "Teacher", "Nurse",
    "Sales Representative", "Project Manager", "Data Analyst", "Consultant", "Writer",
    "Photographer", "Chef", "Architect", "Lawyer", "Doctor", "Accountant", "Engineer",
)

COMPANIES = (
    "Tech Solutions Inc", "Global Marketing Co", "Creative Studios", "HealthCare Plus",
    "Education First", "Innovation Labs", "Digital Agency", "Consulting Group",
    "Design House", "Media Company", "StartUp Inc", "Enterprise Solutions",
)

UNIVERSITIES = (
    "State University", "Tech Institute", "Business College", "Community College",
    "Design Academy", "Medical School", "Engineering University", "Liberal Arts College",
)

# Interests kept on LinkedIn; the intersection may be empty
PROFESSIONAL_INTERESTS = frozenset({"Technology", "Business", "Marketing"})

RELATIONSHIP_STATUSES = ("Single", "In a relationship", "Married")
FACEBOOK_GROUPS = (
    "Local Photography Group", "Fitness Enthusiasts", "Book Club",
    "Tech Professionals", "Travel Lovers", "Food Enthusiasts",
)
INSTAGRAM_THEMES = ("Lifestyle", "Food", "Travel", "Fashion", "Fitness", "Art", "Nature", "Pets")
INSTAGRAM_HASHTAGS = (
    "#photography", "#travel", "#food", "#fitness", "#art", "#nature",
    "#lifestyle", "#fashion", "#instagood", "#photooftheday",
)
TWEET_TYPES = ("Personal thoughts", "Industry news", "Retweets", "Photos")
TWITTER_TOPICS = (
    "Technology", "Current Events", "Industry News", "Personal Life",
    "Hobbies", "Travel", "Food", "Sports",
)
POSTING_TIMES = ("Morning", "Lunch", "Evening")
LINKEDIN_SKILLS = (
    "Project Management", "Communication", "Leadership", "Analytics",
    "Problem Solving", "Teamwork", "Strategic Planning", "Innovation",
)

DEGREE = "Bachelor's Degree"
DEGREE_FIELD = "Related Field"


@dataclass(frozen=True)
class AudienceRanges:
    """Inclusive ranges for follower, following and post counts."""

    followers: tuple[int, int]
    following: tuple[int, int]
    posts: tuple[int, int]


PLATFORM_RANGES: dict[Platform, AudienceRanges] = {
    Platform.FACEBOOK: AudienceRanges(followers=(150, 800), following=(200, 600), posts=(50, 300)),
    Platform.INSTAGRAM: AudienceRanges(followers=(300, 1500), following=(400, 800), posts=(20, 150)),
    Platform.TWITTER: AudienceRanges(followers=(100, 600), following=(200, 800), posts=(100, 1000)),
    Platform.LINKEDIN: AudienceRanges(followers=(200, 1000), following=(300, 700), posts=(10, 50)),
}

# Index into username_variants(); two platforms may share a variant
USERNAME_VARIANT_BY_PLATFORM: dict[Platform, int] = {
    Platform.FACEBOOK: 0,
    Platform.INSTAGRAM: 1,
    Platform.TWITTER: 2,
    Platform.LINKEDIN: 0,
}

INTEREST_COUNT_RANGE = (3, 8)


# =====================
# Shared draw
# =====================

@dataclass(frozen=True)
class SharedAttributes:
    """Attributes drawn once per bundle and reused by every platform."""

    profession: str
    company: str
    university: str
    interests: tuple[str, ...]


@dataclass(frozen=True)
class DerivedPersona:
    """A platform persona before it is stored."""

    platform: Platform
    username: str
    bio: str
    followers: int
    following: int
    posts_count: int
    interests: list[str]
    details: PlatformDetails


@dataclass(frozen=True)
class DerivationContext:
    """Everything a platform shaper may read."""

    identity: BaseIdentity
    shared: SharedAttributes
    usernames: tuple[str, ...]
    rng: random.Random
    today: date

    @property
    def location(self) -> str:
        return ", ".join(part for part in (self.identity.city, self.identity.country) if part)

    def username_for(self, platform: Platform) -> str:
        return self.usernames[USERNAME_VARIANT_BY_PLATFORM[platform]]

    def years(self, low: int, high: int) -> str:
        return f"{self.rng.randint(low, high)} years"

    def pick_some(self, population, low: int, high: int) -> list[str]:
        """Sample between ``low`` and ``high`` distinct items."""
        return self.rng.sample(list(population), self.rng.randint(low, high))


def draw_shared_attributes(rng: random.Random) -> SharedAttributes:
    """Draw profession, company, university and the bundle's interest set."""
    profession = rng.choice(PROFESSIONS)
    company = rng.choice(COMPANIES)
    university = rng.choice(UNIVERSITIES)
    interests = tuple(rng.sample(INTERESTS, rng.randint(*INTEREST_COUNT_RANGE)))
    return SharedAttributes(
        profession=profession,
        company=company,
        university=university,
        interests=interests,
    )


def _handle(name: str) -> str:
    return re.sub(r"\s+", "", name.strip().lower())


def username_variants(first_name: str, last_name: str, rng: random.Random) -> tuple[str, ...]:
    """
    Five username variants built from the legal name.

    ``firstlast``, ``firstlast<NN>``, ``first_last``, ``first.last`` and
    ``firstlast_<NNNN>``.
    """
    first = _handle(first_name)
    last = _handle(last_name)
    base = f"{first}{last}"
    return (
        base,
        f"{base}{rng.randint(10, 99)}",
        f"{first}_{last}",
        f"{first}.{last}",
        f"{base}_{rng.randint(1000, 9999)}",
    )


def _audience(ctx: DerivationContext, platform: Platform) -> dict[str, int]:
    ranges = PLATFORM_RANGES[platform]
    return {
        "followers": ctx.rng.randint(*ranges.followers),
        "following": ctx.rng.randint(*ranges.following),
        "posts_count": ctx.rng.randint(*ranges.posts),
    }


def professional_interests(interests) -> list[str]:
    """Keep only interests on the professional allowlist, preserving order."""
    return [interest for interest in interests if interest in PROFESSIONAL_INTERESTS]


# =====================
# Platform shapers
# =====================

def shape_facebook(ctx: DerivationContext) -> DerivedPersona:
    shared = ctx.shared
    bio = (
        f"{shared.profession} at {shared.company}. "
        f"Love {', '.join(shared.interests[:3])}. {ctx.location}"
    )
    audience = _audience(ctx, Platform.FACEBOOK)
    details = FacebookDetails(
        work_history=[
            WorkEntry(company=shared.company, position=shared.profession, duration=ctx.years(1, 5)),
        ],
        education=[
            EducationEntry(school=shared.university, degree=DEGREE, field=DEGREE_FIELD),
        ],
        relationship=ctx.rng.choice(RELATIONSHIP_STATUSES),
        hometown=ctx.location,
        languages=["English", "Native Language"],
        groups=ctx.pick_some(FACEBOOK_GROUPS, 2, 4),
    )
    return DerivedPersona(
        platform=Platform.FACEBOOK,
        username=ctx.username_for(Platform.FACEBOOK),
        bio=bio,
        interests=list(shared.interests),
        details=details,
        **audience,
    )


def shape_instagram(ctx: DerivationContext) -> DerivedPersona:
    shared = ctx.shared
    bio = (
        f"{' & '.join(shared.interests[:2])} enthusiast \U0001F4F8 "
        f"{ctx.identity.city or ''} \U0001F30D {shared.profession}"
    )
    audience = _audience(ctx, Platform.INSTAGRAM)
    details = InstagramDetails(
        content_themes=ctx.pick_some(INSTAGRAM_THEMES, 2, 4),
        hashtags_used=ctx.pick_some(INSTAGRAM_HASHTAGS, 5, 8),
        avg_likes=ctx.rng.randint(20, 100),
        avg_comments=ctx.rng.randint(2, 15),
    )
    return DerivedPersona(
        platform=Platform.INSTAGRAM,
        username=ctx.username_for(Platform.INSTAGRAM),
        bio=bio,
        interests=list(shared.interests),
        details=details,
        **audience,
    )


def shape_twitter(ctx: DerivationContext) -> DerivedPersona:
    shared = ctx.shared
    bio = (
        f"{shared.profession} | {' & '.join(shared.interests[:2])} | "
        f"{ctx.identity.city or ''} | Opinions are my own"
    )
    audience = _audience(ctx, Platform.TWITTER)
    details = TwitterDetails(
        tweet_types=list(TWEET_TYPES),
        avg_tweets_per_day=ctx.rng.randint(2, 10),
        topics_discussed=ctx.pick_some(TWITTER_TOPICS, 3, 5),
        posting_times=list(POSTING_TIMES),
    )
    return DerivedPersona(
        platform=Platform.TWITTER,
        username=ctx.username_for(Platform.TWITTER),
        bio=bio,
        interests=list(shared.interests),
        details=details,
        **audience,
    )


def shape_linkedin(ctx: DerivationContext) -> DerivedPersona:
    shared = ctx.shared
    bio = (
        f"{shared.profession} at {shared.company} | "
        f"{' & '.join(shared.interests[:2])} | {ctx.location}"
    )
    audience = _audience(ctx, Platform.LINKEDIN)
    details = LinkedInDetails(
        current_position=Position(
            title=shared.profession,
            company=shared.company,
            duration=ctx.years(1, 5),
            location=ctx.location,
        ),
        previous_jobs=[
            Position(
                title=f"Junior {shared.profession}",
                company="Previous Company",
                duration=ctx.years(1, 3),
            ),
        ],
        education=[
            EducationEntry(
                school=shared.university,
                degree=DEGREE,
                field=DEGREE_FIELD,
                graduation_year=ctx.today.year - ctx.rng.randint(5, 15),
            ),
        ],
        skills=ctx.pick_some(LINKEDIN_SKILLS, 5, 8),
        endorsements=ctx.rng.randint(10, 50),
        connections=ctx.rng.randint(200, 800),
    )
    return DerivedPersona(
        platform=Platform.LINKEDIN,
        username=ctx.username_for(Platform.LINKEDIN),
        bio=bio,
        interests=professional_interests(shared.interests),
        details=details,
        **audience,
    )


# Insertion order is the output order
PLATFORM_SHAPERS: dict[Platform, Callable[[DerivationContext], DerivedPersona]] = {
    Platform.FACEBOOK: shape_facebook,
    Platform.INSTAGRAM: shape_instagram,
    Platform.TWITTER: shape_twitter,
    Platform.LINKEDIN: shape_linkedin,
}


def derive_personas(
    identity: BaseIdentity,
    rng: Optional[random.Random] = None,
    today: Optional[date] = None,
) -> list[DerivedPersona]:
    """
    Derive one persona per platform from a base identity.

    Args:
        identity: Normalized identity; first and last name are required
        rng: Random source; pass a seeded ``random.Random`` for reproducible output
        today: Reference date for graduation years (defaults to today, UTC)

    Returns:
        Personas ordered Facebook, Instagram, Twitter, LinkedIn

    Raises:
        ValidationAPIError: If the identity has no usable first or last name
    """
    for name in ("first_name", "last_name"):
        value = getattr(identity, name, None)
        if not isinstance(value, str) or not value.strip():
            raise ValidationAPIError(f"Identity is missing {name}", field=name)

    rng = rng or random.Random()
    today = today or datetime.now(timezone.utc).date()

    shared = draw_shared_attributes(rng)
    ctx = DerivationContext(
        identity=identity,
        shared=shared,
        usernames=username_variants(identity.first_name, identity.last_name, rng),
        rng=rng,
        today=today,
    )

    personas = [shaper(ctx) for shaper in PLATFORM_SHAPERS.values()]

    logger.info(
        "Personas derived",
        identity_id=identity.id,
        platforms=[p.platform.value for p in personas],
        profession=shared.profession,
        interest_count=len(shared.interests),
    )
    return personas
