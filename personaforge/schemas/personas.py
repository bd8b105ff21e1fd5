"""Pydantic schemas for personas and their platform-specific payloads.

Each platform carries its own payload shape. The payloads form a union
discriminated by ``platform`` so stored JSON round-trips to the right model.
"""

from datetime import datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import Field

from .base import CamelModel


class WorkEntry(CamelModel):
    company: str
    position: str
    duration: str


class EducationEntry(CamelModel):
    school: str
    degree: str
    field: str
    graduation_year: Optional[int] = None


class FacebookDetails(CamelModel):
    """Work history, education, relationship status, hometown and groups."""

    platform: Literal["Facebook"] = "Facebook"
    work_history: list[WorkEntry]
    education: list[EducationEntry]
    relationship: str
    hometown: str
    languages: list[str]
    groups: list[str]


class InstagramDetails(CamelModel):
    """Content themes, hashtags and engagement averages."""

    platform: Literal["Instagram"] = "Instagram"
    content_themes: list[str]
    hashtags_used: list[str]
    avg_likes: int
    avg_comments: int


class TwitterDetails(CamelModel):
    """Tweet mix, topics and posting cadence."""

    platform: Literal["Twitter"] = "Twitter"
    tweet_types: list[str]
    avg_tweets_per_day: int
    topics_discussed: list[str]
    posting_times: list[str]


class Position(CamelModel):
    title: str
    company: str
    duration: str
    location: Optional[str] = None


class LinkedInDetails(CamelModel):
    """Positions, dated education, skills and network size."""

    platform: Literal["LinkedIn"] = "LinkedIn"
    current_position: Position
    previous_jobs: list[Position]
    education: list[EducationEntry]
    skills: list[str]
    endorsements: int
    connections: int


PlatformDetails = Annotated[
    Union[FacebookDetails, InstagramDetails, TwitterDetails, LinkedInDetails],
    Field(discriminator="platform"),
]


class PersonaResponse(CamelModel):
    """Schema for a stored persona."""

    id: int
    identity_id: str
    platform: str
    username: str
    bio: Optional[str] = None
    followers: int
    following: int
    posts_count: int
    interests: list[str]
    details: PlatformDetails
    created_at: datetime


class DerivedPersonaResponse(CamelModel):
    """Schema for a persona that has just been derived (not yet assigned an id)."""

    platform: str
    username: str
    bio: str
    followers: int
    following: int
    posts_count: int
    interests: list[str]
    details: PlatformDetails
