import random
from dataclasses import replace
from datetime import date

import pytest

from personaforge.middleware.error_handler import ValidationAPIError
from personaforge.schemas.personas import (
    FacebookDetails,
    InstagramDetails,
    LinkedInDetails,
    TwitterDetails,
)
from personaforge.services.identity_source import normalize_identity
from personaforge.services.persona_engine import (
    INTERESTS,
    PLATFORM_RANGES,
    PROFESSIONAL_INTERESTS,
    Platform,
    derive_personas,
    draw_shared_attributes,
    username_variants,
)

from conftest import RANDOMUSER_RECORD

TODAY = date(2026, 10, 18)


@pytest.fixture
def identity():
    return normalize_identity(RANDOMUSER_RECORD, today=TODAY)


def test_one_persona_per_platform_in_order(identity):
    personas = derive_personas(identity, rng=random.Random(1), today=TODAY)

    assert [p.platform for p in personas] == [
        Platform.FACEBOOK,
        Platform.INSTAGRAM,
        Platform.TWITTER,
        Platform.LINKEDIN,
    ]
    assert isinstance(personas[0].details, FacebookDetails)
    assert isinstance(personas[1].details, InstagramDetails)
    assert isinstance(personas[2].details, TwitterDetails)
    assert isinstance(personas[3].details, LinkedInDetails)


@pytest.mark.parametrize("seed", range(20))
def test_counts_stay_inside_platform_ranges(identity, seed):
    for persona in derive_personas(identity, rng=random.Random(seed), today=TODAY):
        ranges = PLATFORM_RANGES[persona.platform]
        assert ranges.followers[0] <= persona.followers <= ranges.followers[1]
        assert ranges.following[0] <= persona.following <= ranges.following[1]
        assert ranges.posts[0] <= persona.posts_count <= ranges.posts[1]


@pytest.mark.parametrize("seed", range(20))
def test_interests_are_shared_and_linkedin_is_filtered(identity, seed):
    facebook, instagram, twitter, linkedin = derive_personas(
        identity, rng=random.Random(seed), today=TODAY
    )

    assert facebook.interests == instagram.interests == twitter.interests
    assert 3 <= len(facebook.interests) <= 8
    assert len(set(facebook.interests)) == len(facebook.interests)
    assert set(facebook.interests) <= set(INTERESTS)

    assert set(linkedin.interests) <= PROFESSIONAL_INTERESTS
    assert linkedin.interests == [i for i in facebook.interests if i in PROFESSIONAL_INTERESTS]


def test_profession_and_company_agree_across_platforms(identity):
    facebook, _, twitter, linkedin = derive_personas(identity, rng=random.Random(3), today=TODAY)

    job = facebook.details.work_history[0]
    assert linkedin.details.current_position.title == job.position
    assert linkedin.details.current_position.company == job.company
    assert twitter.bio.startswith(job.position)
    assert linkedin.details.previous_jobs[0].title == f"Junior {job.position}"
    assert linkedin.details.education[0].school == facebook.details.education[0].school


def test_usernames_follow_platform_variants(identity):
    facebook, instagram, twitter, linkedin = derive_personas(
        identity, rng=random.Random(5), today=TODAY
    )

    assert facebook.username == "emmajanssens"
    assert linkedin.username == facebook.username
    assert instagram.username.startswith("emmajanssens")
    assert 10 <= int(instagram.username[len("emmajanssens"):]) <= 99
    assert twitter.username == "emma_janssens"


def test_username_variants_shapes():
    variants = username_variants("Anne Marie", "De Smet", random.Random(0))

    assert variants[0] == "annemariedesmet"
    assert variants[2] == "annemarie_desmet"
    assert variants[3] == "annemarie.desmet"
    suffix = variants[4].rsplit("_", 1)[1]
    assert 1000 <= int(suffix) <= 9999


def test_payload_bounds(identity):
    for seed in range(10):
        facebook, instagram, twitter, linkedin = derive_personas(
            identity, rng=random.Random(seed), today=TODAY
        )
        assert 2 <= len(facebook.details.groups) <= 4
        assert 2 <= len(instagram.details.content_themes) <= 4
        assert 5 <= len(instagram.details.hashtags_used) <= 8
        assert 20 <= instagram.details.avg_likes <= 100
        assert 2 <= instagram.details.avg_comments <= 15
        assert 2 <= twitter.details.avg_tweets_per_day <= 10
        assert 3 <= len(twitter.details.topics_discussed) <= 5
        assert 5 <= len(linkedin.details.skills) <= 8
        assert 10 <= linkedin.details.endorsements <= 50
        assert 200 <= linkedin.details.connections <= 800
        graduation_year = linkedin.details.education[0].graduation_year
        assert TODAY.year - 15 <= graduation_year <= TODAY.year - 5


def test_same_seed_reproduces_output(identity):
    first = derive_personas(identity, rng=random.Random(42), today=TODAY)
    second = derive_personas(identity, rng=random.Random(42), today=TODAY)

    assert first == second


def test_shared_draw_is_immutable():
    shared = draw_shared_attributes(random.Random(0))

    assert isinstance(shared.interests, tuple)
    with pytest.raises(AttributeError):
        shared.profession = "Astronaut"


@pytest.mark.parametrize("field", ["first_name", "last_name"])
@pytest.mark.parametrize("value", ["", "   "])
def test_blank_name_is_rejected(identity, field, value):
    broken = replace(identity, **{field: value})

    with pytest.raises(ValidationAPIError) as exc_info:
        derive_personas(broken, rng=random.Random(0), today=TODAY)
    assert exc_info.value.details == {"field": field}
