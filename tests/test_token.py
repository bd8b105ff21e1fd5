from datetime import datetime, timedelta, timezone

import pytest
from jose import JWTError, jwt

from personaforge.config.settings import settings
from personaforge.services.token import decode_token, issue_token, refresh_if_stale


def test_issued_token_carries_operator_claims(operator):
    issued = issue_token(operator)
    claims = decode_token(issued.access_token)

    assert claims["sub"] == str(operator.id)
    assert claims["email"] == operator.email
    assert claims["language"] == "en"
    assert issued.expires_in == settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60


def test_tampered_token_rejected(operator):
    token = issue_token(operator).access_token

    with pytest.raises(JWTError):
        decode_token(token[:-2] + ("AA" if not token.endswith("AA") else "BB"))


def test_expired_token_rejected(operator):
    issued = issue_token(
        operator,
        lifetime=timedelta(minutes=5),
        issued_at=datetime.now(timezone.utc) - timedelta(hours=1),
    )

    with pytest.raises(JWTError, match="expired"):
        decode_token(issued.access_token)


def test_token_without_operator_subject_rejected():
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {"sub": "admin", "iat": now, "exp": now + timedelta(hours=1)},
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )

    with pytest.raises(JWTError):
        decode_token(token)


def test_fresh_token_is_not_refreshed(operator):
    payload = decode_token(issue_token(operator).access_token)

    assert refresh_if_stale(payload) is None


def test_stale_token_is_reissued_with_same_claims(operator):
    issued = issue_token(
        operator,
        lifetime=timedelta(hours=24),
        issued_at=datetime.now(timezone.utc) - timedelta(hours=20),
    )
    payload = decode_token(issued.access_token)

    refreshed = refresh_if_stale(payload)

    assert refreshed is not None
    claims = decode_token(refreshed.access_token)
    assert claims["sub"] == payload["sub"]
    assert claims["email"] == payload["email"]
    assert claims["exp"] > payload["exp"]
