"""Operator access tokens (HS256 JWT) with half-life rolling refresh."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import jwt, JWTError

from personaforge.config.settings import settings

# Claims copied from the operator into every token
OPERATOR_CLAIMS = ("sub", "email", "language", "first_name", "last_name")


@dataclass(frozen=True)
class IssuedToken:
    """A signed token and its lifetime in seconds."""

    access_token: str
    expires_in: int


def token_lifetime() -> timedelta:
    return timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)


def operator_claims(operator) -> dict[str, Any]:
    """Identity claims for an operator; ``sub`` is the operator id."""
    return {
        "sub": str(operator.id),
        "email": operator.email,
        "language": operator.language,
        "first_name": operator.first_name,
        "last_name": operator.last_name,
    }


def _sign(claims: dict[str, Any], issued_at: datetime, lifetime: timedelta) -> IssuedToken:
    payload = {key: claims[key] for key in OPERATOR_CLAIMS if key in claims}
    payload.update({"iat": issued_at, "exp": issued_at + lifetime})
    return IssuedToken(
        access_token=jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM),
        expires_in=int(lifetime.total_seconds()),
    )


def issue_token(
    operator,
    lifetime: Optional[timedelta] = None,
    issued_at: Optional[datetime] = None,
) -> IssuedToken:
    """Sign a token for an operator."""
    return _sign(
        operator_claims(operator),
        issued_at or datetime.now(timezone.utc),
        lifetime or token_lifetime(),
    )


def decode_token(token: str) -> dict[str, Any]:
    """
    Decode and validate a token.

    Raises:
        JWTError: If the token is invalid, expired or has no operator subject
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise JWTError("Token has expired")
    except jwt.JWTClaimsError as e:
        raise JWTError(f"Invalid token claims: {e}")
    except JWTError as e:
        raise JWTError(f"Invalid token: {e}")

    if not str(payload.get("sub", "")).isdigit():
        raise JWTError("Token subject is not an operator id")
    return payload


def refresh_if_stale(payload: dict[str, Any]) -> Optional[IssuedToken]:
    """
    Re-sign a decoded token once less than half its lifetime remains.

    Returns:
        A fresh token with the same operator claims, or None if still fresh
    """
    exp = payload.get("exp")
    iat = payload.get("iat")
    if not exp or not iat:
        return None

    now = datetime.now(timezone.utc)
    if exp - now.timestamp() >= (exp - iat) * 0.5:
        return None
    return _sign(payload, now, token_lifetime())
