"""Resolve the authenticated operator for API endpoints."""

from typing import Any

import structlog
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from personaforge.config.database import get_db
from personaforge.middleware.error_handler import AuthenticationError
from personaforge.models import Operator

logger = structlog.get_logger()


def get_current_user(request: Request) -> dict[str, Any]:
    """
    Get current token claims from request state.

    Usage:
        @router.get("/me")
        def get_me(user: dict = Depends(get_current_user)):
            return user
    """
    if not hasattr(request.state, "user"):
        raise AuthenticationError("Not authenticated")
    return request.state.user


def get_current_operator_id(user: dict = Depends(get_current_user)) -> int:
    """Owner id of the caller, taken from the token subject."""
    try:
        return int(user.get("sub"))
    except (TypeError, ValueError):
        logger.warning("Token subject is not an operator id", sub=user.get("sub"))
        raise AuthenticationError("Invalid token subject")


def get_current_operator(
    operator_id: int = Depends(get_current_operator_id),
    db: Session = Depends(get_db),
) -> Operator:
    """Load the calling operator, rejecting tokens for deleted accounts."""
    operator = db.get(Operator, operator_id)
    if not operator:
        raise AuthenticationError("Operator not found")
    return operator
