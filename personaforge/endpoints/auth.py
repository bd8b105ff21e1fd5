"""Operator registration and login endpoints."""

import structlog
from fastapi import APIRouter, Depends, Response
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from personaforge.config.database import get_db
from personaforge.config.settings import settings
from personaforge.middleware.auth import set_auth_cookie
from personaforge.middleware.error_handler import (
    AuthenticationError,
    ConflictError,
    ForbiddenError,
    ValidationAPIError,
)
from personaforge.models import Operator
from personaforge.models.base import utcnow
from personaforge.schemas.auth import (
    LanguageUpdate,
    LoginRequest,
    OperatorResponse,
    RegisterRequest,
    TokenResponse,
)
from personaforge.schemas.base import MessageResponse
from personaforge.services.passwords import hash_password, password_problems, verify_password
from personaforge.services.principal import get_current_operator
from personaforge.services.token import issue_token

logger = structlog.get_logger()
router = APIRouter()


def _email_allowed(email: str) -> bool:
    domain = settings.ALLOWED_EMAIL_DOMAIN
    return not domain or email.endswith(f"@{domain.lower()}")


def _issue_token(operator: Operator, response: Response) -> TokenResponse:
    issued = issue_token(operator)
    set_auth_cookie(response, issued)
    return TokenResponse(
        access_token=issued.access_token,
        expires_in=issued.expires_in,
        operator=OperatorResponse.model_validate(operator),
    )


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(
    data: RegisterRequest,
    response: Response,
    db: Session = Depends(get_db),
) -> TokenResponse:
    """Create an operator account and sign it in."""
    email = data.email.lower()
    if not _email_allowed(email):
        raise ValidationAPIError(
            f"Only @{settings.ALLOWED_EMAIL_DOMAIN} addresses may register",
            field="email",
        )

    problems = password_problems(data.password)
    if problems:
        raise ValidationAPIError(problems[0], field="password")

    existing = (
        db.query(Operator.id)
        .filter(or_(Operator.email == email, Operator.matricule == data.matricule))
        .first()
    )
    if existing:
        raise ConflictError("An operator with this email or matricule already exists")

    operator = Operator(
        first_name=data.first_name,
        last_name=data.last_name,
        matricule=data.matricule,
        email=email,
        password_hash=hash_password(data.password),
        language=data.language,
    )
    db.add(operator)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration
        db.rollback()
        raise ConflictError("An operator with this email or matricule already exists")
    db.refresh(operator)

    logger.info("Operator registered", operator_id=operator.id)
    return _issue_token(operator, response)


@router.post("/login", response_model=TokenResponse)
async def login(
    data: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
) -> TokenResponse:
    """Exchange email and password for an access token."""
    email = data.email.lower()
    if not _email_allowed(email):
        raise ForbiddenError(f"Only @{settings.ALLOWED_EMAIL_DOMAIN} addresses may sign in")

    operator = db.query(Operator).filter(Operator.email == email).first()
    if not operator or not verify_password(data.password, operator.password_hash):
        logger.warning("Login failed", email_domain=email.rsplit("@", 1)[-1])
        raise AuthenticationError("Invalid credentials")

    operator.last_login = utcnow()
    db.commit()
    db.refresh(operator)

    logger.info("Operator logged in", operator_id=operator.id)
    return _issue_token(operator, response)


@router.get("/me", response_model=OperatorResponse)
async def get_me(
    operator: Operator = Depends(get_current_operator),
) -> OperatorResponse:
    """Current operator profile."""
    return OperatorResponse.model_validate(operator)


@router.put("/language", response_model=OperatorResponse)
async def update_language(
    data: LanguageUpdate,
    db: Session = Depends(get_db),
    operator: Operator = Depends(get_current_operator),
) -> OperatorResponse:
    """Change the operator's language preference."""
    operator.language = data.language
    db.commit()
    db.refresh(operator)

    logger.info("Language updated", operator_id=operator.id, language=data.language)
    return OperatorResponse.model_validate(operator)


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response) -> MessageResponse:
    """Clear the auth cookie."""
    response.delete_cookie(key=settings.COOKIE_NAME, domain=settings.COOKIE_DOMAIN)
    return MessageResponse(message="Logged out")
