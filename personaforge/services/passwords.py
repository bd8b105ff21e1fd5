"""Salted PBKDF2 password hashing for operator accounts."""

import base64
import hmac
import os
import re

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from personaforge.config.settings import settings

ALGORITHM_TAG = "pbkdf2_sha256"
SALT_BYTES = 16

MIN_PASSWORD_LENGTH = 12
PASSWORD_COMPLEXITY = re.compile(
    r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>/?]).*$"
)


def _derive(password: str, salt: bytes, iterations: int) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(password.encode("utf-8"))


def hash_password(password: str, iterations: int = None) -> str:
    """
    Hash a password for storage.

    Format: ``pbkdf2_sha256$<iterations>$<salt b64>$<hash b64>``
    """
    iterations = iterations or settings.PASSWORD_HASH_ITERATIONS
    salt = os.urandom(SALT_BYTES)
    digest = _derive(password, salt, iterations)
    return "$".join([
        ALGORITHM_TAG,
        str(iterations),
        base64.b64encode(salt).decode("ascii"),
        base64.b64encode(digest).decode("ascii"),
    ])


def verify_password(password: str, stored: str) -> bool:
    """Check a password against a stored hash in constant time."""
    try:
        tag, iterations, salt_b64, hash_b64 = stored.split("$")
    except ValueError:
        return False
    if tag != ALGORITHM_TAG:
        return False

    candidate = _derive(password, base64.b64decode(salt_b64), int(iterations))
    return hmac.compare_digest(candidate, base64.b64decode(hash_b64))


def password_problems(password: str) -> list[str]:
    """Return human-readable reasons a password is too weak (empty if fine)."""
    problems = []
    if len(password) < MIN_PASSWORD_LENGTH:
        problems.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if not PASSWORD_COMPLEXITY.match(password):
        problems.append(
            "Password must contain an uppercase letter, a lowercase letter, "
            "a digit and a special character"
        )
    return problems
