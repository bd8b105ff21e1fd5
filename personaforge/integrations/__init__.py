"""External service integrations."""

from .randomuser import RandomUserClient

__all__ = ["RandomUserClient"]
