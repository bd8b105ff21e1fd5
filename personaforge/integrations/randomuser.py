"""randomuser.me client: the upstream random identity source."""

from typing import Any, Optional

import httpx
import structlog

from personaforge.config.settings import settings
from personaforge.middleware.error_handler import UpstreamUnavailableError

logger = structlog.get_logger()


class RandomUserClient:
    """Fetches one raw identity record per call from randomuser.me."""

    def __init__(
        self,
        base_url: str = None,
        timeout: float = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url or settings.IDENTITY_SOURCE_URL
        self.timeout = timeout if timeout is not None else settings.IDENTITY_SOURCE_TIMEOUT
        # Tests pass an httpx.MockTransport here
        self._transport = transport

    @staticmethod
    def build_params(nationality: Optional[str] = None, gender: Optional[str] = None) -> dict[str, str]:
        """Upstream query parameters. Age cannot be filtered upstream."""
        params = {}
        if nationality:
            params["nat"] = nationality
        if gender:
            params["gender"] = gender
        return params

    async def fetch_one(
        self,
        nationality: Optional[str] = None,
        gender: Optional[str] = None,
    ) -> dict[str, Any]:
        """Fetch a single raw identity.

        Returns:
            The first entry of the upstream ``results`` array

        Raises:
            UpstreamUnavailableError: On transport errors, timeouts, non-2xx
                responses or a payload without results
        """
        params = self.build_params(nationality, gender)

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.get(self.base_url, params=params)
                response.raise_for_status()
                data = response.json()

            except httpx.HTTPStatusError as e:
                logger.error(
                    "Identity source returned an error",
                    status_code=e.response.status_code,
                    response=e.response.text[:500],
                )
                raise UpstreamUnavailableError(
                    f"Identity source returned HTTP {e.response.status_code}",
                    details={"status_code": e.response.status_code},
                ) from e

            except httpx.HTTPError as e:
                logger.error("Identity source request failed", error=str(e), error_type=type(e).__name__)
                raise UpstreamUnavailableError(
                    "Identity source request failed",
                    details={"error_type": type(e).__name__},
                ) from e

            except ValueError as e:
                logger.error("Identity source returned invalid JSON", error=str(e))
                raise UpstreamUnavailableError("Identity source returned invalid JSON") from e

        results = data.get("results") if isinstance(data, dict) else None
        if not results or not isinstance(results[0], dict):
            logger.error("Identity source payload has no results", payload_type=type(data).__name__)
            raise UpstreamUnavailableError("Identity source returned no results")

        return results[0]
