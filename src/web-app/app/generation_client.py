"""HTTP client for the generation service's ``POST /api/generate``."""

from __future__ import annotations

import logging

import httpx

from app.models import GenerationResult

logger = logging.getLogger(__name__)

FAILED_MESSAGE = "Content generation failed"


class GenerationFailed(Exception):
    """The generation service did not return an essay."""


class GenerationClient:
    """Thin async wrapper around the generation service.

    Any non-2xx status, transport error or unreadable body is reported as
    ``GenerationFailed`` with the same user-facing message; the status and
    cause are only logged.
    """

    def __init__(
        self,
        endpoint: str,
        *,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._http = httpx.AsyncClient(
            base_url=endpoint.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )

    async def generate(self, keywords: str) -> GenerationResult:
        try:
            response = await self._http.post("/api/generate", json={"keywords": keywords})
        except httpx.HTTPError as e:
            logger.error("Generation request failed: %s", e)
            raise GenerationFailed(FAILED_MESSAGE) from e

        if not response.is_success:
            logger.warning("Generation service returned %d: %s", response.status_code, response.text[:200])
            raise GenerationFailed(FAILED_MESSAGE)

        try:
            data = response.json()
            return GenerationResult(content=data["content"], references=list(data["references"]))
        except (ValueError, KeyError, TypeError) as e:
            logger.error("Unreadable generation response: %s", e)
            raise GenerationFailed(FAILED_MESSAGE) from e

    async def aclose(self) -> None:
        await self._http.aclose()
