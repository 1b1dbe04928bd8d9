from __future__ import annotations

import logging
from typing import Any

import httpx

from practice_booking.application.exceptions import PracticeApiContractError, PracticeApiUpstreamError
from practice_booking.core.config import settings


class PracticeApiClient:
    """
    Thin async client for the practice backend.
    Unwraps the {success, message, data} envelope and maps transport failures to PracticeApiUpstreamError.
    """

    def __init__(
        self,
        base_url: str | None = None,
        access_token: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._access_token = access_token if access_token is not None else settings.PRACTICE_API_TOKEN
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.PRACTICE_API_BASE_URL,
            timeout=timeout or settings.PRACTICE_API_TIMEOUT_SECONDS,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )
        self._logger = logging.getLogger(__name__)

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    async def get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        access_token: str | None = None,
    ) -> httpx.Response:
        return await self._request("GET", path, access_token, params=params)

    async def post(self, path: str, json: dict[str, Any], access_token: str | None = None) -> httpx.Response:
        return await self._request("POST", path, access_token, json=json)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, access_token: str | None, **kwargs: Any) -> httpx.Response:
        # Per-call token overrides the service token
        token = access_token or self._access_token
        headers = {}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        try:
            response = await self._client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            self._logger.error("Practice API request failed", extra={"path": path, "error": str(e)})
            raise PracticeApiUpstreamError(f"{method} {path} failed: {e}") from e

        if response.status_code >= 500:
            self._logger.error(
                "Practice API server error",
                extra={"path": path, "status": response.status_code},
            )
            raise PracticeApiUpstreamError(f"{method} {path} returned {response.status_code}")
        return response


def unwrap_envelope(response: httpx.Response) -> tuple[bool, str | None, Any]:
    """Return (success, message, data) from a backend response body."""
    try:
        body = response.json()
    except ValueError as e:
        raise PracticeApiContractError(f"Response from {response.request.url.path} is not JSON") from e

    if not isinstance(body, dict) or "success" not in body:
        raise PracticeApiContractError(f"Response from {response.request.url.path} has no envelope")
    return bool(body.get("success")), body.get("message"), body.get("data")
