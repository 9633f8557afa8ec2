from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from travel_agent_loop.errors import AmadeusApiError
from travel_agent_loop.tools.amadeus.amadeus_auth import AmadeusTokenCache

DEFAULT_BASE_URL = "https://test.api.amadeus.com"
_TIMEOUT_SECONDS = 30.0


def create_http_client(base_url: str = DEFAULT_BASE_URL) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=base_url,
        headers={"Accept": "application/json"},
        timeout=_TIMEOUT_SECONDS,
    )


def _error_detail(response: httpx.Response) -> object:
    try:
        body = response.json()
    except ValueError:
        return response.text[:500]
    if isinstance(body, dict) and "errors" in body:
        return body["errors"]
    return body


class AmadeusClient:
    """Thin authenticated wrapper over the Amadeus REST API."""

    def __init__(self, http: httpx.AsyncClient, tokens: AmadeusTokenCache):
        self._http = http
        self._tokens = tokens

    async def get(self, path: str, params: dict[str, Any] | None = None) -> dict:
        return await self._request("GET", path, params=params)

    async def post(self, path: str, payload: dict[str, Any]) -> dict:
        return await self._request("POST", path, json=payload)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict:
        token = await self._tokens.get_token()
        clean_params = {k: v for k, v in (params or {}).items() if v is not None}
        logger.debug(f"Amadeus {method} {path} params={clean_params}")

        response = await self._http.request(
            method,
            path,
            params=clean_params or None,
            json=json,
            headers={"Authorization": f"Bearer {token}"},
        )

        if response.status_code == 401:
            # Token was revoked upstream before its advertised expiry.
            self._tokens.invalidate()

        if response.status_code >= 400:
            detail = _error_detail(response)
            logger.warning(f"Amadeus {method} {path} failed with HTTP {response.status_code}: {detail}")
            raise AmadeusApiError(
                f"HTTP {response.status_code} from Amadeus {path}",
                status_code=response.status_code,
                detail=detail,
            )

        return response.json()
