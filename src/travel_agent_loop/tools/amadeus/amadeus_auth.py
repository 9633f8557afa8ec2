from __future__ import annotations

import asyncio
import time
from collections.abc import Callable

import httpx
from loguru import logger
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from travel_agent_loop.errors import AmadeusAuthError
from travel_agent_loop.providers.common import on_retry

TOKEN_PATH = "/v1/security/oauth2/token"
EXPIRY_SKEW_SECONDS = 60


class AmadeusTokenCache:
    """Caches the client-credentials bearer token for the Amadeus API.

    The token is reused while ``now < expires_at`` where ``expires_at`` is the
    issue time plus the advertised lifetime minus a 60 second skew. Concurrent
    callers that find the token expired share a single refresh.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        client_id: str,
        client_secret: str,
        *,
        clock: Callable[[], float] = time.monotonic,
        skew_seconds: int = EXPIRY_SKEW_SECONDS,
    ):
        self._client = client
        self._client_id = client_id
        self._client_secret = client_secret
        self._clock = clock
        self._skew_seconds = skew_seconds
        self._token: str | None = None
        self._expires_at = 0.0
        self._refresh_lock = asyncio.Lock()

    @property
    def expires_at(self) -> float:
        return self._expires_at

    def _cached(self) -> str | None:
        if self._token is not None and self._clock() < self._expires_at:
            return self._token
        return None

    async def get_token(self) -> str:
        token = self._cached()
        if token is not None:
            return token

        async with self._refresh_lock:
            # Another caller may have refreshed while we waited.
            token = self._cached()
            if token is not None:
                return token
            return await self._refresh()

    def invalidate(self) -> None:
        self._token = None
        self._expires_at = 0.0

    async def _refresh(self) -> str:
        if not self._client_id or not self._client_secret:
            raise AmadeusAuthError("Amadeus client id/secret are not configured")

        issued_at = self._clock()
        try:
            response = await self._exchange()
        except httpx.HTTPError as ex:
            logger.error(f"Amadeus token exchange failed: {ex}")
            raise AmadeusAuthError("Failed to authenticate with Amadeus API") from ex

        if response.status_code >= 400:
            logger.error(f"Amadeus token exchange returned HTTP {response.status_code}: {response.text[:500]}")
            raise AmadeusAuthError("Failed to authenticate with Amadeus API")

        body = response.json()
        token = body.get("access_token")
        if not token:
            raise AmadeusAuthError("Amadeus token response did not contain an access_token")

        expires_in = int(body.get("expires_in", 0))
        if expires_in - self._skew_seconds <= 0:
            logger.error(f"Amadeus token lifetime {expires_in}s does not exceed the {self._skew_seconds}s skew")
            raise AmadeusAuthError("Amadeus token response has no usable lifetime")
        self._token = token
        self._expires_at = issued_at + expires_in - self._skew_seconds
        logger.debug(f"Amadeus token refreshed, valid for {expires_in}s (skew {self._skew_seconds}s)")
        return token

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        stop=stop_after_attempt(3),
        before_sleep=on_retry,
        reraise=True,
    )
    async def _exchange(self) -> httpx.Response:
        return await self._client.post(
            TOKEN_PATH,
            data={
                "grant_type": "client_credentials",
                "client_id": self._client_id,
                "client_secret": self._client_secret,
            },
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
