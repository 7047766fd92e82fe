"""Async client for the Authn8 personal access token API.

All requests carry the bearer token and a fixed User-Agent. Non-2xx
responses and transport failures are normalised to :mod:`authn8_mcp.errors`.
The account list is cached per client instance for ``cache_ttl`` seconds.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable
from urllib.parse import quote

import httpx

from . import __version__
from .config import DEFAULT_API_URL
from .errors import ConfigError, UpstreamError, error_for_response
from .models import Account, AccountsResponse, OtpResult, TokenInfo
from .resolver import ResolutionOutcome, resolve_by_name

logger = logging.getLogger(__name__)

USER_AGENT = f"authn8-mcp/{__version__}"
CACHE_TTL_SECONDS = 60.0


class AccountCache:
    """Last fetched account list plus the time it was fetched.

    The list and timestamp are always replaced together, so a reader sees
    either the previous snapshot or the new one.
    """

    def __init__(self, ttl: float = CACHE_TTL_SECONDS) -> None:
        self.ttl = ttl
        self._accounts: tuple[Account, ...] | None = None
        self._fetched_at: float = 0.0

    def get(self, now: float) -> tuple[Account, ...] | None:
        """Return the snapshot if it is younger than the TTL, else None."""
        if self._accounts is None:
            return None
        if now - self._fetched_at >= self.ttl:
            return None
        return self._accounts

    def replace(self, accounts: tuple[Account, ...], now: float) -> None:
        self._accounts, self._fetched_at = accounts, now


class Authn8Client:
    """Thin async wrapper over the Authn8 ``/api/pat`` endpoints.

    Args:
        api_key: Personal access token. Requests fail with ConfigError when
            it is empty.
        base_url: API base URL.
        timeout: Per-request timeout in seconds.
        cache_ttl: Account list cache lifetime in seconds.
        transport: Optional httpx transport, mainly for tests.
        clock: Monotonic clock used for cache ageing.
    """

    def __init__(
        self,
        api_key: str | None,
        base_url: str = DEFAULT_API_URL,
        *,
        timeout: float = 10.0,
        cache_ttl: float = CACHE_TTL_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._clock = clock
        self._cache = AccountCache(ttl=cache_ttl)
        self._cache_lock = asyncio.Lock()
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "User-Agent": USER_AGENT,
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "Authn8Client":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, path: str, method: str = "GET") -> Any:
        if not self._api_key:
            raise ConfigError(
                "AUTHN8_API_KEY environment variable is not set. "
                "Please set it to your PAT token from the Authn8 dashboard."
            )
        try:
            response = await self._http.request(
                method,
                path,
                headers={"Authorization": f"Bearer {self._api_key}"},
            )
        except httpx.HTTPError as exc:
            logger.warning(f"{method} {path} failed: {exc!r}")
            raise UpstreamError(f"Request to {self.base_url}{path} failed: {exc}") from exc

        logger.debug(f"{method} {path} -> {response.status_code}")
        if response.is_success:
            return response.json()

        error = error_for_response(response)
        logger.warning(f"{method} {path} returned {response.status_code}: {error.message}")
        raise error

    async def get_token_info(self) -> TokenInfo:
        """Fetch token details. Never cached."""
        data = await self._request("/api/pat/me")
        return TokenInfo.model_validate(data)

    async def list_accounts(self) -> tuple[Account, ...]:
        """Return the account list, fetching it when the cache is stale."""
        async with self._cache_lock:
            cached = self._cache.get(self._clock())
            if cached is not None:
                return cached
            data = await self._request("/api/pat/accounts")
            accounts = tuple(AccountsResponse.model_validate(data).accounts)
            self._cache.replace(accounts, self._clock())
            logger.info(f"Fetched {len(accounts)} accounts")
            return accounts

    async def get_otp(self, account_id: str) -> OtpResult:
        """Fetch a fresh code. Unknown ids surface as NotFoundError."""
        data = await self._request(f"/api/pat/otp/{quote(account_id, safe='')}")
        return OtpResult.model_validate(data)

    async def find_account_by_id(self, account_id: str) -> Account | None:
        """Look ``account_id`` up in the (possibly cached) account list."""
        for account in await self.list_accounts():
            if account.id == account_id:
                return account
        return None

    async def resolve_by_name(self, name: str) -> ResolutionOutcome:
        """Resolve ``name`` against the (possibly cached) account list."""
        return resolve_by_name(name, await self.list_accounts())
