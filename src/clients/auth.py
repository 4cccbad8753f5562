# SPDX-License-Identifier: MIT
"""Client for the auth service issuing application tokens.

The client exchanges application credentials for a JWT, verifies cached
tokens against the service's public key before reusing them, and attaches
the token to outgoing requests. Public key and token retrieval each run
through a single-slot limiter, so concurrent callers share one request
instead of racing to refresh the cache.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx
import jwt
import logfire

from core.pipe import async_pipe
from core.result import Failure, Result, failure, success
from core.task_queue import limit_concurrency

from .http import join_url, json_fetcher, safe_request, text_fetcher, with_timeout
from .models import ApplicationJwtResponse

JWT_ALGORITHMS = ["RS256"]


@dataclass
class TokenCache:
    """Public key and application token held for the life of the process."""

    public_key: str | None = None
    token: str | None = None


class AuthClient:
    """Fetch and cache application tokens from the auth service."""

    def __init__(
        self,
        host: str,
        client_id: str,
        client_secret: str,
        *,
        http_client: httpx.AsyncClient,
        timeout: float = 10.0,
        cache: TokenCache | None = None,
    ) -> None:
        self.host = host
        self._client_id = client_id
        self._client_secret = client_secret
        self._http = http_client
        self._timeout = timeout
        self.cache = cache or TokenCache()
        self._limited_public_key = limit_concurrency(
            1, self._get_public_key, name="auth_public_key"
        )
        self._limited_token = limit_concurrency(
            1, self._get_client_token, name="auth_client_token"
        )

    @property
    def has_credentials(self) -> bool:
        return bool(self._client_id and self._client_secret)

    async def get_public_key(self) -> Result[str]:
        """Return the service public key, fetching it on first use."""
        return await self._limited_public_key()

    async def get_client_token(self) -> Result[str]:
        """Return a verified application token, fetching a new one if needed."""
        return await self._limited_token()

    async def fetch_with_auth(
        self, method: str, url: str, **kwargs: Any
    ) -> Result[httpx.Response]:
        """Send a request carrying the application token as a bearer header."""
        token = await self.get_client_token()
        if isinstance(token, Failure):
            return failure(
                "Cannot execute request with auth, failed to get application JWT",
                token,
            )
        headers = dict(kwargs.pop("headers", None) or {})
        headers["Authorization"] = f"Bearer {token.data}"
        return await safe_request(self._http, method, url, headers=headers, **kwargs)

    async def _fetch_public_key(self) -> Result[str]:
        logfire.info("Fetching auth service public key", host=self.host)
        fetch = text_fetcher(
            self._http, "GET", join_url(self.host, "oauth/token/public_key")
        )
        return await with_timeout(self._timeout, fetch)(None)

    async def _get_public_key(self) -> Result[str]:
        # The first key fetched is used until the process restarts.
        if self.cache.public_key:
            return success(self.cache.public_key)
        fetched = await self._fetch_public_key()
        if isinstance(fetched, Failure):
            return failure("Failed to fetch public key", fetched)
        self.cache.public_key = fetched.data
        return success(fetched.data)

    async def _fetch_client_token(self) -> Result[str]:
        logfire.info("Fetching application token using client credentials")
        fetch = (
            async_pipe(
                json_fetcher(
                    self._http,
                    "POST",
                    join_url(self.host, "oauth/token"),
                    params={"grant_type": "client_credentials"},
                    data={
                        "client_id": self._client_id,
                        "client_secret": self._client_secret,
                    },
                )
            )
            .into(ApplicationJwtResponse.model_validate)
            .into(lambda response: response.access_token)
            .build()
        )
        return await with_timeout(self._timeout, fetch)(None)

    def _token_is_valid(self, token: str, public_key: str) -> bool:
        try:
            jwt.decode(
                token,
                public_key,
                algorithms=JWT_ALGORITHMS,
                options={"verify_aud": False},
            )
        except jwt.PyJWTError as exc:
            logfire.debug("Cached application token rejected", reason=str(exc))
            return False
        return True

    async def _get_client_token(self) -> Result[str]:
        if not self.has_credentials:
            return failure("Cannot retrieve JWT, no application credentials provided.")
        public_key = await self.get_public_key()
        if isinstance(public_key, Failure):
            return failure(
                "Unable to retrieve client token, failed to get public key to "
                "validate tokens with",
                public_key,
            )
        cached = self.cache.token
        if cached and self._token_is_valid(cached, public_key.data):
            return success(cached)
        fetched = await self._fetch_client_token()
        if isinstance(fetched, Failure):
            return failure("Failure fetching new client token", fetched)
        self.cache.token = fetched.data
        return success(fetched.data)


__all__ = ["AuthClient", "TokenCache"]
