from __future__ import annotations

import logging
from typing import Protocol
from urllib.parse import quote

from gateway.core.errors import IdentityUnavailable
from gateway.core.http_client import GatewayHttpClient


log = logging.getLogger(__name__)


class IdentityVerifier(Protocol):
    async def verify_token(self, identity: str, token: str) -> bool:
        ...

    async def profile_name(self, identity: str) -> str:
        ...


class HttpIdentityVerifier:
    """
    Client for the external auth service that owns user identities.

    401/403 from /verify mean "token does not belong to this user";
    anything else that is not a 2xx means the service could not answer.
    """

    def __init__(self, http: GatewayHttpClient, *, base_url: str, api_key: str | None = None):
        self._http = http
        self._base = base_url.rstrip("/")
        self._headers = {"X-API-Key": api_key} if api_key else {}

    async def verify_token(self, identity: str, token: str) -> bool:
        result = await self._http.post_json(
            url=f"{self._base}/verify",
            headers=self._headers,
            json_body={"user": identity, "token": token},
        )
        if result.ok:
            return result.detail.get("valid") is True
        if result.status_code in (401, 403):
            return False
        log.warning("identity verify failed: %s %s", result.error_code, result.error_message)
        raise IdentityUnavailable(f"token validation failed: {result.error_code}")

    async def profile_name(self, identity: str) -> str:
        result = await self._http.get_json(
            url=f"{self._base}/users/{quote(identity, safe='')}",
            headers=self._headers,
        )
        if not result.ok:
            log.warning("profile lookup failed for %s: %s", identity, result.error_code)
            raise IdentityUnavailable(f"profile lookup failed: {result.error_code}")
        return result.detail.get("displayName") or identity
