from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Literal, Protocol

from gateway.core.errors import FeedError
from gateway.core.http_client import GatewayHttpClient


log = logging.getLogger(__name__)

Verb = Literal["register", "confirm", "create", "update", "withdraw", "support", "deposit"]


@dataclass(frozen=True)
class ActivityEvent:
    actor: str
    object: str
    target: str  # txid
    verb: Verb
    name: str | None = None
    witness: str | None = None
    witness_name: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload = {
            "actor": self.actor,
            "object": self.object,
            "target": self.target,
            "verb": self.verb,
            "name": self.name,
            "witness": self.witness,
            "witnessName": self.witness_name,
        }
        return {k: v for k, v in payload.items() if v is not None}


class ActivityFeed(Protocol):
    async def add_activity(self, payload: dict[str, Any]) -> None:
        ...


class HttpActivityFeed:
    def __init__(self, http: GatewayHttpClient, *, url: str, api_key: str | None = None):
        self._http = http
        self._url = url
        self._headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}

    async def add_activity(self, payload: dict[str, Any]) -> None:
        result = await self._http.post_json(url=self._url, headers=self._headers, json_body=payload)
        if not result.ok:
            raise FeedError(
                f"feed rejected {payload.get('verb')} activity: {result.error_code}",
                details={"target": payload.get("target")},
            )


class ActivityRecorder:
    """
    Mirrors accepted transactions into the activity feed.

    A feed failure is raised to the caller even though the transaction is
    already on its way; the two are not rolled back together.
    """

    def __init__(self, feed: ActivityFeed):
        self._feed = feed

    async def record(self, event: ActivityEvent) -> None:
        if not event.target:
            raise ValueError("activity events need the txid of an accepted transaction")

        payload = event.to_payload()
        log.info("activity %s actor=%s target=%s", event.verb, event.actor, event.target)
        try:
            await self._feed.add_activity(payload)
        except FeedError:
            log.exception("activity %s for txid=%s not recorded", event.verb, event.target)
            raise
