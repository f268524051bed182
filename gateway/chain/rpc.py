from __future__ import annotations

import itertools
import logging
from typing import Any, Protocol

from gateway.core.http_client import GatewayHttpClient


log = logging.getLogger(__name__)


class NodeRpcError(Exception):
    def __init__(self, code: int | str | None, message: str):
        self.code = code
        self.message = message
        super().__init__(f"{code}: {message}" if code is not None else message)


class NodeRpc(Protocol):
    async def call(self, method: str, params: list[Any] | None = None) -> Any:
        ...


class QtumRpcClient:
    """
    JSON-RPC 1.0 client for a qtumd node.

    The node answers RPC-level failures with HTTP 500 and a JSON body whose
    `error` member carries the node's code/message, so the body is inspected
    before the status.
    """

    def __init__(self, http: GatewayHttpClient, *, url: str):
        self._http = http
        self._url = url
        self._ids = itertools.count(1)

    async def call(self, method: str, params: list[Any] | None = None) -> Any:
        request_id = next(self._ids)
        body = {"jsonrpc": "1.0", "id": request_id, "method": method, "params": list(params or [])}

        result = await self._http.post_json(url=self._url, json_body=body)

        err = result.detail.get("error")
        if isinstance(err, dict):
            raise NodeRpcError(err.get("code"), str(err.get("message") or "rpc error"))
        if not result.ok:
            log.warning("rpc %s failed: %s %s", method, result.error_code, result.error_message)
            raise NodeRpcError(result.error_code, result.error_message or "rpc transport error")

        return result.detail.get("result")
