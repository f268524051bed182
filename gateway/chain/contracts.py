from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol, Sequence

from eth_abi.exceptions import DecodingError

from gateway.chain.abi import MethodSpec
from gateway.chain.rpc import NodeRpc, NodeRpcError
from gateway.core.errors import ChainCallError


log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SendOptions:
    gas_limit: int = 250_000
    gas_price: float = 0.0000004
    amount: float = 0
    sender_address: str | None = None


class Contract(Protocol):
    name: str
    address: str

    def encode(self, method: str, args: Sequence[Any] = ()) -> str:
        ...

    async def call(self, method: str, args: Sequence[Any] = ()) -> list[Any]:
        ...

    async def send(self, method: str, args: Sequence[Any], options: SendOptions) -> str:
        """Broadcasts a contract transaction and returns its txid."""
        ...


class QtumContract:
    """
    A deployed contract reached through `callcontract` / `sendtocontract`.

    `call` is read-only and maps node failures and reverted executions onto
    ChainCallError. `send` lets NodeRpcError propagate: what a failed
    submission means is the orchestrator's decision.
    """

    def __init__(self, rpc: NodeRpc, *, name: str, address: str, methods: dict[str, MethodSpec]):
        self.name = name
        self.address = address
        self._rpc = rpc
        self._methods = methods

    def _spec(self, method: str) -> MethodSpec:
        try:
            return self._methods[method]
        except KeyError:
            raise KeyError(f"{self.name} has no method {method}") from None

    def encode(self, method: str, args: Sequence[Any] = ()) -> str:
        return self._spec(method).encode_call(args)

    async def call(self, method: str, args: Sequence[Any] = ()) -> list[Any]:
        spec = self._spec(method)
        data = spec.encode_call(args)
        try:
            result = await self._rpc.call("callcontract", [self.address, data])
        except NodeRpcError as e:
            raise ChainCallError(f"{self.name}.{method}: {e.message}") from e

        execution = (result or {}).get("executionResult") or {}
        excepted = execution.get("excepted", "None")
        if excepted != "None":
            raise ChainCallError(f"{self.name}.{method} reverted: {excepted}")

        try:
            return spec.decode_outputs(execution.get("output") or "")
        except (DecodingError, ValueError) as e:
            raise ChainCallError(f"{self.name}.{method}: undecodable output") from e

    async def send(self, method: str, args: Sequence[Any], options: SendOptions) -> str:
        data = self.encode(method, args)
        params: list[Any] = [self.address, data, options.amount, options.gas_limit, options.gas_price]
        if options.sender_address:
            params.append(options.sender_address)

        result = await self._rpc.call("sendtocontract", params)
        txid = (result or {}).get("txid")
        if not txid:
            raise NodeRpcError(None, f"sendtocontract returned no txid for {self.name}.{method}")
        log.info("sent %s.%s txid=%s", self.name, method, txid)
        return txid
