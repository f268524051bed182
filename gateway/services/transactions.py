from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Sequence

from gateway.chain.contracts import Contract, SendOptions
from gateway.chain.rpc import NodeRpc, NodeRpcError
from gateway.core.errors import SubmitError


log = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransactionRecord:
    txid: str
    contract: str
    method: str
    args: tuple[Any, ...]


class TransactionOrchestrator:
    """
    Single point where the gateway puts transactions on chain.

    Nothing here retries. A returned txid means the node accepted the
    transaction, not that it is mined; only callers that need finality
    (registration) go on to `wait_for_confirmation`.
    """

    def __init__(
        self,
        rpc: NodeRpc,
        *,
        options: SendOptions,
        required_confirmations: int = 1,
        poll_seconds: float = 5.0,
        timeout_seconds: float = 600.0,
    ):
        self._rpc = rpc
        self._options = options
        self._required = required_confirmations
        self._poll = poll_seconds
        self._timeout = timeout_seconds

    async def submit(self, contract: Contract, method: str, args: Sequence[Any]) -> TransactionRecord:
        log.info("submit %s.%s args=%s", contract.name, method, list(args))
        try:
            txid = await contract.send(method, args, self._options)
        except NodeRpcError as e:
            log.error("submit %s.%s failed: %s", contract.name, method, e)
            raise SubmitError(f"{contract.name}.{method}: {e.message}") from e
        return TransactionRecord(txid=txid, contract=contract.name, method=method, args=tuple(args))

    async def decode_raw(self, raw_tx: str) -> dict[str, Any]:
        try:
            return await self._rpc.call("decoderawtransaction", [raw_tx])
        except NodeRpcError as e:
            raise SubmitError(f"decoderawtransaction: {e.message}") from e

    async def relay_raw(self, raw_tx: str) -> str:
        try:
            txid = await self._rpc.call("sendrawtransaction", [raw_tx])
        except NodeRpcError as e:
            log.error("sendrawtransaction failed: %s", e)
            raise SubmitError(f"sendrawtransaction: {e.message}") from e
        if not txid:
            raise SubmitError("sendrawtransaction returned no txid")
        log.info("relayed raw transaction txid=%s", txid)
        return txid

    async def _confirmations(self, txid: str) -> int:
        try:
            tx = await self._rpc.call("gettransaction", [txid])
        except NodeRpcError as e:
            # not yet visible to the wallet, or node briefly unreachable
            log.debug("gettransaction %s: %s", txid, e)
            return 0
        return int((tx or {}).get("confirmations") or 0)

    async def _poll_until_confirmed(self, txid: str, required: int) -> None:
        while await self._confirmations(txid) < required:
            await asyncio.sleep(self._poll)

    async def wait_for_confirmation(self, txid: str, *, confirmations: int | None = None) -> bool:
        """
        Returns True once `txid` reaches the required depth, False if the
        timeout elapses first.
        """
        required = self._required if confirmations is None else confirmations
        try:
            await asyncio.wait_for(self._poll_until_confirmed(txid, required), timeout=self._timeout)
        except asyncio.TimeoutError:
            log.warning("confirmation timeout txid=%s after %ss", txid, self._timeout)
            return False
        log.info("confirmed txid=%s depth>=%d", txid, required)
        return True
