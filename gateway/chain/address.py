from __future__ import annotations

import logging
import re

import base58

from gateway.chain.abi import to_canonical_hex
from gateway.chain.rpc import NodeRpc, NodeRpcError
from gateway.core.errors import ConversionError


log = logging.getLogger(__name__)

# version byte -> P2PKH / P2SH
NETWORK_VERSIONS: dict[str, frozenset[int]] = {
    "mainnet": frozenset({0x3A, 0x32}),
    "testnet": frozenset({0x78, 0x6E}),
}

_CANONICAL_RE = re.compile(r"^[0-9a-f]{40}$")


def is_canonical(value: str) -> bool:
    return bool(_CANONICAL_RE.match(value))


class AddressCodec:
    """
    Converts between display (Base58Check) and canonical (40 hex chars)
    addresses.

    `validate_display_form` is purely syntactic. Conversions go through the
    node so the gateway agrees with whatever the chain itself accepts.
    """

    def __init__(self, rpc: NodeRpc, *, network: str = "testnet"):
        self._rpc = rpc
        self._versions = NETWORK_VERSIONS[network]

    def validate_display_form(self, value: object) -> bool:
        if not isinstance(value, str) or not 26 <= len(value) <= 35:
            return False
        try:
            raw = base58.b58decode_check(value)
        except ValueError:
            return False
        return len(raw) == 21 and raw[0] in self._versions

    async def to_canonical(self, display: str) -> str:
        try:
            result = await self._rpc.call("gethexaddress", [display])
        except NodeRpcError as e:
            raise ConversionError(f"gethexaddress failed: {e.message}") from e

        canonical = to_canonical_hex(str(result or ""))
        if not is_canonical(canonical):
            raise ConversionError(f"node returned malformed hex address for {display}")
        return canonical

    async def to_display(self, canonical: str) -> str:
        try:
            result = await self._rpc.call("fromhexaddress", [to_canonical_hex(canonical)])
        except NodeRpcError as e:
            raise ConversionError(f"fromhexaddress failed: {e.message}") from e
        if not result:
            raise ConversionError(f"node returned no display address for {canonical}")
        return str(result)
