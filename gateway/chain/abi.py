from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from eth_abi import decode, encode
from eth_utils import function_signature_to_4byte_selector, keccak, to_checksum_address


def to_canonical_hex(value: str) -> str:
    """Contract-side address form: 40 lowercase hex chars, no 0x."""
    v = value.lower()
    if v.startswith("0x"):
        v = v[2:]
    return v


def content_hash(link: str) -> bytes:
    return keccak(text=link)


@dataclass(frozen=True)
class MethodSpec:
    name: str
    inputs: tuple[str, ...] = ()
    outputs: tuple[str, ...] = ()

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.inputs)})"

    @property
    def selector(self) -> bytes:
        return function_signature_to_4byte_selector(self.signature)

    def encode_call(self, args: Sequence[Any] = ()) -> str:
        if len(args) != len(self.inputs):
            raise ValueError(f"{self.signature} expects {len(self.inputs)} args, got {len(args)}")
        values = [_prepare(t, v) for t, v in zip(self.inputs, args)]
        return (self.selector + encode(list(self.inputs), values)).hex()

    def decode_outputs(self, data: str) -> list[Any]:
        if not self.outputs:
            return []
        raw = bytes.fromhex(to_canonical_hex(data))
        values = decode(list(self.outputs), raw)
        return [_normalize(t, v) for t, v in zip(self.outputs, values)]


def _prepare(abi_type: str, value: Any) -> Any:
    if abi_type == "address" and isinstance(value, str):
        return to_checksum_address("0x" + to_canonical_hex(value))
    if abi_type == "bytes32" and isinstance(value, str):
        return bytes.fromhex(to_canonical_hex(value))
    return value


def _normalize(abi_type: str, value: Any) -> Any:
    if abi_type == "address":
        return to_canonical_hex(value)
    return value


def _methods(*specs: MethodSpec) -> dict[str, MethodSpec]:
    return {s.name: s for s in specs}


USERS_ABI = _methods(
    MethodSpec("accountExists", ("string",), ("bool",)),
    MethodSpec("exists", ("address",), ("bool",)),
    MethodSpec("getAddressByAccount", ("string",), ("address",)),
    MethodSpec("getUserByIndex", ("uint256",), ("address", "string", "string")),
    MethodSpec("getUsersCount", (), ("uint256",)),
    MethodSpec("register", ("address", "string", "string")),
)

ACHIEVEMENTS_ABI = _methods(
    MethodSpec("confirmFrom", ("address", "string")),
    MethodSpec("createFrom", ("address", "string", "bytes32", "string", "string")),
    MethodSpec("rewards", (), ("address",)),
    MethodSpec("initRewards", ("address",)),
)

REWARDS_ABI = _methods(
    MethodSpec("withdraw", ("string", "address")),
    MethodSpec("support", ("string",)),
    MethodSpec("deposit", ("string", "address")),
)
