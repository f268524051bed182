from __future__ import annotations

import hashlib
import itertools
from typing import Any, Sequence

import base58

from gateway.chain.abi import ACHIEVEMENTS_ABI, REWARDS_ABI, USERS_ABI, MethodSpec, to_canonical_hex
from gateway.chain.contracts import SendOptions
from gateway.chain.rpc import NodeRpcError
from gateway.core.errors import FeedError

TESTNET_P2PKH = 0x78
ZERO_ADDRESS = "0" * 40


def make_address(seed: str, *, version: int = TESTNET_P2PKH) -> tuple[str, str]:
    """Returns (display, canonical) for a deterministic test address."""
    h160 = hashlib.sha256(seed.encode("utf-8")).digest()[:20]
    display = base58.b58encode_check(bytes([version]) + h160).decode("utf-8")
    return display, h160.hex()


class FakeNode:
    def __init__(self) -> None:
        self.calls: list[tuple[str, list[Any]]] = []
        self.failures: dict[str, NodeRpcError] = {}
        self.confirmations: dict[str, int] = {}
        self.relayed: list[str] = []
        self._txids = itertools.count(1)

    async def call(self, method: str, params: list[Any] | None = None) -> Any:
        params = list(params or [])
        self.calls.append((method, params))
        if method in self.failures:
            raise self.failures[method]

        if method == "gethexaddress":
            raw = base58.b58decode_check(params[0])
            return raw[1:].hex()
        if method == "fromhexaddress":
            return base58.b58encode_check(bytes([TESTNET_P2PKH]) + bytes.fromhex(params[0])).decode("utf-8")
        if method == "decoderawtransaction":
            return {"txid": "decoded", "vout": [{"n": 0}]}
        if method == "sendrawtransaction":
            self.relayed.append(params[0])
            return f"rawtx{next(self._txids)}"
        if method == "gettransaction":
            return {"txid": params[0], "confirmations": self.confirmations.get(params[0], 0)}
        raise NodeRpcError(-32601, f"Method not found: {method}")

    def methods_called(self) -> list[str]:
        return [m for m, _ in self.calls]


class FakeContract:
    def __init__(self, name: str, address: str, methods: dict[str, MethodSpec]):
        self.name = name
        self.address = address
        self._methods = methods
        self.responses: dict[str, list[Any]] = {}
        self.calls: list[tuple[str, list[Any]]] = []
        self.sent: list[tuple[str, list[Any]]] = []
        self.fail_send: NodeRpcError | None = None
        self._txids = itertools.count(1)

    def encode(self, method: str, args: Sequence[Any] = ()) -> str:
        return self._methods[method].encode_call(args)

    async def call(self, method: str, args: Sequence[Any] = ()) -> list[Any]:
        self.calls.append((method, list(args)))
        return self.responses[method]

    async def send(self, method: str, args: Sequence[Any], options: SendOptions) -> str:
        if self.fail_send is not None:
            raise self.fail_send
        self.sent.append((method, list(args)))
        return f"{self.name}-tx{next(self._txids)}"


class FakeUsersContract(FakeContract):
    """Account registry with just enough state for the gateway's reads."""

    def __init__(self, address: str = "1" * 40):
        super().__init__("users", address, USERS_ABI)
        self.accounts: dict[str, tuple[str, str]] = {}

    def add_account(self, user: str, canonical: str, name: str = "") -> None:
        self.accounts[user] = (canonical, name)

    async def call(self, method: str, args: Sequence[Any] = ()) -> list[Any]:
        self.calls.append((method, list(args)))
        if method == "accountExists":
            return [args[0] in self.accounts]
        if method == "exists":
            return [any(a == to_canonical_hex(args[0]) for a, _ in self.accounts.values())]
        if method == "getAddressByAccount":
            return [self.accounts.get(args[0], (ZERO_ADDRESS, ""))[0]]
        if method == "getUsersCount":
            return [len(self.accounts)]
        if method == "getUserByIndex":
            user, (address, name) = list(self.accounts.items())[args[0]]
            return [address, user, name]
        raise KeyError(method)

    async def send(self, method: str, args: Sequence[Any], options: SendOptions) -> str:
        txid = await super().send(method, args, options)
        if method == "register":
            address, user, name = args
            self.add_account(user, address, name)
        return txid


def achievements_contract() -> FakeContract:
    c = FakeContract("achievements", "2" * 40, ACHIEVEMENTS_ABI)
    c.responses["rewards"] = [ZERO_ADDRESS]
    return c


def rewards_contract() -> FakeContract:
    return FakeContract("rewards", "3" * 40, REWARDS_ABI)


class FakeIdentity:
    def __init__(self) -> None:
        self.tokens: dict[str, str] = {}
        self.names: dict[str, str] = {}
        self.verify_calls: list[tuple[str, str]] = []

    def add_user(self, user: str, token: str, name: str | None = None) -> None:
        self.tokens[user] = token
        if name:
            self.names[user] = name

    async def verify_token(self, identity: str, token: str) -> bool:
        self.verify_calls.append((identity, token))
        return self.tokens.get(identity) == token

    async def profile_name(self, identity: str) -> str:
        return self.names.get(identity, identity)


class FakeFeed:
    def __init__(self) -> None:
        self.events: list[dict[str, Any]] = []
        self.fail = False

    async def add_activity(self, payload: dict[str, Any]) -> None:
        if self.fail:
            raise FeedError("feed down")
        self.events.append(payload)

    def verbs(self) -> list[str]:
        return [e["verb"] for e in self.events]
