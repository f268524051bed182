from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from gateway.chain.abi import ACHIEVEMENTS_ABI, REWARDS_ABI, USERS_ABI
from gateway.chain.address import AddressCodec
from gateway.chain.contracts import Contract, QtumContract, SendOptions
from gateway.chain.rpc import QtumRpcClient
from gateway.core.config import Settings
from gateway.core.crypto import AccessTokenIssuer
from gateway.core.http_client import GatewayHttpClient
from gateway.services.activity import ActivityRecorder, HttpActivityFeed
from gateway.services.background import BackgroundWork
from gateway.services.identity import HttpIdentityVerifier, IdentityVerifier
from gateway.services.ownership import OwnershipVerifier
from gateway.services.pending import InMemoryPendingStore, PendingRegistrationTracker, RedisPendingStore
from gateway.services.transactions import TransactionOrchestrator


@dataclass
class Services:
    """Everything a request handler needs, built once per process."""

    codec: AddressCodec
    identity: IdentityVerifier
    verifier: OwnershipVerifier
    pending: PendingRegistrationTracker
    orchestrator: TransactionOrchestrator
    recorder: ActivityRecorder
    users: Contract
    achievements: Contract
    rewards: Contract
    tokens: AccessTokenIssuer
    background: BackgroundWork = field(default_factory=BackgroundWork)
    closers: list[Callable[[], Awaitable[Any]]] = field(default_factory=list)

    async def aclose(self) -> None:
        await self.background.aclose()
        for close in self.closers:
            await close()


def build_services(settings: Settings) -> Services:
    timeout = settings.http_timeout_seconds

    node_http = GatewayHttpClient(
        timeout_seconds=timeout,
        auth=(settings.qtum_rpc_user, settings.qtum_rpc_password.get_secret_value()),
    )
    http = GatewayHttpClient(timeout_seconds=timeout)
    rpc = QtumRpcClient(node_http, url=settings.qtum_rpc_url)

    codec = AddressCodec(rpc, network=settings.qtum_network)
    identity = HttpIdentityVerifier(
        http,
        base_url=settings.identity_verifier_url,
        api_key=settings.identity_verifier_api_key.get_secret_value(),
    )
    users = QtumContract(rpc, name="users", address=settings.users_contract_address, methods=USERS_ABI)
    achievements = QtumContract(
        rpc, name="achievements", address=settings.achievements_contract_address, methods=ACHIEVEMENTS_ABI
    )
    rewards = QtumContract(rpc, name="rewards", address=settings.rewards_contract_address, methods=REWARDS_ABI)

    closers: list[Callable[[], Awaitable[Any]]] = [node_http.aclose, http.aclose]

    if settings.pending_store == "redis":
        # outlive the confirmation wait so a crashed instance still expires its keys
        store = RedisPendingStore(settings.redis_url, ttl_seconds=int(settings.confirmation_timeout_seconds) + 60)
        closers.append(store.aclose)
    else:
        store = InMemoryPendingStore()

    orchestrator = TransactionOrchestrator(
        rpc,
        options=SendOptions(
            gas_limit=settings.gas_limit,
            gas_price=settings.gas_price,
            sender_address=settings.sender_address,
        ),
        required_confirmations=settings.required_confirmations,
        poll_seconds=settings.confirmation_poll_seconds,
        timeout_seconds=settings.confirmation_timeout_seconds,
    )

    return Services(
        codec=codec,
        identity=identity,
        verifier=OwnershipVerifier(codec=codec, identity=identity, users=users),
        pending=PendingRegistrationTracker(store),
        orchestrator=orchestrator,
        recorder=ActivityRecorder(
            HttpActivityFeed(http, url=settings.feed_url, api_key=settings.feed_api_key.get_secret_value())
        ),
        users=users,
        achievements=achievements,
        rewards=rewards,
        tokens=AccessTokenIssuer(
            settings.access_token_key.get_secret_value(), ttl_seconds=settings.access_token_ttl_seconds
        ),
        closers=closers,
    )
