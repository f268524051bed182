import os

os.environ.setdefault("TELEMETRY_ENABLED", "false")

import httpx
import pytest
import pytest_asyncio
from cryptography.fernet import Fernet

from gateway.chain.address import AddressCodec
from gateway.chain.contracts import SendOptions
from gateway.core.crypto import AccessTokenIssuer
from gateway.main import create_app
from gateway.services.activity import ActivityRecorder
from gateway.services.container import Services
from gateway.services.ownership import OwnershipVerifier
from gateway.services.pending import InMemoryPendingStore, PendingRegistrationTracker
from gateway.services.transactions import TransactionOrchestrator

from tests.fakes import (
    FakeFeed,
    FakeIdentity,
    FakeNode,
    FakeUsersContract,
    achievements_contract,
    make_address,
    rewards_contract,
)


@pytest.fixture
def node():
    return FakeNode()


@pytest.fixture
def identity():
    return FakeIdentity()


@pytest.fixture
def users():
    return FakeUsersContract()


@pytest.fixture
def feed():
    return FakeFeed()


@pytest.fixture
def services(node, identity, users, feed) -> Services:
    codec = AddressCodec(node, network="testnet")
    return Services(
        codec=codec,
        identity=identity,
        verifier=OwnershipVerifier(codec=codec, identity=identity, users=users),
        pending=PendingRegistrationTracker(InMemoryPendingStore()),
        orchestrator=TransactionOrchestrator(
            node,
            options=SendOptions(),
            required_confirmations=1,
            poll_seconds=0.01,
            timeout_seconds=2.0,
        ),
        recorder=ActivityRecorder(feed),
        users=users,
        achievements=achievements_contract(),
        rewards=rewards_contract(),
        tokens=AccessTokenIssuer(Fernet.generate_key()),
    )


@pytest_asyncio.fixture
async def client(services):
    app = create_app(services=services)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    await services.background.aclose()


@pytest.fixture
def alice(identity, users):
    """A registered user with a valid token."""
    display, canonical = make_address("alice")
    identity.add_user("alice", "alice-token", name="Alice A.")
    users.add_account("alice", canonical, "Alice A.")
    return {"user": "alice", "token": "alice-token", "address": display, "hex": canonical}
