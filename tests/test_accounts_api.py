import httpx
import pytest

from gateway.chain.rpc import NodeRpcError
from gateway.core.errors import ChainCallError
from gateway.main import create_app

from tests.fakes import make_address


@pytest.mark.asyncio
async def test_check_existing_account(client, alice):
    r = await client.post("/check", json={"user": "alice"})
    assert r.status_code == 200
    assert r.json() == {"exists": True}


@pytest.mark.asyncio
async def test_check_unknown_account(client):
    r = await client.post("/check", json={"user": "nobody"})
    assert r.json() == {"exists": False}


@pytest.mark.asyncio
async def test_check_reports_pending(client, services, users):
    await services.pending.try_begin("alice")
    r = await client.post("/check", json={"user": "alice"})
    assert r.json() == {"exists": False, "pending": True}
    assert users.calls == []


@pytest.mark.asyncio
async def test_check_rejects_unknown_fields(client):
    r = await client.post("/check", json={"user": "alice", "admin": True})
    assert r.status_code == 422
    assert r.json()["error"] == "INVALID_REQUEST"


@pytest.mark.asyncio
async def test_check_rejects_missing_fields(client):
    r = await client.post("/check", json={})
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_check_wallet_address(client, alice):
    r = await client.post("/check-qtum-address", json={"user": "alice", "walletAddress": alice["address"]})
    assert r.status_code == 200
    assert r.json() == {"ok": True, "user": "alice", "walletAddress": alice["address"], "address": alice["hex"]}

    other, _ = make_address("other")
    r = await client.post("/check-qtum-address", json={"user": "alice", "walletAddress": other})
    assert r.json()["ok"] is False
    assert r.json()["address"] == alice["hex"]


@pytest.mark.asyncio
async def test_list_users(client, users):
    a_display, a_hex = make_address("a")
    b_display, b_hex = make_address("b")
    users.add_account("a", a_hex, "A")
    users.add_account("b", b_hex, "B")

    r = await client.get("/users")
    assert r.status_code == 200
    assert r.json() == {
        "usersList": [
            {"userAddress": a_display, "userAccount": "a", "userName": "A"},
            {"userAddress": b_display, "userAccount": "b", "userName": "B"},
        ]
    }


@pytest.mark.asyncio
async def test_get_access_token(client, services, alice):
    r = await client.post("/getAccessToken", json={"address": alice["address"], "user": "alice", "token": "alice-token"})
    assert r.status_code == 200
    body = r.json()
    assert body["address"] == alice["address"]
    assert services.tokens.read(body["accessToken"])["user"] == "alice"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "override, status, code",
    [
        ({"address": "not-an-address"}, 400, "INVALID_ADDRESS"),
        ({"token": "stolen"}, 401, "INVALID_TOKEN"),
        ({"address": make_address("mallory")[0]}, 403, "INVALID_ADDRESS_OWNER"),
    ],
)
async def test_get_access_token_errors(client, alice, override, status, code):
    body = {"address": alice["address"], "user": "alice", "token": "alice-token", **override}
    r = await client.post("/getAccessToken", json=body)
    assert r.status_code == status
    assert r.json()["error"] == code
    assert r.json()["message"]


@pytest.mark.asyncio
async def test_check_chain_failure_is_500_with_code(client, users, monkeypatch):
    async def failing_call(method, args=()):
        raise ChainCallError("users.accountExists: node unreachable")

    monkeypatch.setattr(users, "call", failing_call)
    r = await client.post("/check", json={"user": "alice"})
    assert r.status_code == 500
    assert r.json()["error"] == "CHAIN_CALL_FAILED"


@pytest.mark.asyncio
async def test_check_wallet_address_malformed_is_500_with_code(client, node, alice):
    r = await client.post("/check-qtum-address", json={"user": "alice", "walletAddress": "not-an-address"})
    assert r.status_code == 500
    assert r.json()["error"] == "INVALID_ADDRESS"
    assert node.calls == []


@pytest.mark.asyncio
async def test_list_users_conversion_failure_is_500_with_code(client, node, alice):
    node.failures["fromhexaddress"] = NodeRpcError(-5, "Invalid address")
    r = await client.get("/users")
    assert r.status_code == 500
    assert r.json()["error"] == "CONVERSION_ERROR"


@pytest.mark.asyncio
async def test_unexpected_failure_hides_exception_text(services, users, monkeypatch):
    async def crashing_call(method, args=()):
        raise KeyError("secret detail")

    monkeypatch.setattr(users, "call", crashing_call)
    app = create_app(services=services)
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        r = await ac.post("/check", json={"user": "alice"})

    assert r.status_code == 500
    assert r.json() == {"error": "INTERNAL_ERROR", "message": "Internal error", "details": {}}
    assert "secret detail" not in r.text
