from __future__ import annotations

import logging

from gateway.chain.abi import content_hash
from gateway.core.errors import AlreadyInitialized, InvalidAddress, UserExists
from gateway.schemas.accounts import (
    AccessTokenResponse,
    CheckAccountResponse,
    CheckWalletAddressResponse,
    RegisterResponse,
    UserEntry,
    UsersResponse,
)
from gateway.schemas.achievements import ConfirmResponse, CreateResponse, InitResponse
from gateway.schemas.rewards import (
    DepositResponse,
    EncodeDepositResponse,
    EncodeSupportResponse,
    SupportResponse,
    WithdrawResponse,
)
from gateway.services.activity import ActivityEvent
from gateway.services.container import Services
from gateway.services.pending import PendingClaim
from gateway.services.transactions import TransactionRecord


log = logging.getLogger(__name__)


# accounts

async def check_account(svc: Services, *, user: str) -> CheckAccountResponse:
    if await svc.pending.check(user):
        return CheckAccountResponse(exists=False, pending=True)

    (exists,) = await svc.users.call("accountExists", [user])
    return CheckAccountResponse(exists=bool(exists))


async def check_wallet_address(svc: Services, *, user: str, wallet_address: str) -> CheckWalletAddressResponse:
    if not svc.codec.validate_display_form(wallet_address):
        raise InvalidAddress(details={"walletAddress": wallet_address})

    hex_wallet = await svc.codec.to_canonical(wallet_address)
    recorded = await svc.verifier.recorded_address(user)

    return CheckWalletAddressResponse(
        ok=recorded == hex_wallet,
        user=user,
        wallet_address=wallet_address,
        address=recorded,
    )


async def list_users(svc: Services) -> UsersResponse:
    (count,) = await svc.users.call("getUsersCount")

    entries: list[UserEntry] = []
    for index in range(int(count)):
        hex_address, account, name = await svc.users.call("getUserByIndex", [index])
        entries.append(UserEntry(
            user_address=await svc.codec.to_display(hex_address),
            user_account=account,
            user_name=name,
        ))

    return UsersResponse(users_list=entries)


async def issue_access_token(svc: Services, *, address: str, user: str, token: str) -> AccessTokenResponse:
    await svc.verifier.verify(user, token, address)
    return AccessTokenResponse(access_token=svc.tokens.issue(address=address, user=user), address=address, user=user)


async def _settle_registration(svc: Services, claim: PendingClaim, record: TransactionRecord) -> None:
    async with claim:
        confirmed = await svc.orchestrator.wait_for_confirmation(record.txid)
        if not confirmed:
            log.warning("registration for %s not confirmed, releasing pending flag (txid=%s)", claim.identity, record.txid)


async def register_account(svc: Services, *, address: str, user: str, token: str) -> RegisterResponse:
    hex_address = await svc.verifier.authenticate(user, token, address)

    claim = await svc.pending.claim(user)
    try:
        (exists,) = await svc.users.call("exists", [hex_address])
        if exists:
            raise UserExists(details={"address": address})

        user_profile_name = await svc.identity.profile_name(user)
        record = await svc.orchestrator.submit(svc.users, "register", [hex_address, user, user_profile_name])
    except BaseException:
        await claim.release()
        raise

    try:
        await svc.recorder.record(ActivityEvent(
            actor=user,
            object=address,
            target=record.txid,
            name=user_profile_name,
            verb="register",
        ))
    finally:
        # the transaction is in flight whether or not the feed accepted it
        svc.background.spawn(_settle_registration(svc, claim, record), name=f"confirm-register:{user}")

    return RegisterResponse(
        user=user,
        address=address,
        hex_address=hex_address,
        user_profile_name=user_profile_name,
        txid=record.txid,
    )


# achievements

async def confirm_achievement(svc: Services, *, address: str, user: str, token: str, link: str) -> ConfirmResponse:
    hex_address = await svc.verifier.verify(user, token, address)

    record = await svc.orchestrator.submit(svc.achievements, "confirmFrom", [hex_address, link])
    user_profile_name = await svc.identity.profile_name(user)

    await svc.recorder.record(ActivityEvent(
        actor=user,
        object=link,
        target=record.txid,
        name=user_profile_name,
        verb="confirm",
    ))

    return ConfirmResponse(
        user=user,
        address=address,
        hex_address=hex_address,
        link=link,
        user_profile_name=user_profile_name,
        txid=record.txid,
    )


async def create_achievement(
    svc: Services,
    *,
    user: str,
    token: str,
    address: str,
    link: str,
    title: str,
    previous_link: str | None,
) -> CreateResponse:
    hex_address = await svc.verifier.verify(user, token, address)

    digest = content_hash(link)
    record = await svc.orchestrator.submit(
        svc.achievements,
        "createFrom",
        [hex_address, link, digest, title, previous_link or ""],
    )

    verb = "update" if previous_link else "create"
    user_profile_name = await svc.identity.profile_name(user)

    await svc.recorder.record(ActivityEvent(
        actor=user,
        object=link,
        target=record.txid,
        verb=verb,
        name=user_profile_name,
    ))

    return CreateResponse(
        user=user,
        address=address,
        hex_address=hex_address,
        link=link,
        title=title,
        previous_link=previous_link,
        txid=record.txid,
        user_profile_name=user_profile_name,
        content_hash="0x" + digest.hex(),
    )


async def init_rewards(svc: Services) -> InitResponse:
    (initialized_address,) = await svc.achievements.call("rewards")
    if int(initialized_address, 16) != 0:
        raise AlreadyInitialized(details={"initializedAddress": initialized_address})

    rewards_address = svc.rewards.address
    record = await svc.orchestrator.submit(svc.achievements, "initRewards", [rewards_address])

    return InitResponse(txid=record.txid, rewards_address=rewards_address)


# rewards

async def withdraw(svc: Services, *, link: str, witness: str) -> WithdrawResponse:
    if not svc.codec.validate_display_form(witness):
        raise InvalidAddress(details={"witness": witness})

    hex_witness = await svc.codec.to_canonical(witness)
    record = await svc.orchestrator.submit(svc.rewards, "withdraw", [link, hex_witness])

    await svc.recorder.record(ActivityEvent(
        actor=witness,
        object=link,
        target=record.txid,
        verb="withdraw",
    ))

    return WithdrawResponse(txid=record.txid, link=link, witness=witness, hex_witness=hex_witness)


async def encode_support(svc: Services, *, link: str) -> EncodeSupportResponse:
    return EncodeSupportResponse(
        address=svc.rewards.address,
        link=link,
        encoded_data=svc.rewards.encode("support", [link]),
    )


async def encode_deposit(svc: Services, *, link: str, witness: str) -> EncodeDepositResponse:
    if not svc.codec.validate_display_form(witness):
        raise InvalidAddress(details={"witness": witness})

    hex_witness = await svc.codec.to_canonical(witness)

    return EncodeDepositResponse(
        address=svc.rewards.address,
        link=link,
        witness=witness,
        encoded_data=svc.rewards.encode("deposit", [link, "0x" + hex_witness]),
    )


async def support(svc: Services, *, raw_tx: str, link: str, address: str, user: str, token: str) -> SupportResponse:
    await svc.verifier.verify(user, token, address)

    decoded = await svc.orchestrator.decode_raw(raw_tx)
    log.info("support: decoded txid=%s vout=%d", decoded.get("txid"), len(decoded.get("vout") or []))

    txid = await svc.orchestrator.relay_raw(raw_tx)
    user_profile_name = await svc.identity.profile_name(user)

    await svc.recorder.record(ActivityEvent(
        actor=address,
        object=link,
        target=txid,
        name=user_profile_name,
        verb="support",
    ))

    return SupportResponse(txid=txid, link=link, address=address, user_profile_name=user_profile_name, user=user)


async def deposit(
    svc: Services,
    *,
    raw_tx: str,
    link: str,
    witness: str,
    address: str,
    user: str,
    token: str,
    witness_name: str | None,
) -> DepositResponse:
    await svc.verifier.verify(user, token, address)

    txid = await svc.orchestrator.relay_raw(raw_tx)
    user_profile_name = await svc.identity.profile_name(user)

    await svc.recorder.record(ActivityEvent(
        actor=address,
        object=link,
        witness=witness,
        target=txid,
        name=user_profile_name,
        witness_name=witness_name,
        verb="deposit",
    ))

    return DepositResponse(
        txid=txid,
        link=link,
        witness=witness,
        address=address,
        user_profile_name=user_profile_name,
        user=user,
    )
