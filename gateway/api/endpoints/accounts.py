from fastapi import APIRouter, Depends

from gateway.api.deps import failures_as_500, get_services
from gateway.schemas.accounts import (
    AccessTokenResponse,
    CheckAccountRequest,
    CheckAccountResponse,
    CheckWalletAddressRequest,
    CheckWalletAddressResponse,
    OwnedAddressRequest,
    RegisterResponse,
    UsersResponse,
)
from gateway.services import workflows
from gateway.services.container import Services


router = APIRouter()

@router.post("/check", response_model=CheckAccountResponse, response_model_exclude_none=True)
async def check_account(payload: CheckAccountRequest, svc: Services = Depends(get_services)) -> CheckAccountResponse:
    with failures_as_500():
        return await workflows.check_account(svc, user=payload.user)


@router.post("/check-qtum-address", response_model=CheckWalletAddressResponse)
async def check_wallet_address(
    payload: CheckWalletAddressRequest,
    svc: Services = Depends(get_services),
) -> CheckWalletAddressResponse:
    with failures_as_500():
        return await workflows.check_wallet_address(svc, user=payload.user, wallet_address=payload.wallet_address)


@router.get("/users", response_model=UsersResponse)
async def list_users(svc: Services = Depends(get_services)) -> UsersResponse:
    with failures_as_500():
        return await workflows.list_users(svc)


@router.post("/getAccessToken", response_model=AccessTokenResponse)
async def get_access_token(payload: OwnedAddressRequest, svc: Services = Depends(get_services)) -> AccessTokenResponse:
    return await workflows.issue_access_token(svc, address=payload.address, user=payload.user, token=payload.token)


@router.post("/register", response_model=RegisterResponse)
async def register(payload: OwnedAddressRequest, svc: Services = Depends(get_services)) -> RegisterResponse:
    """
    Answers as soon as the node accepts the transaction. The pending flag
    reported by /check stays up until the confirmation tail finishes.
    """
    return await workflows.register_account(svc, address=payload.address, user=payload.user, token=payload.token)
