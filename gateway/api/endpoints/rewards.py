from fastapi import APIRouter, Depends

from gateway.api.deps import get_services
from gateway.schemas.rewards import (
    DepositRequest,
    DepositResponse,
    EncodeDepositRequest,
    EncodeDepositResponse,
    EncodeSupportRequest,
    EncodeSupportResponse,
    SupportRequest,
    SupportResponse,
    WithdrawRequest,
    WithdrawResponse,
)
from gateway.services import workflows
from gateway.services.container import Services


router = APIRouter()

@router.post("/withdraw", response_model=WithdrawResponse)
async def withdraw(payload: WithdrawRequest, svc: Services = Depends(get_services)) -> WithdrawResponse:
    return await workflows.withdraw(svc, link=payload.link, witness=payload.witness)


@router.post("/encode-support", response_model=EncodeSupportResponse)
async def encode_support(payload: EncodeSupportRequest, svc: Services = Depends(get_services)) -> EncodeSupportResponse:
    return await workflows.encode_support(svc, link=payload.link)


@router.post("/encode-deposit", response_model=EncodeDepositResponse)
async def encode_deposit(payload: EncodeDepositRequest, svc: Services = Depends(get_services)) -> EncodeDepositResponse:
    return await workflows.encode_deposit(svc, link=payload.link, witness=payload.witness)


@router.post("/support", response_model=SupportResponse)
async def support(payload: SupportRequest, svc: Services = Depends(get_services)) -> SupportResponse:
    # rawTx is signed by the caller's wallet; the gateway only relays it
    return await workflows.support(
        svc,
        raw_tx=payload.raw_tx,
        link=payload.link,
        address=payload.address,
        user=payload.user,
        token=payload.token,
    )


@router.post("/deposit", response_model=DepositResponse)
async def deposit(payload: DepositRequest, svc: Services = Depends(get_services)) -> DepositResponse:
    return await workflows.deposit(
        svc,
        raw_tx=payload.raw_tx,
        link=payload.link,
        witness=payload.witness,
        address=payload.address,
        user=payload.user,
        token=payload.token,
        witness_name=payload.witness_name,
    )
