from fastapi import APIRouter, Depends

from gateway.api.deps import get_services
from gateway.schemas.achievements import ConfirmRequest, ConfirmResponse, CreateRequest, CreateResponse, InitResponse
from gateway.services import workflows
from gateway.services.container import Services


router = APIRouter()

@router.post("/confirm", response_model=ConfirmResponse)
async def confirm(payload: ConfirmRequest, svc: Services = Depends(get_services)) -> ConfirmResponse:
    return await workflows.confirm_achievement(
        svc,
        address=payload.address,
        user=payload.user,
        token=payload.token,
        link=payload.link,
    )


@router.post("/create", response_model=CreateResponse)
async def create(payload: CreateRequest, svc: Services = Depends(get_services)) -> CreateResponse:
    return await workflows.create_achievement(
        svc,
        user=payload.user,
        token=payload.token,
        address=payload.address,
        link=payload.link,
        title=payload.title,
        previous_link=payload.previous_link,
    )


@router.post("/init", response_model=InitResponse)
async def init(svc: Services = Depends(get_services)) -> InitResponse:
    return await workflows.init_rewards(svc)
