from fastapi import APIRouter

from gateway.schemas.common import PongResponse

router = APIRouter()

@router.get("/ping", response_model=PongResponse)
async def ping() -> PongResponse:
    return PongResponse()
