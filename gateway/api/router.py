from fastapi import APIRouter, Depends

from gateway.api.deps import log_request
from gateway.api.endpoints.health import router as health_router
from gateway.api.endpoints.accounts import router as accounts_router
from gateway.api.endpoints.achievements import router as achievements_router
from gateway.api.endpoints.rewards import router as rewards_router


router = APIRouter(dependencies=[Depends(log_request)])
router.include_router(health_router, tags=["health"])
router.include_router(accounts_router, tags=["accounts"])
router.include_router(achievements_router, tags=["achievements"])
router.include_router(rewards_router, tags=["rewards"])
