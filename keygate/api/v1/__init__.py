"""API v1 router."""

from fastapi import APIRouter

from keygate.api.v1.me import router as me_router
from keygate.api.v1.plans import router as plans_router

router = APIRouter()

router.include_router(plans_router, prefix="/plans", tags=["plans"])
router.include_router(me_router, prefix="/me", tags=["identity"])
