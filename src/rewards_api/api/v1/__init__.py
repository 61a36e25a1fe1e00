from fastapi import APIRouter

from .endpoints import discount_codes, health, lucky_draw, observability

router = APIRouter()
router.include_router(health.router, tags=["Health"])
router.include_router(lucky_draw.router)
router.include_router(discount_codes.router)
router.include_router(observability.router)
