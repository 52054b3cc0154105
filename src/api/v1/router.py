from fastapi import APIRouter

from src.api.v1.endpoints.admin_applications import router as admin_applications_router
from src.api.v1.endpoints.admin_payments import router as admin_payments_router
from src.api.v1.endpoints.applications import router as applications_router

router = APIRouter()


@router.get("/ping")
async def ping():
    return {"ping": "pong"}


router.include_router(applications_router)
router.include_router(admin_applications_router)
router.include_router(admin_payments_router)
