"""
API router aggregating all REST endpoints.
"""

from fastapi import APIRouter

from api.routes.admin import router as admin_router
from api.routes.survey import router as survey_router
from api.routes.users import router as users_router

router = APIRouter()

router.include_router(users_router, prefix="/users", tags=["Users"])
router.include_router(survey_router, prefix="/survey", tags=["Survey"])
router.include_router(admin_router, tags=["Admin"])
