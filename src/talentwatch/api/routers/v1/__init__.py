"""API v1 routers."""

from fastapi import APIRouter

from .alerts import router as alerts_router
from .assessments import router as assessments_router
from .compliance import router as compliance_router
from .reports import router as reports_router
from .rules import router as rules_router

router = APIRouter(prefix="/v1")

router.include_router(compliance_router)
router.include_router(alerts_router)
router.include_router(rules_router)
router.include_router(reports_router)
router.include_router(assessments_router)

__all__ = [
    "alerts_router",
    "assessments_router",
    "compliance_router",
    "reports_router",
    "router",
    "rules_router",
]
