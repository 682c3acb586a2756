"""V1 API router -- aggregates all v1 endpoint routers."""

from __future__ import annotations

from fastapi import APIRouter

from src.crm.api.v1 import (
    auth,
    clients,
    dashboard,
    finances,
    health,
    leads,
    notifications,
    onboarding,
    properties,
    requests,
    requirements,
    stages,
    tools,
)

router = APIRouter()

router.include_router(health.router)
router.include_router(auth.router)
router.include_router(stages.router)
router.include_router(clients.router)
router.include_router(onboarding.router)
router.include_router(requests.router)
router.include_router(requirements.router)
router.include_router(properties.router)
router.include_router(finances.router)
router.include_router(leads.router)
router.include_router(dashboard.router)
router.include_router(notifications.router)
router.include_router(tools.router)
