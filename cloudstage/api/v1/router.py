from fastapi import APIRouter
from cloudstage.api.v1 import admin_events, admin_reconciliation, checkout, health, tickets, webhooks

router = APIRouter()
router.include_router(health.router, tags=["health"])
router.include_router(checkout.router, tags=["payments"])
router.include_router(webhooks.router, tags=["payments"])
router.include_router(tickets.router)

# Admin
router.include_router(admin_events.router, tags=["admin"])
router.include_router(admin_reconciliation.router, tags=["admin"])
