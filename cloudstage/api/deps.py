from fastapi import Header, HTTPException, Request

from cloudstage.core.config import Settings
from cloudstage.core.container import ServiceContainer


# -----------------------------
# Dependency: Service container built at startup
# -----------------------------
def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services


def get_settings(request: Request) -> Settings:
    return request.app.state.services.settings


# -----------------------------
# Dependency: Admin key
# -----------------------------
def require_admin(
    request: Request,
    x_admin_key: str | None = Header(default=None, alias="X-Admin-Key"),
) -> None:
    """
    Admin routes are hidden unless enabled, and fail closed without a key.
    """
    settings = get_settings(request)
    if not settings.ADMIN_API_ENABLED:
        raise HTTPException(status_code=404, detail="Admin API not enabled")
    if not settings.ADMIN_KEY:
        raise HTTPException(status_code=500, detail="ADMIN_KEY not configured")
    if not x_admin_key or x_admin_key != settings.ADMIN_KEY:
        raise HTTPException(status_code=403, detail="Forbidden")
