from __future__ import annotations

from dataclasses import dataclass, field

import httpx
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from cloudstage.core.config import Settings
from cloudstage.db.session import build_engine, build_session_factory
from cloudstage.integrations.cashfree import CashfreeClient
from cloudstage.integrations.push import FcmPushClient, LoggingPushClient, PushClient
from cloudstage.integrations.razorpay import RazorpayClient


@dataclass
class ServiceContainer:
    """
    Every external handle the app uses, built once at startup and passed
    to routes through dependencies.
    """
    settings: Settings
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    http: httpx.AsyncClient
    push: PushClient
    cashfree: CashfreeClient
    razorpay: RazorpayClient
    _owns_http: bool = field(default=True, repr=False)

    @property
    def gateways(self) -> dict[str, CashfreeClient | RazorpayClient]:
        return {"cashfree": self.cashfree, "razorpay": self.razorpay}

    async def close(self) -> None:
        if self._owns_http:
            await self.http.aclose()
        await self.engine.dispose()


def build_container(
    settings: Settings,
    *,
    engine: AsyncEngine | None = None,
    http: httpx.AsyncClient | None = None,
    push: PushClient | None = None,
) -> ServiceContainer:
    engine = engine or build_engine(settings.DATABASE_URL)
    owns_http = http is None
    http = http or httpx.AsyncClient(timeout=settings.PROVIDER_TIMEOUT_SECONDS)

    if push is None:
        push = FcmPushClient(settings) if settings.FCM_ENABLED else LoggingPushClient()

    return ServiceContainer(
        settings=settings,
        engine=engine,
        session_factory=build_session_factory(engine),
        http=http,
        push=push,
        cashfree=CashfreeClient(settings, http),
        razorpay=RazorpayClient(settings, http),
        _owns_http=owns_http,
    )
