"""Push notifications through Firebase Cloud Messaging."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

import firebase_admin
from firebase_admin import credentials, exceptions, messaging

from cloudstage.core.config import Settings
from cloudstage.core.exceptions import PushDeliveryError

logger = logging.getLogger(__name__)

MAX_MULTICAST_TOKENS = 500


@dataclass
class MulticastResult:
    success_count: int
    failure_count: int
    dry_run: bool = False


class PushClient(Protocol):
    async def send_multicast(
        self,
        *,
        title: str,
        body: str,
        tokens: list[str],
        link: str | None = None,
    ) -> MulticastResult: ...


class FcmPushClient:
    """Sends one multicast message per call via the Firebase Admin SDK."""

    def __init__(self, settings: Settings, app_name: str = "cloudstage"):
        try:
            self._app = firebase_admin.get_app(app_name)
        except ValueError:
            cred = (
                credentials.Certificate(settings.FCM_CREDENTIALS_FILE)
                if settings.FCM_CREDENTIALS_FILE
                else credentials.ApplicationDefault()
            )
            self._app = firebase_admin.initialize_app(cred, name=app_name)

    async def send_multicast(
        self,
        *,
        title: str,
        body: str,
        tokens: list[str],
        link: str | None = None,
    ) -> MulticastResult:
        success_count = 0
        failure_count = 0

        # FCM caps a multicast at 500 recipients
        for start in range(0, len(tokens), MAX_MULTICAST_TOKENS):
            batch = tokens[start:start + MAX_MULTICAST_TOKENS]
            message = messaging.MulticastMessage(
                notification=messaging.Notification(title=title, body=body),
                webpush=messaging.WebpushConfig(
                    fcm_options=messaging.WebpushFCMOptions(link=link) if link else None,
                ),
                fids=batch,
            )

            try:
                # The Admin SDK is blocking
                response = await asyncio.to_thread(
                    messaging.send_each_for_multicast, message, app=self._app
                )
            except (exceptions.FirebaseError, ValueError) as e:
                raise PushDeliveryError(f"FCM multicast failed: {e}") from e

            success_count += response.success_count
            failure_count += response.failure_count

        if failure_count:
            logger.warning("FCM: %s of %s messages failed", failure_count, len(tokens))

        return MulticastResult(success_count=success_count, failure_count=failure_count)


class LoggingPushClient:
    """Used when FCM is disabled: records who would have been notified."""

    async def send_multicast(
        self,
        *,
        title: str,
        body: str,
        tokens: list[str],
        link: str | None = None,
    ) -> MulticastResult:
        logger.info("Push disabled; would have sent %r to %s tokens (link=%s)", title, len(tokens), link)
        return MulticastResult(success_count=0, failure_count=0, dry_run=True)
