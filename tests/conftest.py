"""Shared test fixtures."""

import base64
import hashlib
import hmac
import json
from decimal import Decimal

import httpx
import pytest

from cloudstage.core.config import Settings
from cloudstage.core.container import build_container
from cloudstage.db.base import Base, import_models
from cloudstage.db.session import build_engine
from cloudstage.integrations.push import MulticastResult
from cloudstage.main import create_app
from cloudstage.models.app_user import AppUser
from cloudstage.models.artist import Artist
from cloudstage.models.event import Event, ModerationStatus
from cloudstage.models.follower import ArtistFollower

CASHFREE_SECRET = "cf_secret_test"
RAZORPAY_WEBHOOK_SECRET = "rzp_whsec_test"
ADMIN_KEY = "admin-test-key"


class FakePushClient:
    """Records multicast calls; tokens listed in failing_tokens count as failures."""

    def __init__(self):
        self.calls: list[dict] = []
        self.failing_tokens: set[str] = set()

    async def send_multicast(self, *, title, body, tokens, link=None):
        self.calls.append({"title": title, "body": body, "tokens": list(tokens), "link": link})
        failures = sum(1 for t in tokens if t in self.failing_tokens)
        return MulticastResult(success_count=len(tokens) - failures, failure_count=failures)


class FakeProviders:
    """Stands in for the Cashfree and Razorpay Orders APIs."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.reject_with: tuple[int, dict] | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.reject_with:
            status, body = self.reject_with
            return httpx.Response(status, json=body)

        body = json.loads(request.content)
        if "cashfree" in request.url.host:
            return httpx.Response(
                200,
                json={
                    "order_id": body["order_id"],
                    "order_currency": body["order_currency"],
                    "order_amount": body["order_amount"],
                    "payment_session_id": "session_test_123",
                },
            )
        return httpx.Response(
            200,
            json={
                "id": "order_rzp_test_1",
                "amount": body["amount"],
                "currency": body["currency"],
                "receipt": body["receipt"],
                "status": "created",
            },
        )

    @property
    def last_body(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        DATABASE_URL="sqlite+aiosqlite://",
        LOG_DIR=str(tmp_path / "logs"),
        PUBLIC_BASE_URL="https://cloudstage.example.com",
        CASHFREE_APP_ID="cf_app_test",
        CASHFREE_SECRET_KEY=CASHFREE_SECRET,
        CASHFREE_BASE_URL="https://sandbox.cashfree.test/pg",
        RAZORPAY_KEY_ID="rzp_test_key",
        RAZORPAY_KEY_SECRET="rzp_test_secret",
        RAZORPAY_WEBHOOK_SECRET=RAZORPAY_WEBHOOK_SECRET,
        RAZORPAY_BASE_URL="https://api.razorpay.test/v1",
        FCM_ENABLED=False,
        ADMIN_API_ENABLED=True,
        ADMIN_KEY=ADMIN_KEY,
        TEST_MODE_BOOKINGS_ENABLED=True,
    )


@pytest.fixture
def providers():
    return FakeProviders()


@pytest.fixture
def push():
    return FakePushClient()


@pytest.fixture
async def services(settings, providers, push):
    import_models()
    engine = build_engine(settings.DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    http = httpx.AsyncClient(transport=httpx.MockTransport(providers.handler))
    container = build_container(settings, engine=engine, http=http, push=push)

    yield container

    await http.aclose()
    await container.close()


@pytest.fixture
async def db(services):
    async with services.session_factory() as session:
        yield session


@pytest.fixture
async def client(services):
    app = create_app(services=services)
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        yield c


@pytest.fixture
def admin_headers():
    return {"X-Admin-Key": ADMIN_KEY}


@pytest.fixture
async def seeded(db):
    """
    Artist a1 ("Asha") with one pending event evt1 and three followers:
    viewer u1 (token tok-u1), viewer u2 (no token), artist a2 (token tok-a2).
    """
    db.add_all(
        [
            Artist(id="a1", name="Asha", email="asha@example.com"),
            Artist(id="a2", name="Ravi", fcm_token="tok-a2"),
            AppUser(id="u1", fcm_token="tok-u1"),
            AppUser(id="u2"),
        ]
    )
    await db.flush()
    db.add_all(
        [
            Event(
                id="evt1",
                title="Evening Ragas",
                artist_id="a1",
                ticket_price=Decimal("500"),
                moderation_status=ModerationStatus.pending,
            ),
            ArtistFollower(artist_id="a1", follower_id="u1"),
            ArtistFollower(artist_id="a1", follower_id="u2"),
            ArtistFollower(artist_id="a1", follower_id="a2"),
        ]
    )
    await db.commit()
    return db


# -----------------------------
# Webhook signing helpers
# -----------------------------
@pytest.fixture
def cashfree_headers():
    def _sign(body: bytes, *, secret: str = CASHFREE_SECRET, timestamp: str = "1718000000") -> dict:
        digest = hmac.new(secret.encode(), timestamp.encode() + body, hashlib.sha256).digest()
        return {
            "x-webhook-signature": base64.b64encode(digest).decode(),
            "x-webhook-timestamp": timestamp,
            "content-type": "application/json",
        }

    return _sign


@pytest.fixture
def razorpay_headers():
    def _sign(body: bytes, *, secret: str = RAZORPAY_WEBHOOK_SECRET) -> dict:
        return {
            "x-razorpay-signature": hmac.new(secret.encode(), body, hashlib.sha256).hexdigest(),
            "content-type": "application/json",
        }

    return _sign


@pytest.fixture
def cashfree_paid_body():
    def _build(
        *,
        order_meta: dict | None = None,
        customer_id: str = "u1",
        amount=500,
        payment_id="pay1",
        order_status: str = "PAID",
        event_type: str = "PAYMENT_SUCCESS_WEBHOOK",
    ) -> bytes:
        payload = {
            "type": event_type,
            "event_time": "2024-06-10T12:00:00+05:30",
            "data": {
                "order": {
                    "order_id": "TICKET_evt1_1718000000",
                    "order_status": order_status,
                    "order_meta": {"eventId": "evt1"} if order_meta is None else order_meta,
                    "order_amount": amount,
                },
                "payment": {"cf_payment_id": payment_id, "payment_status": "SUCCESS"},
            },
            "customer_details": {
                "customer_id": customer_id,
                "customer_name": "Meera Iyer",
                "customer_email": "meera@example.com",
                "customer_phone": "9876543210",
            },
        }
        return json.dumps(payload).encode()

    return _build


@pytest.fixture
def razorpay_paid_body():
    def _build(*, notes: dict | list | None = None, amount: int = 49900, payment_id: str = "pay_rzp_1",
               event: str = "order.paid") -> bytes:
        if notes is None:
            notes = {
                "type": "ticket",
                "userId": "u1",
                "eventId": "evt1",
                "buyerName": "Meera Iyer",
                "buyerEmail": "meera@example.com",
                "buyerPhone": "9876543210",
            }
        payload = {
            "entity": "event",
            "account_id": "acc_test",
            "event": event,
            "created_at": 1718000000,
            "payload": {
                "order": {
                    "entity": {
                        "id": "order_rzp_test_1",
                        "amount": amount,
                        "currency": "INR",
                        "status": "paid",
                        "receipt": "TICKET_evt1",
                        "notes": notes,
                    }
                },
                "payment": {
                    "entity": {
                        "id": payment_id,
                        "amount": amount,
                        "email": "fallback@example.com",
                        "contact": "+919000000000",
                    }
                },
            },
        }
        return json.dumps(payload).encode()

    return _build
