from decimal import Decimal

from sqlalchemy import select

from cloudstage.core.exceptions import PushDeliveryError, StoreWriteError
from cloudstage.models.event import Event, ModerationStatus
from cloudstage.models.ticket import Ticket


async def _event(services, event_id: str) -> Event:
    async with services.session_factory() as s:
        return await s.get(Event, event_id)


# -----------------------------
# Admin key guard
# -----------------------------
async def test_admin_requires_key(client, seeded):
    r = await client.get("/api/admin/events/pending")

    assert r.status_code == 403


async def test_admin_rejects_wrong_key(client, seeded):
    r = await client.get("/api/admin/events/pending", headers={"X-Admin-Key": "nope"})

    assert r.status_code == 403


async def test_admin_hidden_when_disabled(client, services, admin_headers):
    services.settings.ADMIN_API_ENABLED = False

    r = await client.get("/api/admin/events/pending", headers=admin_headers)

    assert r.status_code == 404


async def test_admin_fails_closed_without_configured_key(client, services):
    services.settings.ADMIN_KEY = ""

    r = await client.get("/api/admin/reconciliation", headers={"X-Admin-Key": ""})

    assert r.status_code == 500


# -----------------------------
# Moderation
# -----------------------------
async def test_pending_lists_events_awaiting_moderation(client, seeded, admin_headers):
    r = await client.get("/api/admin/events/pending", headers=admin_headers)

    assert r.status_code == 200
    assert [e["id"] for e in r.json()] == ["evt1"]


async def test_approve_notifies_followers(client, services, seeded, push, admin_headers):
    r = await client.post("/api/admin/events/evt1/approve", headers=admin_headers)

    assert r.status_code == 200
    data = r.json()
    assert data["event"]["moderation_status"] == "approved"
    assert data["notification"]["success"] is True
    assert data["notification"]["token_count"] == 2
    assert len(push.calls) == 1
    assert (await _event(services, "evt1")).moderation_status is ModerationStatus.approved


async def test_approve_without_notify(client, seeded, push, admin_headers):
    r = await client.post("/api/admin/events/evt1/approve?notify=false", headers=admin_headers)

    assert r.status_code == 200
    assert r.json()["notification"] is None
    assert push.calls == []


async def test_approval_stands_when_push_is_unreachable(client, services, seeded, push, admin_headers, monkeypatch):
    async def unreachable(**kwargs):
        raise PushDeliveryError("FCM multicast failed: connection refused")

    monkeypatch.setattr(push, "send_multicast", unreachable)

    r = await client.post("/api/admin/events/evt1/approve", headers=admin_headers)

    assert r.status_code == 200
    assert r.json()["notification"] == {
        "success": False,
        "message": "Failed to send notifications.",
        "token_count": 0,
        "success_count": 0,
        "failure_count": 0,
    }
    assert (await _event(services, "evt1")).moderation_status is ModerationStatus.approved


async def test_reject(client, services, seeded, push, admin_headers):
    r = await client.post("/api/admin/events/evt1/reject", headers=admin_headers)

    assert r.status_code == 200
    assert r.json()["event"]["moderation_status"] == "rejected"
    assert push.calls == []


async def test_boost_toggle(client, services, seeded, admin_headers):
    r = await client.post(
        "/api/admin/events/evt1/boost", json={"is_boosted": True, "amount": "250"}, headers=admin_headers
    )

    assert r.status_code == 200
    assert r.json()["is_boosted"] is True
    assert Decimal(r.json()["boost_amount"]) == Decimal("250")

    r = await client.post("/api/admin/events/evt1/boost", json={"is_boosted": False}, headers=admin_headers)

    assert r.json()["is_boosted"] is False
    assert r.json()["boost_amount"] is None


async def test_notify_resends(client, seeded, push, admin_headers):
    r = await client.post("/api/admin/events/evt1/notify", headers=admin_headers)

    assert r.status_code == 200
    assert r.json()["message"] == "Sent 2 of 2 notifications."


async def test_unknown_event_is_404(client, seeded, admin_headers):
    r = await client.post("/api/admin/events/nope/approve", headers=admin_headers)

    assert r.status_code == 404
    assert r.json()["error"] == "not_found"


# -----------------------------
# Reconciliation
# -----------------------------
async def _fail_one_ticket(client, monkeypatch, cashfree_paid_body, cashfree_headers) -> str:
    async def failing_create_ticket(db, **kwargs):
        raise StoreWriteError("could not serialize access due to concurrent update")

    monkeypatch.setattr("cloudstage.services.fulfillment_service.create_ticket", failing_create_ticket)
    body = cashfree_paid_body()
    r = await client.post("/api/cashfree-webhook", content=body, headers=cashfree_headers(body))
    monkeypatch.undo()
    return r.json()["reconciliation_id"]


async def test_reconciliation_listing_hides_raw_error(
    client, admin_headers, monkeypatch, cashfree_paid_body, cashfree_headers
):
    entry_id = await _fail_one_ticket(client, monkeypatch, cashfree_paid_body, cashfree_headers)

    r = await client.get("/api/admin/reconciliation", headers=admin_headers)

    assert r.status_code == 200
    assert r.json()["count"] == 1
    [item] = r.json()["items"]
    assert item["id"] == entry_id
    assert item["dispatch_kind"] == "ticket"
    assert "error_raw" not in item
    assert item["error_summary"].startswith("StoreWriteError")


async def test_replay_creates_ticket_and_resolves(
    client, services, admin_headers, monkeypatch, cashfree_paid_body, cashfree_headers
):
    entry_id = await _fail_one_ticket(client, monkeypatch, cashfree_paid_body, cashfree_headers)

    r = await client.post(f"/api/admin/reconciliation/{entry_id}/replay", headers=admin_headers)

    assert r.status_code == 200
    assert r.json()["already_resolved"] is False
    assert r.json()["outcome"]["kind"] == "ticket"

    async with services.session_factory() as s:
        tickets = (await s.execute(select(Ticket))).scalars().all()
    assert [(t.user_id, t.event_id, t.payment_id) for t in tickets] == [("u1", "evt1", "pay1")]

    # Second replay is a no-op
    r = await client.post(f"/api/admin/reconciliation/{entry_id}/replay", headers=admin_headers)
    assert r.json()["already_resolved"] is True

    r = await client.get("/api/admin/reconciliation", headers=admin_headers)
    assert r.json()["count"] == 0


async def test_resolve_marks_entry(client, admin_headers, monkeypatch, cashfree_paid_body, cashfree_headers):
    entry_id = await _fail_one_ticket(client, monkeypatch, cashfree_paid_body, cashfree_headers)

    r = await client.post(f"/api/admin/reconciliation/{entry_id}/resolve", headers=admin_headers)

    assert r.status_code == 200
    assert r.json()["resolved_at"] is not None

    r = await client.get("/api/admin/reconciliation?include_resolved=true", headers=admin_headers)
    assert r.json()["count"] == 1


async def test_unknown_reconciliation_entry_is_404(client, admin_headers):
    r = await client.post("/api/admin/reconciliation/does-not-exist/resolve", headers=admin_headers)

    assert r.status_code == 404


async def test_approval_stands_when_artist_row_is_missing(client, services, seeded, push, admin_headers):
    db = seeded
    db.add(Event(id="orphan", title="Lost Set", artist_id="ghost", ticket_price=Decimal("100")))
    await db.commit()

    r = await client.post("/api/admin/events/orphan/approve", headers=admin_headers)

    assert r.status_code == 200
    assert r.json()["event"]["moderation_status"] == "approved"
    assert r.json()["notification"]["success"] is False
    assert push.calls == []
    assert (await _event(services, "orphan")).moderation_status is ModerationStatus.approved
