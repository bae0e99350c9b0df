"""HTTP API tests: routing, payloads and error mapping."""

import pytest
from aiohttp.test_utils import TestClient, TestServer

from database import Database
from panel.main import build_app
from services.notifications import AdminNotifier


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    
    assert resp.status == 200
    assert (await resp.json())["status"] == "ok"


@pytest.mark.asyncio
async def test_redeem_flow(client, make_ambassador):
    ambassador = await make_ambassador(coupon_code="GLOW10")
    
    resp = await client.post("/api/coupon/redeem", json={
        "code": "glow10", "orderId": "W-1001", "orderAmount": 100,
        "customerEmail": "shopper@example.com",
    })
    assert resp.status == 200
    body = await resp.json()
    assert body["success"] is True
    assert body["ambassadorId"] == ambassador.id
    assert body["orderId"] == "W-1001"
    assert body["commission"] == 10.0
    assert body["isPaid"] is False
    
    resp = await client.get(f"/api/ambassadors/{ambassador.id}")
    snapshot = (await resp.json())["ambassador"]
    assert snapshot["sales"] == 100.0
    assert snapshot["earnings"] == 10.0
    assert snapshot["orders"] == 1
    assert snapshot["paymentsPending"] == 10.0
    assert snapshot["recentOrders"][0]["orderId"] == "W-1001"
    assert snapshot["recentOrders"][0]["isPaid"] is False


@pytest.mark.asyncio
async def test_redeem_twice_conflicts(client, make_ambassador):
    await make_ambassador(coupon_code="GLOW10")
    payload = {"code": "GLOW10", "orderId": "W-1", "orderAmount": "20.00"}
    
    assert (await client.post("/api/coupon/redeem", json=payload)).status == 200
    resp = await client.post("/api/coupon/redeem", json=payload)
    
    assert resp.status == 409
    assert (await resp.json())["kind"] == "already_redeemed"


@pytest.mark.asyncio
async def test_redeem_unknown_code(client):
    resp = await client.post("/api/coupon/redeem", json={
        "code": "NOPE", "orderId": "W-1", "orderAmount": 10,
    })
    
    assert resp.status == 404
    assert (await resp.json())["kind"] == "not_found"


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [
    {"code": "GLOW10", "orderId": "W-1"},
    {"code": "GLOW10", "orderId": "W-1", "orderAmount": -5},
    {"code": "", "orderId": "W-1", "orderAmount": 5},
    {"code": "GLOW10", "orderId": "W-1", "orderAmount": "1e30"},
    {"code": "GLOW10", "orderId": "W-1", "orderAmount": 10000000000},
    {"code": "GLOW10", "orderId": "W-1", "orderAmount": "NaN"},
    ["not", "an", "object"],
])
async def test_redeem_bad_payload(client, payload):
    resp = await client.post("/api/coupon/redeem", json=payload)
    
    assert resp.status == 400
    body = await resp.json()
    assert body["kind"] == "validation_error"
    assert "field" in body


@pytest.mark.asyncio
async def test_malformed_json(client):
    resp = await client.post(
        "/api/coupon/redeem", data="{oops", headers={"Content-Type": "application/json"}
    )
    
    assert resp.status == 400
    assert (await resp.json())["field"] == "body"


@pytest.mark.asyncio
async def test_validate_and_list_codes(client, make_ambassador):
    ambassador = await make_ambassador(coupon_code="GLOW10")
    
    resp = await client.post("/api/coupon/validate", json={"code": "glow10"})
    body = await resp.json()
    assert body["valid"] is True
    assert body["discount"]["value"] == 10
    
    resp = await client.post("/api/coupon/validate", json={"code": "NOPE"})
    assert (await resp.json())["valid"] is False
    
    resp = await client.get("/api/coupon/list")
    body = await resp.json()
    assert body["status"] == "success"
    assert body["count"] == 2
    assert {c["type"] for c in body["coupons"]} == {"coupon", "referral"}
    assert body["coupons"][0]["ambassadorId"] == ambassador.id
    assert body["coupons"][0]["ambassadorName"] == "Diana Prince"


@pytest.mark.asyncio
async def test_apply_notifies_admins(client, notifier, bot):
    resp = await client.post("/api/ambassadors/apply", json={
        "email": "nina@example.com", "fullName": "Nina Simone", "motivation": "Love it",
    })
    
    assert resp.status == 201
    body = await resp.json()
    assert body["reference"].startswith("APP-")
    
    await notifier.drain()
    assert bot.send_message.await_count == 2
    
    resp = await client.post("/api/ambassadors/apply", json={
        "email": "nina@example.com", "fullName": "Nina Simone",
    })
    assert resp.status == 409
    assert (await resp.json())["kind"] == "duplicate_key"


@pytest.mark.asyncio
async def test_apply_succeeds_when_telegram_fails(client, notifier, bot):
    bot.send_message.side_effect = RuntimeError("telegram down")
    
    resp = await client.post("/api/ambassadors/apply", json={
        "email": "nina@example.com", "fullName": "Nina Simone",
    })
    await notifier.drain()
    
    assert resp.status == 201


@pytest.mark.asyncio
async def test_admin_lifecycle(client):
    resp = await client.post("/api/ambassadors", json={
        "name": "Oscar Wilde", "email": "oscar@example.com", "status": "pending",
    })
    assert resp.status == 201
    created = (await resp.json())["ambassador"]
    assert created["status"] == "pending"
    assert created["referralCode"] is None
    ambassador_id = created["id"]
    
    resp = await client.patch(f"/api/ambassadors/{ambassador_id}/status", json={
        "status": "approved", "reviewedBy": "admin",
    })
    approved = (await resp.json())["ambassador"]
    assert approved["status"] == "approved"
    assert approved["couponCode"] == approved["referralCode"]
    assert approved["referralCode"].startswith("OSC")
    
    resp = await client.patch(f"/api/ambassadors/{ambassador_id}", json={
        "name": "Oscar F. Wilde", "discountPercent": 12, "email": "other@example.com",
    })
    edited = (await resp.json())["ambassador"]
    assert edited["name"] == "Oscar F. Wilde"
    assert edited["discountPercent"] == 12
    assert edited["email"] == "oscar@example.com"
    
    resp = await client.get("/api/ambassadors", params={"status": "approved"})
    listed = (await resp.json())["ambassadors"]
    assert [a["id"] for a in listed] == [ambassador_id]
    
    resp = await client.get("/api/ambassadors", params={"status": "bogus"})
    assert resp.status == 400


@pytest.mark.asyncio
async def test_payment_endpoints(client, make_ambassador):
    ambassador = await make_ambassador(coupon_code="GLOW10")
    for order_id, amount in (("W-1", 100), ("W-2", 50)):
        await client.post("/api/coupon/redeem", json={
            "code": "GLOW10", "orderId": order_id, "orderAmount": amount,
        })
    
    resp = await client.patch(f"/api/ambassadors/{ambassador.id}/payments/W-1", json={"isPaid": True})
    assert resp.status == 200
    body = (await resp.json())["ambassador"]
    assert body["paymentsPending"] == 5.0
    assert body["paymentsPaid"] == 10.0
    
    resp = await client.patch(f"/api/ambassadors/{ambassador.id}/payments/W-1", json={"isPaid": "yes"})
    assert resp.status == 400
    
    resp = await client.patch(f"/api/ambassadors/{ambassador.id}/payments/NOPE", json={"isPaid": True})
    assert resp.status == 404
    
    resp = await client.patch(f"/api/ambassadors/{ambassador.id}/payments", json={"status": "paid"})
    body = (await resp.json())["ambassador"]
    assert body["paymentsPending"] == 0.0
    assert body["paymentsPaid"] == 15.0
    assert all(o["isPaid"] for o in body["recentOrders"])
    
    resp = await client.patch(f"/api/ambassadors/{ambassador.id}/payments", json={"status": "refunded"})
    assert resp.status == 400
    
    resp = await client.get(f"/api/ambassadors/{ambassador.id}/ledger")
    ledger = await resp.json()
    assert ledger["balanced"] is True
    assert ledger["orderCommissionTotal"] == 15.0


@pytest.mark.asyncio
async def test_not_found_and_bad_ids(client):
    assert (await client.get("/api/ambassadors/999")).status == 404
    assert (await client.get("/api/ambassadors/abc")).status == 400
    assert (await client.get("/api/nowhere")).status == 404


@pytest.mark.asyncio
async def test_storage_failure_is_503(tmp_path):
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'dir' / 'test.db'}", echo=False)
    app = build_app(db=db, notifier=AdminNotifier(None, []))
    
    async with TestClient(TestServer(app)) as client:
        resp = await client.get("/api/ambassadors/1")
    
        assert resp.status == 503
        assert (await resp.json())["kind"] == "storage_unavailable"


@pytest.mark.asyncio
async def test_deactivate_pauses_code_validation(client, make_ambassador):
    ambassador = await make_ambassador(coupon_code="GLOW10")
    assert (await (await client.get(f"/api/ambassadors/{ambassador.id}")).json())["ambassador"]["isActive"] is True
    
    resp = await client.patch(f"/api/ambassadors/{ambassador.id}", json={"isActive": False})
    assert resp.status == 200
    body = (await resp.json())["ambassador"]
    assert body["isActive"] is False
    assert body["status"] == "approved"
    
    resp = await client.post("/api/coupon/validate", json={"code": "GLOW10"})
    assert (await resp.json())["valid"] is False
    
    resp = await client.patch(f"/api/ambassadors/{ambassador.id}", json={"isActive": "no"})
    assert resp.status == 400
    
    await client.patch(f"/api/ambassadors/{ambassador.id}", json={"isActive": True})
    resp = await client.post("/api/coupon/validate", json={"code": "GLOW10"})
    assert (await resp.json())["valid"] is True
