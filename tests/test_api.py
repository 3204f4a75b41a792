import hashlib
import hmac
import json

from zykli.models.payment import Payment, PaymentStatus


def test_health(client):
    assert client.get("/health").get_json() == {"status": "ok"}


def test_register_validates_and_rejects_duplicates(client):
    resp = client.post("/api/register", json={"username": "bob", "email": "bob@example.com"})
    assert resp.status_code == 400

    body = {"username": "bob", "email": "bob@example.com", "password": "s3cret-pass"}
    assert client.post("/api/register", json=body).status_code == 201

    resp = client.post("/api/register", json=body)
    assert resp.status_code == 409
    assert resp.get_json()["message"] == "Username already exists"

    resp = client.post("/api/register", json={**body, "username": "bobby"})
    assert resp.status_code == 409
    assert resp.get_json()["data"]["reason"] == "EmailTaken"


def test_login_with_wrong_password(client, auth_headers):
    auth_headers()
    resp = client.post("/api/login", json={"email": "alice@example.com", "password": "nope-nope"})
    assert resp.status_code == 401


def test_protected_routes_need_a_token(client):
    assert client.post("/api/shorten-url", json={"url": "https://example.com"}).status_code == 401
    resp = client.get("/api/urls", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Invalid token"


def test_shorten_redirect_round_trip(client, auth_headers):
    headers = auth_headers()
    resp = client.post("/api/shorten-url", json={"url": "https://example.com/docs?q=1"}, headers=headers)
    assert resp.status_code == 201
    code = resp.get_json()["data"]["shortCode"]

    resp = client.get(f"/api/redirect/{code}")
    assert resp.get_json()["data"] == {"originalUrl": "https://example.com/docs?q=1"}

    resp = client.get(f"/{code}")
    assert resp.status_code == 302
    assert resp.headers["Location"] == "https://example.com/docs?q=1"

    assert client.get("/api/redirect/unknown1").status_code == 404

    urls = client.get("/api/urls", headers=headers).get_json()["data"]
    assert [u["shortCode"] for u in urls] == [code]


def test_sixth_link_of_the_day_is_forbidden(client, auth_headers):
    headers = auth_headers()
    for i in range(5):
        resp = client.post("/api/shorten-url", json={"url": f"https://example.com/{i}"}, headers=headers)
        assert resp.status_code == 201

    resp = client.post("/api/shorten-url", json={"url": "https://example.com/6"}, headers=headers)
    assert resp.status_code == 403
    assert resp.get_json()["data"]["reason"] == "DailyLimitReached"

    membership = client.get("/api/membership-plan", headers=headers).get_json()["data"]
    assert membership["planName"] == "Free"
    assert membership["urlsRemainingToday"] == 0
    assert membership["urlsRemainingMonth"] == 45
    assert membership["daysRemaining"] == 29


def test_plans_are_listed_in_id_order(client):
    plans = client.get("/api/plans").get_json()["data"]
    assert [p["planId"] for p in plans] == [1, 2, 3]
    assert plans[0] == {"planId": 1, "name": "Free", "price": 0.0, "urlLimit": 50, "dailyUrlLimit": 5}


def test_direct_upgrade(client, auth_headers, app):
    headers = auth_headers()
    resp = client.post("/api/upgrade-plan", json={"planId": 3, "days": 7}, headers=headers)
    assert resp.status_code == 200
    assert resp.get_json()["message"] == "Plan upgraded to Pro"

    membership = client.get("/api/membership-plan", headers=headers).get_json()["data"]
    assert membership["planName"] == "Pro"
    assert membership["daysRemaining"] == 6

    assert client.post("/api/upgrade-plan", json={"planId": 77, "days": 7}, headers=headers).status_code == 404

    app.config["ALLOW_DIRECT_UPGRADE"] = False
    assert client.post("/api/upgrade-plan", json={"planId": 3, "days": 7}, headers=headers).status_code == 403


def test_order_verify_flow(client, auth_headers, gateway):
    headers = auth_headers()
    resp = client.post("/api/create-order", json={"amount": 499}, headers=headers)
    assert resp.status_code == 200
    order = resp.get_json()["data"]
    assert order["amount"] == 49900

    body = {"orderId": order["id"], "paymentId": "pay_1", "signature": "sig", "planId": 3, "days": 30}
    resp = client.post("/api/verify-payment", json=body, headers=headers)
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Payment verification failed"

    gateway.paid_orders.add(order["id"])
    resp = client.post("/api/verify-payment", json=body, headers=headers)
    assert resp.status_code == 200
    assert resp.get_json()["data"]["payment"]["status"] == PaymentStatus.SUCCESS

    resp = client.post("/api/verify-payment", json=body, headers=headers)
    assert resp.status_code == 409
    assert resp.get_json()["data"]["reason"] == "AlreadyVerified"


def test_gateway_outage_maps_to_502(client, auth_headers, gateway):
    headers = auth_headers()
    gateway.down = True
    resp = client.post("/api/create-order", json={"amount": 499}, headers=headers)
    assert resp.status_code == 502
    assert resp.get_json()["data"]["reason"] == "GatewayError"


def test_webhook_requires_valid_signature_when_configured(client, auth_headers, app):
    headers = auth_headers()
    order = client.post("/api/create-order", json={"amount": 199}, headers=headers).get_json()["data"]
    app.config["RAZORPAY_WEBHOOK_SECRET"] = "whsec"
    body = json.dumps({"orderId": order["id"], "status": "paid"})

    resp = client.post("/api/payment-webhook", data=body, content_type="application/json",
                       headers={"X-Razorpay-Signature": "bogus"})
    assert resp.status_code == 401

    signature = hmac.new(b"whsec", body.encode(), hashlib.sha256).hexdigest()
    resp = client.post("/api/payment-webhook", data=body, content_type="application/json",
                       headers={"X-Razorpay-Signature": signature})
    assert resp.status_code == 200
    assert Payment.query.filter_by(order_id=order["id"]).one().payment_status == PaymentStatus.PAID


def test_webhook_rejects_malformed_json(client):
    resp = client.post("/api/payment-webhook", data="{not json", content_type="application/json")
    assert resp.status_code == 400


def test_webhook_with_odd_shapes_never_errors(client):
    body = {"event": "order.paid", "payload": {"payment": None}}
    resp = client.post("/api/payment-webhook", json=body)
    assert resp.status_code == 200
    assert resp.get_json()["success"] is False

    resp = client.post("/api/payment-webhook", json={"orderId": {"x": 1}, "status": "paid"})
    assert resp.status_code == 400
    assert resp.get_json()["data"]["reason"] == "ValidationError"


def test_api_key_can_authenticate_and_be_exchanged(client, auth_headers):
    headers = auth_headers()
    api_key = client.post("/api/generate-api-key", headers=headers).get_json()["data"]["apiKey"]
    assert len(api_key) == 64

    resp = client.get("/api/me", headers={"X-API-Key": api_key})
    assert resp.get_json()["data"]["username"] == "alice"

    token = client.post("/api/token", json={"apiKey": api_key}).get_json()["data"]["token"]
    resp = client.get("/api/urls", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200

    assert client.post("/api/token", json={"apiKey": "wrong"}).status_code == 401
