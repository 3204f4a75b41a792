"""
Razorpay adapters.

Both adapters create orders through the Razorpay Orders API. They differ in
how a completed checkout is confirmed:

* ``RazorpaySignatureGateway`` recomputes the checkout signature,
  HMAC-SHA256(key_secret, "order_id|payment_id"), and compares it with the
  one the client received from Razorpay.
* ``RazorpayOrderStatusGateway`` fetches the order from Razorpay and trusts
  its ``status == "paid"``.

Every network failure is raised as GatewayError so callers fail closed.
"""
import abc
import hashlib
import hmac

import requests

from ..exceptions import GatewayError


def compute_checkout_signature(order_id: str, payment_id: str, secret: str) -> str:
    body = f"{order_id}|{payment_id}"
    return hmac.new(secret.encode('utf-8'), body.encode('utf-8'), hashlib.sha256).hexdigest()


def verify_webhook_signature(payload_body, signature, secret) -> bool:
    """Verify the X-Razorpay-Signature header of a webhook delivery."""
    if not signature or not secret:
        return False
    if isinstance(payload_body, str):
        payload_body = payload_body.encode('utf-8')

    expected_signature = hmac.new(
        secret.encode('utf-8'),
        payload_body,
        hashlib.sha256
    ).hexdigest()
    return hmac.compare_digest(expected_signature, signature)


class RazorpayGateway(abc.ABC):
    name = "razorpay"
    denial_reason = "NotPaid"

    def __init__(self, key_id, key_secret, api_base="https://api.razorpay.com/v1",
                 currency="INR", timeout=10.0, session=None):
        self.key_id = key_id
        self.key_secret = key_secret
        self.api_base = api_base.rstrip("/")
        self.currency = currency
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method, path, **kwargs) -> dict:
        if not self.key_id or not self.key_secret:
            raise GatewayError("Payment gateway is not configured")

        url = f"{self.api_base}{path}"
        try:
            response = self.session.request(
                method, url,
                auth=(self.key_id, self.key_secret),
                timeout=self.timeout,
                **kwargs
            )
        except requests.Timeout:
            raise GatewayError("Payment gateway timed out")
        except requests.RequestException as e:
            raise GatewayError(f"Payment gateway unreachable: {e}")

        if response.status_code >= 400:
            raise GatewayError(f"Payment gateway returned {response.status_code}: {response.text[:200]}")

        try:
            return response.json()
        except ValueError:
            raise GatewayError("Payment gateway returned an invalid response")

    def create_order(self, amount, receipt: str) -> dict:
        """Create an order for ``amount`` in major currency units; Razorpay expects paise."""
        payload = {
            "amount": int(round(amount * 100)),
            "currency": self.currency,
            "receipt": receipt,
        }
        order = self._request("POST", "/orders", json=payload)
        if not order.get("id"):
            raise GatewayError("Payment gateway returned an order without id")
        return order

    @abc.abstractmethod
    def is_paid(self, order_id: str, proof: dict) -> bool:
        """True when the gateway confirms ``order_id`` as paid."""


class RazorpaySignatureGateway(RazorpayGateway):
    name = "razorpay_signature"
    denial_reason = "SignatureMismatch"

    def is_paid(self, order_id: str, proof: dict) -> bool:
        payment_id = proof.get("paymentId")
        signature = proof.get("signature")
        if not payment_id or not signature or not self.key_secret:
            return False
        expected = compute_checkout_signature(order_id, payment_id, self.key_secret)
        return hmac.compare_digest(expected, str(signature))


class RazorpayOrderStatusGateway(RazorpayGateway):
    name = "razorpay_order"

    def is_paid(self, order_id: str, proof: dict) -> bool:
        order = self._request("GET", f"/orders/{order_id}")
        return order.get("status") == "paid"


GATEWAYS = {
    RazorpaySignatureGateway.name: RazorpaySignatureGateway,
    RazorpayOrderStatusGateway.name: RazorpayOrderStatusGateway,
}


def build_gateway(config) -> RazorpayGateway:
    name = config.get("PAYMENT_GATEWAY", RazorpaySignatureGateway.name)
    try:
        gateway_class = GATEWAYS[name]
    except KeyError:
        raise RuntimeError(f"Unknown PAYMENT_GATEWAY '{name}'; expected one of {sorted(GATEWAYS)}")

    return gateway_class(
        key_id=config.get("RAZORPAY_KEY_ID"),
        key_secret=config.get("RAZORPAY_KEY_SECRET"),
        api_base=config.get("RAZORPAY_API_BASE", "https://api.razorpay.com/v1"),
        currency=config.get("PAYMENT_CURRENCY", "INR"),
        timeout=config.get("PAYMENT_GATEWAY_TIMEOUT", 10.0),
    )
