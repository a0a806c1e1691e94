import hashlib
import hmac
import json
import time
from unittest.mock import patch

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from flyergen.billing import BillingService, StripeGateway, WebhookSignatureError

pytestmark = pytest.mark.asyncio

URL = "/api/v1/webhooks/stripe"


def _subscription(price_id: str = "price_business_m"):
    return {
        "id": "sub_42",
        "customer": "cus_42",
        "current_period_end": 1893456000,
        "items": {"data": [{"price": {"id": price_id}}]},
    }


async def test_rejects_bad_signature(client: AsyncClient, override_billing_service):
    override_billing_service.gateway.construct_event.side_effect = WebhookSignatureError("No signatures found")
    response = await client.post(URL, content=b"{}", headers={"Stripe-Signature": "t=1,v1=bad"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Webhook Error: No signatures found"


async def test_checkout_completed_grants_plan_credits(
    client: AsyncClient, override_billing_service, make_user, session: AsyncSession
):
    user = await make_user(credits=0)
    gateway = override_billing_service.gateway
    gateway.construct_event.return_value = {
        "type": "checkout.session.completed",
        "data": {"object": {"subscription": "sub_42", "metadata": {"userId": user.id}}},
    }
    gateway.retrieve_subscription.return_value = _subscription()

    response = await client.post(URL, content=b"{}", headers={"Stripe-Signature": "t=1,v1=ok"})
    assert response.status_code == 200
    assert response.json() == {"received": True}

    gateway.construct_event.assert_called_once_with(b"{}", "t=1,v1=ok")
    await session.refresh(user)
    assert user.credits == 500
    assert user.stripe_subscription_id == "sub_42"
    assert user.stripe_customer_id == "cus_42"
    assert user.stripe_price_id == "price_business_m"
    assert user.stripe_current_period_end is not None


async def test_initial_invoice_is_ignored(client: AsyncClient, override_billing_service):
    gateway = override_billing_service.gateway
    gateway.construct_event.return_value = {
        "type": "invoice.payment_succeeded",
        "data": {"object": {"subscription": "sub_42", "billing_reason": "subscription_create"}},
    }
    response = await client.post(URL, content=b"{}", headers={"Stripe-Signature": "t=1,v1=ok"})
    assert response.json() == {"received": True}
    gateway.retrieve_subscription.assert_not_awaited()


WEBHOOK_SECRET = "whsec_test"


def _signed(payload: bytes, secret: str = WEBHOOK_SECRET) -> str:
    timestamp = int(time.time())
    signed_payload = f"{timestamp}.{payload.decode()}".encode()
    signature = hmac.new(secret.encode(), signed_payload, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


class TestSignedStripeEvents:
    """Events go through the real Stripe signature check; only the subscription lookup is patched."""

    @pytest.fixture
    def real_billing(self, client: AsyncClient, billing_service):
        from flyergen.server.main import app
        from flyergen.server.services.deps import get_billing_service

        service = BillingService(
            StripeGateway(api_key="sk_test", webhook_secret=WEBHOOK_SECRET),
            billing_service.plans,
            billing_url=billing_service.billing_url,
        )
        app.dependency_overrides[get_billing_service] = lambda: service
        return service

    async def test_checkout_completed(self, client: AsyncClient, real_billing, make_user, session: AsyncSession):
        user = await make_user(credits=0)
        payload = json.dumps(
            {
                "id": "evt_1",
                "object": "event",
                "type": "checkout.session.completed",
                "data": {
                    "object": {"object": "checkout.session", "subscription": "sub_42", "metadata": {"userId": user.id}}
                },
            }
        ).encode()

        with patch("stripe.Subscription.retrieve", return_value=_subscription("price_pro_m")) as retrieve:
            response = await client.post(URL, content=payload, headers={"Stripe-Signature": _signed(payload)})

        assert response.status_code == 200
        assert response.json() == {"received": True}
        retrieve.assert_called_once_with("sub_42", api_key="sk_test")
        await session.refresh(user)
        assert user.stripe_subscription_id == "sub_42"
        assert user.stripe_customer_id == "cus_42"
        assert user.stripe_price_id == "price_pro_m"
        assert user.credits == 150

    async def test_tampered_payload_is_rejected(
        self, client: AsyncClient, real_billing, make_user, session: AsyncSession
    ):
        user = await make_user(credits=0)
        signed = json.dumps({"id": "evt_1", "object": "event", "type": "ping", "data": {"object": {}}}).encode()
        sent = signed.replace(b"ping", b"pong")

        with patch("stripe.Subscription.retrieve") as retrieve:
            response = await client.post(URL, content=sent, headers={"Stripe-Signature": _signed(signed)})

        assert response.status_code == 400
        assert response.json()["detail"].startswith("Webhook Error: ")
        retrieve.assert_not_called()
        await session.refresh(user)
        assert user.credits == 0

    async def test_wrong_secret_is_rejected(self, client: AsyncClient, real_billing):
        payload = b'{"id": "evt_1", "object": "event", "type": "ping", "data": {"object": {}}}'
        headers = {"Stripe-Signature": _signed(payload, "whsec_other")}
        response = await client.post(URL, content=payload, headers=headers)
        assert response.status_code == 400
