"""
Webhook Endpoints.

Stripe posts subscription events here. The payload is verified against the
``Stripe-Signature`` header before anything is applied.
"""

from typing import Dict, Optional

from fastapi import APIRouter, Header, HTTPException, Request, status

from flyergen.billing import WebhookSignatureError
from flyergen.core.database.repositories import UserRepository
from flyergen.core.logging_config import get_logger
from flyergen.server.services.deps import BillingServiceDep, SessionDep

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "/stripe",
    summary="Stripe Webhook",
    description="Apply a signed Stripe event (completed checkouts and renewals).",
    responses={400: {"description": "Invalid payload or signature"}},
)
async def stripe_webhook(
    request: Request,
    session: SessionDep,
    billing: BillingServiceDep,
    stripe_signature: Optional[str] = Header(default=None, alias="Stripe-Signature"),
) -> Dict[str, bool]:
    payload = await request.body()
    try:
        event = billing.gateway.construct_event(payload, stripe_signature)
    except WebhookSignatureError as e:
        logger.warning(f"Rejected Stripe webhook: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Webhook Error: {e}") from e

    logger.info(f"Stripe event received: {event['type']}")
    await billing.handle_webhook_event(event, UserRepository(session))
    return {"received": True}
