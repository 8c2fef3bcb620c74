"""
Stripe checkout endpoints.
"""

from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy.orm import Session

from ..auth.dependencies import get_current_user
from ..database import get_db
from ..models import User
from ..schemas import CheckoutSessionRequest, CheckoutSessionResponse, WebhookAck
from ..services import payment_service

router = APIRouter(prefix="/api/payments", tags=["payments"])


@router.post("/checkout-session", response_model=CheckoutSessionResponse)
def create_checkout_session(
    payload: CheckoutSessionRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> CheckoutSessionResponse:
    return payment_service.create_checkout_session(db, user, payload)


@router.post("/webhook", response_model=WebhookAck)
async def stripe_webhook(
    request: Request,
    stripe_signature: str | None = Header(None, alias="Stripe-Signature"),
    db: Session = Depends(get_db),
) -> WebhookAck:
    """Stripe calls this without a user token; the signature authenticates it."""
    body = await request.body()
    event_type, event = payment_service.parse_webhook_event(body, stripe_signature)
    payment_service.confirm_payment(db, event_type, event)
    return WebhookAck(received=True)
