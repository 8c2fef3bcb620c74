"""
Stripe checkout service functions.

A checkout session carries the cart in its metadata. The order itself is
only created when Stripe reports ``checkout.session.completed``.
"""

import json
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

import stripe
from sqlalchemy.orm import Session

from core.constants import PaymentStatus
from core.logging import get_logger, log_timing
from core.models.base import utcnow
from core.repositories import PaymentRepository

from ..config import get_settings
from ..exceptions import PaymentPayloadError, PaymentProviderError
from ..models import Order, User
from ..schemas import CheckoutSessionRequest, CheckoutSessionResponse
from . import order_service

logger = get_logger("service.payment")

CHECKOUT_COMPLETED = "checkout.session.completed"
REQUIRED_METADATA = ("payment_id", "user_id", "order_items")


def to_minor_units(amount: Decimal) -> int:
    """Stripe amounts are integers in the currency's smallest unit."""
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def configure_stripe() -> None:
    stripe.api_key = get_settings().stripe_secret_key
    logger.info("stripe_configured", enabled=bool(stripe.api_key))


@log_timing("checkout_session")
def create_checkout_session(
    db: Session,
    user: User,
    payload: CheckoutSessionRequest,
) -> CheckoutSessionResponse:
    """
    Price the cart, record a pending payment and open a Stripe checkout.

    Raises:
        DomainError: cart or coupon is invalid.
        PaymentProviderError: Stripe rejected the request.
    """
    settings = get_settings()
    lines = [(line.menu_item_id, line.quantity) for line in payload.items]
    quote = order_service.price_cart(db, user.id, lines, payload.user_coupon_id)

    payment = PaymentRepository(db).create(
        user_id=user.id,
        amount=quote.total,
        currency=settings.payment_currency,
        status=PaymentStatus.PENDING,
    )

    metadata = {
        "payment_id": payment.id,
        "user_id": user.id,
        "order_items": json.dumps(
            [{"menu_item_id": item.id, "quantity": quantity} for item, quantity in quote.lines]
        ),
        "order_notes": payload.notes or "",
        "user_coupon_id": payload.user_coupon_id or "",
    }
    params: dict[str, Any] = {
        "mode": "payment",
        "payment_method_types": ["card"],
        "line_items": [
            {
                "price_data": {
                    "currency": settings.payment_currency,
                    "unit_amount": to_minor_units(item.price),
                    "product_data": {"name": item.name},
                },
                "quantity": quantity,
            }
            for item, quantity in quote.lines
        ],
        "success_url": settings.stripe_success_url,
        "cancel_url": settings.stripe_cancel_url,
        "client_reference_id": payment.id,
        "metadata": metadata,
    }

    try:
        if quote.discount > 0:
            stripe_coupon = stripe.Coupon.create(
                amount_off=to_minor_units(quote.discount),
                currency=settings.payment_currency,
                duration="once",
                name=quote.user_coupon.coupon.name if quote.user_coupon else "Discount",
            )
            params["discounts"] = [{"coupon": stripe_coupon.id}]
        session = stripe.checkout.Session.create(**params)
    except stripe.StripeError as exc:
        logger.error("stripe_session_failed", payment_id=payment.id, error=str(exc))
        raise PaymentProviderError() from exc

    payment.stripe_session_id = session.id
    db.flush()
    logger.info(
        "checkout_session_created",
        payment_id=payment.id,
        session_id=session.id,
        amount=str(payment.amount),
    )
    return CheckoutSessionResponse(session_id=session.id, checkout_url=session.url)


def parse_webhook_event(payload: bytes, signature: str | None) -> tuple[str, dict]:
    """
    Verify (when a signing secret is configured) and decode a webhook body.

    Returns:
        Tuple of (event type, decoded payload)
    """
    secret = get_settings().stripe_webhook_secret
    if secret:
        try:
            stripe.Webhook.construct_event(payload, signature or "", secret)
        except (ValueError, stripe.SignatureVerificationError) as exc:
            logger.warning("webhook_signature_invalid", error=str(exc))
            raise PaymentPayloadError("Invalid webhook signature.") from None

    try:
        event = json.loads(payload)
    except ValueError:
        raise PaymentPayloadError("Invalid webhook payload.") from None
    if not isinstance(event, dict):
        raise PaymentPayloadError("Invalid webhook payload.")
    return str(event.get("type", "")), event


def _extract_metadata(payload: dict) -> dict:
    """Metadata sits at the root of a bare session or under data.object of an event."""
    metadata = payload.get("metadata")
    if metadata is None:
        data = payload.get("data")
        obj = data.get("object") if isinstance(data, dict) else None
        metadata = obj.get("metadata") if isinstance(obj, dict) else None
    if not isinstance(metadata, dict):
        raise PaymentPayloadError("Missing metadata in payload or in data.object.")

    for key in REQUIRED_METADATA:
        value = metadata.get(key)
        if value is None or (isinstance(value, str) and not value.strip()) or value == []:
            raise PaymentPayloadError(f"Required metadata value '{key}' is missing or empty.")
    return metadata


def _parse_order_items(raw: Any) -> list[tuple[str, int]]:
    try:
        items = json.loads(raw) if isinstance(raw, str) else raw
        return [(str(entry["menu_item_id"]), int(entry["quantity"])) for entry in items]
    except (ValueError, TypeError, KeyError) as exc:
        raise PaymentPayloadError("Metadata 'order_items' is malformed.") from exc


def confirm_payment(db: Session, event_type: str, payload: dict) -> Order | None:
    """
    Turn a completed checkout into an order.

    Repeated deliveries of the same event are no-ops once the payment has
    succeeded. The order belongs to the payment's user and its total is
    the amount Stripe captured; items that left the menu since checkout are
    skipped.

    Returns:
        The created order, or None when nothing was done.
    """
    if event_type != CHECKOUT_COMPLETED:
        logger.debug("webhook_event_ignored", event_type=event_type)
        return None

    metadata = _extract_metadata(payload)
    lines = _parse_order_items(metadata["order_items"])

    payments = PaymentRepository(db)
    payment = payments.get_by_id(str(metadata["payment_id"]))
    if payment is None:
        logger.warning("webhook_payment_unknown", payment_id=metadata["payment_id"])
        return None
    if payment.status == PaymentStatus.SUCCEEDED:
        logger.info("webhook_payment_already_confirmed", payment_id=payment.id)
        return None

    user_id = payment.user_id
    claimed_user_id = str(metadata["user_id"])
    if claimed_user_id != user_id:
        # The stored payment decides who owns the order
        logger.warning(
            "webhook_user_mismatch",
            payment_id=payment.id,
            payment_user_id=user_id,
            metadata_user_id=claimed_user_id,
        )

    quote = order_service.price_cart(
        db,
        user_id,
        lines,
        user_coupon_id=metadata.get("user_coupon_id") or None,
        lenient=True,
    )
    if quote.skipped_ids:
        logger.warning("webhook_items_skipped", payment_id=payment.id, menu_item_ids=quote.skipped_ids)
    if not quote.lines:
        logger.error("webhook_order_without_items", payment_id=payment.id, amount=str(payment.amount))
    if quote.total != payment.amount:
        logger.warning(
            "payment_amount_mismatch",
            payment_id=payment.id,
            priced_total=str(quote.total),
            charged=str(payment.amount),
        )

    order = order_service.create_order(
        db,
        user_id,
        quote,
        notes=metadata.get("order_notes") or None,
        charged_total=payment.amount,
    )

    payment.order_id = order.id
    payment.status = PaymentStatus.SUCCEEDED
    payment.completed_at = utcnow()
    db.flush()
    logger.info("payment_confirmed", payment_id=payment.id, order_id=order.id)
    return order
