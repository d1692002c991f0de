# beautybook/webhooks/payment_handler.py
"""
Payment collaborator webhook.

A succeeded payment confirms its PENDING booking; a failed payment is
recorded on the booking without touching its status. Every well-signed
event is acknowledged with 200 so the sender stops retrying; a signed body
that is not an event object gets 400.
"""
import asyncio
import hashlib
import hmac
import json
import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from beautybook.config.database import get_db
from beautybook.config.settings import get_settings
from beautybook.core.clock import Clock, get_clock
from beautybook.core.exceptions import BookingNotFound, InvalidTransition
from beautybook.models.booking import Booking, BookingStatus
from beautybook.services.booking.booking_service import BookingService
from beautybook.services.booking.state_machine import BookingStateMachine

logger = logging.getLogger(__name__)
router = APIRouter()

SIGNATURE_HEADER = "X-Signature"


def compute_signature(payload: bytes, secret: str) -> str:
    return hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()


def verify_signature(payload: bytes, signature: str, secret: str) -> bool:
    return hmac.compare_digest(compute_signature(payload, secret), signature or "")


def _booking_id_from_event(event: dict) -> Optional[UUID]:
    """metadata.booking_id under data.object, or None if any level is missing or malformed"""
    node = event
    for key in ("data", "object", "metadata"):
        node = node.get(key) if isinstance(node, dict) else None

    if not isinstance(node, dict):
        return None
    try:
        return UUID(str(node["booking_id"]))
    except (KeyError, ValueError):
        return None


def _apply_event(db: Session, event_type: str, booking_id: UUID, now: datetime) -> str:
    """Run the booking change for one event; returns the acknowledged result"""
    try:
        if event_type == "payment_intent.succeeded":
            BookingStateMachine.confirm(db, booking_id, payment_succeeded=True, now=now)
            return "confirmed"

        if event_type == "payment_intent.payment_failed":
            BookingService.record_payment_failure(db, booking_id)
            return "payment_failed"

    except BookingNotFound:
        logger.warning(f"Payment event {event_type} for unknown booking {booking_id}")
        return "ignored"
    except InvalidTransition:
        current = db.query(Booking.status).filter(Booking.id == booking_id).scalar()
        if current == BookingStatus.CONFIRMED:
            # Redelivery of an event we already applied
            return "already_confirmed"
        logger.warning(f"Payment succeeded for booking {booking_id} in status {current}; needs manual refund review")
        return "ignored"

    logger.info(f"Unhandled payment event type {event_type}")
    return "ignored"


@router.post("/payments")
async def handle_payment_event(
        request: Request,
        clock: Clock = Depends(get_clock),
        db: Session = Depends(get_db)
):
    secret = get_settings().PAYMENT_WEBHOOK_SECRET
    if not secret:
        logger.error("PAYMENT_WEBHOOK_SECRET is not configured; rejecting payment webhook")
        raise HTTPException(status_code=503, detail="Webhook not configured")

    payload = await request.body()
    if not verify_signature(payload, request.headers.get(SIGNATURE_HEADER, ""), secret):
        logger.warning("Payment webhook signature verification failed")
        raise HTTPException(status_code=400, detail="Invalid signature")

    try:
        event = json.loads(payload)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid payload")
    if not isinstance(event, dict):
        logger.warning(f"Signed payment webhook body is a {type(event).__name__}, not an event object")
        raise HTTPException(status_code=400, detail="Invalid payload")

    event_type = event.get("type")
    booking_id = _booking_id_from_event(event)
    if booking_id is None:
        logger.info(f"Ignoring payment event {event_type} without booking_id")
        return {"received": True, "result": "ignored"}

    # Blocking ORM work and Celery dispatch stay off the event loop
    result = await asyncio.to_thread(_apply_event, db, event_type, booking_id, clock())
    return {"received": True, "result": result}
