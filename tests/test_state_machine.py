from datetime import datetime, timedelta, timezone
import uuid

import pytest
from sqlalchemy.exc import OperationalError

from beautybook.core.exceptions import (
    BookingNotFound,
    BookingStorageError,
    CancellationWindowClosed,
    InvalidTransition,
    TooEarly,
)
from beautybook.models.booking import BookingStatus, PaymentStatus
from beautybook.services.booking.booking_service import BookingService
from beautybook.services.booking.state_machine import ALLOWED_TRANSITIONS, BookingStateMachine, can_transition

from conftest import MONDAY, at


def test_transition_table():
    assert can_transition(BookingStatus.PENDING, BookingStatus.CONFIRMED)
    assert can_transition(BookingStatus.PENDING, BookingStatus.CANCELLED)
    assert can_transition(BookingStatus.CONFIRMED, BookingStatus.COMPLETED)
    assert can_transition(BookingStatus.CONFIRMED, BookingStatus.CANCELLED)
    assert not can_transition(BookingStatus.PENDING, BookingStatus.COMPLETED)
    assert ALLOWED_TRANSITIONS[BookingStatus.COMPLETED] == frozenset()
    assert ALLOWED_TRANSITIONS[BookingStatus.CANCELLED] == frozenset()


def test_confirm_pending_booking(db, business, service, customer, make_booking, clock, sent_emails):
    booking = make_booking(business, service, customer, at(MONDAY, 10), status=BookingStatus.PENDING)

    confirmed = BookingStateMachine.confirm(db, booking.id, business_id=business.id, now=clock())

    assert confirmed.status == BookingStatus.CONFIRMED
    assert confirmed.confirmed_at is not None
    assert confirmed.payment_status == PaymentStatus.PENDING
    assert sent_emails[-1]["status"] == "CONFIRMED"
    assert sent_emails[-1]["email"] == customer.email
    assert sent_emails[-1]["booking_id"] == str(booking.id)


def test_payment_confirmation_marks_payment_succeeded(db, business, service, customer, make_booking, clock):
    booking = make_booking(business, service, customer, at(MONDAY, 10), status=BookingStatus.PENDING)

    confirmed = BookingStateMachine.confirm(db, booking.id, payment_succeeded=True, now=clock())

    assert confirmed.payment_status == PaymentStatus.SUCCEEDED


def test_confirm_twice_is_invalid(db, business, service, customer, make_booking, clock):
    booking = make_booking(business, service, customer, at(MONDAY, 10), status=BookingStatus.CONFIRMED)

    with pytest.raises(InvalidTransition):
        BookingStateMachine.confirm(db, booking.id, now=clock())


@pytest.mark.parametrize("terminal", [BookingStatus.COMPLETED, BookingStatus.CANCELLED])
def test_terminal_states_reject_every_transition(
        db, business, service, customer, make_booking, clock, sent_emails, terminal
):
    booking = make_booking(business, service, customer, at(MONDAY, 10), status=terminal)
    clock.set(datetime(2026, 11, 3, 9, 0, tzinfo=timezone.utc))

    with pytest.raises(InvalidTransition):
        BookingStateMachine.confirm(db, booking.id, now=clock())
    with pytest.raises(InvalidTransition):
        BookingStateMachine.complete(db, booking.id, now=clock())
    with pytest.raises(InvalidTransition):
        BookingStateMachine.cancel(db, booking.id, business_id=business.id, now=clock())

    db.refresh(booking)
    assert booking.status == terminal
    assert sent_emails == []


def test_complete_waits_for_the_appointment_to_end(db, business, service, customer, make_booking, clock):
    booking = make_booking(business, service, customer, at(MONDAY, 10), status=BookingStatus.CONFIRMED)
    clock.set(datetime(2026, 11, 2, 11, 0, tzinfo=timezone.utc))

    with pytest.raises(TooEarly):
        BookingStateMachine.complete(db, booking.id, business_id=business.id, now=clock())
    db.refresh(booking)
    assert booking.status == BookingStatus.CONFIRMED

    clock.advance(minutes=30)
    completed = BookingStateMachine.complete(db, booking.id, business_id=business.id, now=clock())

    assert completed.status == BookingStatus.COMPLETED
    assert completed.completed_at is not None


def test_complete_uses_business_local_time(db, make_business, make_service, owner, customer, make_booking, clock):
    salon = make_business(owner, timezone_name="America/New_York")
    cut = make_service(salon, duration_minutes=60)
    booking = make_booking(salon, cut, customer, at(MONDAY, 10), status=BookingStatus.CONFIRMED)
    # 11:30 UTC is still 06:30 in New York
    clock.set(datetime(2026, 11, 2, 11, 30, tzinfo=timezone.utc))

    with pytest.raises(TooEarly):
        BookingStateMachine.complete(db, booking.id, now=clock())

    clock.set(datetime(2026, 11, 2, 16, 0, tzinfo=timezone.utc))
    assert BookingStateMachine.complete(db, booking.id, now=clock()).status == BookingStatus.COMPLETED


def test_pending_booking_cannot_be_completed(db, business, service, customer, make_booking, clock):
    booking = make_booking(business, service, customer, at(MONDAY, 10), status=BookingStatus.PENDING)
    clock.set(datetime(2026, 11, 3, 9, 0, tzinfo=timezone.utc))

    with pytest.raises(InvalidTransition):
        BookingStateMachine.complete(db, booking.id, now=clock())


def test_customer_cancel_with_enough_notice(db, business, service, customer, make_booking, clock, sent_emails):
    booking = make_booking(business, service, customer, at(MONDAY, 10), status=BookingStatus.CONFIRMED)

    cancelled = BookingStateMachine.cancel(db, booking.id, reason="Feeling unwell", customer_id=customer.id, now=clock())

    assert cancelled.status == BookingStatus.CANCELLED
    assert cancelled.cancellation_reason == "Feeling unwell"
    assert cancelled.notes.endswith("Cancellation reason: Feeling unwell")
    assert sent_emails[-1]["status"] == "CANCELLED"


def test_customer_cancel_inside_notice_window(db, business, service, customer, make_booking, clock):
    booking = make_booking(business, service, customer, at(MONDAY, 10), status=BookingStatus.CONFIRMED)
    clock.set(datetime(2026, 11, 1, 12, 0, tzinfo=timezone.utc))

    with pytest.raises(CancellationWindowClosed):
        BookingStateMachine.cancel(db, booking.id, customer_id=customer.id, now=clock())

    db.refresh(booking)
    assert booking.status == BookingStatus.CONFIRMED


def test_owner_can_cancel_at_any_time(db, business, service, customer, make_booking, clock):
    booking = make_booking(business, service, customer, at(MONDAY, 10), status=BookingStatus.PENDING)
    clock.set(datetime(2026, 11, 2, 9, 45, tzinfo=timezone.utc))

    cancelled = BookingStateMachine.cancel(db, booking.id, business_id=business.id, now=clock())

    assert cancelled.status == BookingStatus.CANCELLED
    assert cancelled.cancellation_reason is None


def test_bookings_are_scoped_to_their_customer_and_business(
        db, business, make_business, service, owner, customer, other_customer, make_booking, clock
):
    booking = make_booking(business, service, customer, at(MONDAY, 10), status=BookingStatus.PENDING)
    rival = make_business(owner)

    with pytest.raises(BookingNotFound):
        BookingStateMachine.cancel(db, booking.id, customer_id=other_customer.id, now=clock())
    with pytest.raises(BookingNotFound):
        BookingStateMachine.confirm(db, booking.id, business_id=rival.id, now=clock())
    with pytest.raises(BookingNotFound):
        BookingStateMachine.confirm(db, uuid.uuid4(), now=clock())


def test_cancelled_slot_can_be_booked_again(db, business, service, customer, other_customer, clock):
    first = BookingService.create_booking(db, customer.id, business.id, service.id, MONDAY, "10:00", now=clock())
    BookingStateMachine.cancel(db, first.id, customer_id=customer.id, now=clock())

    second = BookingService.create_booking(
        db, other_customer.id, business.id, service.id, MONDAY, "10:00", now=clock() + timedelta(minutes=5)
    )

    assert second.status == BookingStatus.PENDING
    assert second.start_time == first.start_time


def test_storage_failure_while_loading_is_reported(db, business, service, customer, make_booking, clock, monkeypatch):
    booking = make_booking(business, service, customer, at(MONDAY, 10), status=BookingStatus.PENDING)
    booking_id, business_id = booking.id, business.id

    def failing_query(*entities, **kwargs):
        raise OperationalError("SELECT bookings FOR UPDATE", {}, Exception("database is locked"))

    monkeypatch.setattr(db, "query", failing_query)

    with pytest.raises(BookingStorageError):
        BookingStateMachine.confirm(db, booking_id, business_id=business_id, now=clock())

    monkeypatch.undo()
    assert BookingService.get_booking(db, booking_id).status == BookingStatus.PENDING
