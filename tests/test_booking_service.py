from datetime import date, datetime, time, timezone
from decimal import Decimal
import threading
import uuid

import pytest
from sqlalchemy.exc import OperationalError

from beautybook.core.exceptions import (
    BookingStorageError,
    BusinessClosed,
    BusinessNotFound,
    InvalidPromotion,
    InvalidService,
    ServiceNotFound,
    SlotUnavailable,
)
from beautybook.models.booking import Booking, BookingStatus, PaymentStatus, ACTIVE_STATUSES
from beautybook.models.promotion import Promotion, PromotionType
from beautybook.models.staff import Staff, StaffSchedule
from beautybook.services.booking.availability_service import AvailabilityService
from beautybook.services.booking.booking_service import BookingService
from beautybook.services.slots.slot_generator import overlaps

from conftest import MONDAY, SUNDAY, at


def book(db, customer, business, service, slot_time, clock, **kwargs):
    return BookingService.create_booking(
        db=db,
        user_id=customer.id,
        business_id=business.id,
        service_id=service.id,
        booking_date=kwargs.pop("booking_date", MONDAY),
        slot_time=slot_time,
        now=clock(),
        **kwargs,
    )


def test_creates_pending_booking_with_price_snapshot(db, business, service, customer, clock):
    booking = book(db, customer, business, service, "10:00", clock, notes="First visit")

    assert booking.status == BookingStatus.PENDING
    assert booking.payment_status == PaymentStatus.PENDING
    assert booking.start_time == at(MONDAY, 10)
    assert booking.end_time == at(MONDAY, 11, 30)
    assert booking.total_price == Decimal("80.00")
    assert booking.notes == "First visit"

    service.price = Decimal("95.00")
    db.commit()
    db.refresh(booking)
    assert booking.total_price == Decimal("80.00")


def test_same_slot_twice_is_rejected(db, business, service, customer, other_customer, clock):
    book(db, customer, business, service, "10:00", clock)

    with pytest.raises(SlotUnavailable):
        book(db, other_customer, business, service, "10:00", clock)


def test_overlapping_slot_is_rejected(db, business, service, customer, other_customer, clock):
    book(db, customer, business, service, "10:00", clock)

    with pytest.raises(SlotUnavailable):
        book(db, other_customer, business, service, "11:00", clock)

    assert book(db, other_customer, business, service, "11:30", clock).start_time == at(MONDAY, 11, 30)


def test_time_off_the_slot_grid_is_rejected(db, business, service, customer, clock):
    with pytest.raises(SlotUnavailable):
        book(db, customer, business, service, "10:15", clock)


def test_slot_running_past_closing_is_rejected(db, business, service, customer, clock):
    with pytest.raises(SlotUnavailable):
        book(db, customer, business, service, "18:00", clock)


def test_slot_in_the_past_is_rejected(db, business, service, customer, clock):
    clock.set(datetime(2026, 11, 2, 12, 0, tzinfo=timezone.utc))

    with pytest.raises(SlotUnavailable):
        book(db, customer, business, service, "11:30", clock)


def test_closed_day_is_rejected(db, business, service, customer, clock):
    with pytest.raises(BusinessClosed):
        book(db, customer, business, service, "10:00", clock, booking_date=SUNDAY)


def test_unknown_business_and_service(db, business, service, customer, clock):
    with pytest.raises(BusinessNotFound):
        BookingService.create_booking(db, customer.id, uuid.uuid4(), service.id, MONDAY, "10:00", now=clock())

    with pytest.raises(ServiceNotFound):
        BookingService.create_booking(db, customer.id, business.id, uuid.uuid4(), MONDAY, "10:00", now=clock())


def test_inactive_service_is_rejected(db, business, make_service, customer, clock):
    retired = make_service(business, is_active=False)

    with pytest.raises(InvalidService):
        book(db, customer, business, retired, "10:00", clock)


def test_stale_availability_is_rechecked_at_write_time(
        db, business, service, customer, other_customer, make_booking, clock
):
    shown = AvailabilityService.get_availability(db, business.id, MONDAY, service.id, now=clock())
    assert {s["time"]: s["available"] for s in shown["slots"]}["10:00"] is True

    make_booking(business, service, other_customer, at(MONDAY, 10), status=BookingStatus.PENDING)

    with pytest.raises(SlotUnavailable):
        book(db, customer, business, service, "10:00", clock)


def test_cancelled_booking_frees_the_slot(db, business, service, customer, other_customer, make_booking, clock):
    make_booking(business, service, other_customer, at(MONDAY, 10), status=BookingStatus.CANCELLED)

    assert book(db, customer, business, service, "10:00", clock).status == BookingStatus.PENDING


def test_storage_failure_leaves_nothing_behind(db, business, service, customer, clock, monkeypatch):
    def failing_commit():
        raise OperationalError("INSERT INTO bookings", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db, "commit", failing_commit)

    with pytest.raises(BookingStorageError):
        book(db, customer, business, service, "10:00", clock)

    monkeypatch.undo()
    assert db.query(Booking).count() == 0


def test_storage_failure_while_loading_is_reported(db, business, service, customer, clock, monkeypatch):
    def failing_query(*entities, **kwargs):
        raise OperationalError("SELECT businesses", {}, Exception("database is locked"))

    monkeypatch.setattr(db, "query", failing_query)

    with pytest.raises(BookingStorageError):
        book(db, customer, business, service, "10:00", clock)

    monkeypatch.undo()
    assert db.query(Booking).count() == 0


def _stylist(db, business, day=1, start=time(12), end=time(16)):
    stylist = Staff(business_id=business.id, name="Robin", is_active=True)
    db.add(stylist)
    db.flush()
    db.add(StaffSchedule(staff_id=stylist.id, day_of_week=day, start_time=start, end_time=end, is_active=True))
    db.commit()
    return stylist


def test_booking_with_staff_member_is_saved_against_them(db, business, service, customer, clock):
    stylist = _stylist(db, business)

    booking = book(db, customer, business, service, "12:00", clock, staff_id=stylist.id)

    assert booking.staff_id == stylist.id
    assert booking.end_time == at(MONDAY, 13, 30)


def test_booking_outside_staff_shift_is_rejected(db, business, service, customer, clock):
    stylist = _stylist(db, business)

    with pytest.raises(SlotUnavailable):
        book(db, customer, business, service, "10:00", clock, staff_id=stylist.id)

    with pytest.raises(BusinessClosed):
        book(db, customer, business, service, "12:00", clock, staff_id=stylist.id, booking_date=date(2026, 11, 3))

    assert db.query(Booking).count() == 0


def _promotion(db, business, **overrides):
    fields = dict(
        business_id=business.id,
        name="Autumn glow",
        code="AUTUMN20",
        type=PromotionType.PERCENTAGE,
        value=Decimal("20"),
        start_date=date(2026, 10, 1),
        end_date=date(2026, 11, 30),
        usage_count=0,
        is_active=True,
    )
    fields.update(overrides)
    promotion = Promotion(**fields)
    db.add(promotion)
    db.commit()
    db.refresh(promotion)
    return promotion


def test_promotion_discounts_the_snapshot(db, business, service, customer, clock):
    promotion = _promotion(db, business)

    booking = book(db, customer, business, service, "10:00", clock, promotion_id=promotion.id)

    assert booking.discount_amount == Decimal("16.00")
    assert booking.total_price == Decimal("64.00")
    assert booking.promotion_id == promotion.id
    db.refresh(promotion)
    assert promotion.usage_count == 1


def test_invalid_promotion_saves_nothing(db, business, service, customer, clock):
    expired = _promotion(db, business, end_date=date(2026, 10, 20))

    with pytest.raises(InvalidPromotion):
        book(db, customer, business, service, "10:00", clock, promotion_id=expired.id)

    assert db.query(Booking).count() == 0


def _race(session_factory, attempts, business_id, service_id, user_id, now):
    """Fire one create_booking per slot time from separate threads at once"""
    barrier = threading.Barrier(len(attempts))
    outcomes = []
    outcomes_lock = threading.Lock()

    def attempt(slot_time):
        session = session_factory()
        try:
            barrier.wait()
            BookingService.create_booking(session, user_id, business_id, service_id, MONDAY, slot_time, now=now)
            result = "booked"
        except SlotUnavailable:
            result = "unavailable"
        except Exception as e:
            result = repr(e)
        finally:
            session.close()
        with outcomes_lock:
            outcomes.append(result)

    threads = [threading.Thread(target=attempt, args=(slot_time,)) for slot_time in attempts]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)

    return outcomes


def _assert_no_active_overlap(db, business_id):
    active = db.query(Booking).filter(
        Booking.business_id == business_id,
        Booking.status.in_(ACTIVE_STATUSES)
    ).all()
    for i, first in enumerate(active):
        for second in active[i + 1:]:
            assert not overlaps(first.start_time, first.end_time, second.start_time, second.end_time)
    return active


def test_concurrent_requests_for_one_slot_book_it_once(db, session_factory, business, service, customer, clock):
    outcomes = _race(session_factory, ["10:00"] * 6, business.id, service.id, customer.id, clock())

    assert sorted(outcomes) == ["booked"] + ["unavailable"] * 5
    assert len(_assert_no_active_overlap(db, business.id)) == 1


def test_concurrent_overlapping_requests_book_only_one(db, session_factory, business, service, customer, clock):
    outcomes = _race(
        session_factory, ["10:00", "10:30", "11:00"] * 2, business.id, service.id, customer.id, clock()
    )

    assert outcomes.count("booked") == 1
    assert outcomes.count("unavailable") == 5
    assert len(_assert_no_active_overlap(db, business.id)) == 1
