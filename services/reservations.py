"""
Booking guard and reservation status transitions.

create_reservation serializes writers on a (court, date) pair by taking a row
lock in court_day_locks before it reads the day's reservations. The overlap
read is itself a locking read, so a writer that waited on the lock sees the
row the previous holder committed.
"""
from datetime import date
from decimal import Decimal

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from models import db
from models.court import Court
from models.court_day_lock import CourtDayLock
from models.reservation import Reservation, RESERVATION_STATUSES
from security.rbac import can_manage_court, owns_store
from services.availability import blocking_reservations
from utils.errors import (
    CourtInactive,
    Forbidden,
    InvalidInterval,
    InvalidStatus,
    InvalidTransition,
    NotFound,
    SlotConflict,
)
from utils.schedule import overlaps, parse_date, price, to_minutes

ALLOWED_TRANSITIONS = {
    "pending": {"confirmed", "cancelled"},
    "confirmed": {"completed", "cancelled"},
    "cancelled": set(),
    "completed": set(),
}

# the creator of a reservation may only cancel it; everything else is the owner's
CREATOR_STATUSES = {"cancelled"}


def _lock_court_day(court_id, day: date):
    lock_filter = (CourtDayLock.court_id == court_id, CourtDayLock.day == day)
    if CourtDayLock.query.filter(*lock_filter).first() is None:
        try:
            with db.session.begin_nested():
                db.session.add(CourtDayLock(court_id=court_id, day=day, version=0))
        except IntegrityError:
            # another writer created it first; the UPDATE below waits on it
            pass
    db.session.execute(
        update(CourtDayLock)
        .where(*lock_filter)
        .values(version=CourtDayLock.version + 1)
    )


def find_conflict(court_id, day: date, start_minute: int, end_minute: int):
    for existing in blocking_reservations(court_id, day, for_update=True):
        if overlaps(start_minute, end_minute, existing.start_minute, existing.end_minute):
            return existing
    return None


def create_reservation(court_id, user_id, day, start_time, end_time) -> Reservation:
    court = db.session.get(Court, court_id)
    if court is None:
        raise NotFound("Court not found")
    if not court.is_active:
        raise CourtInactive("This court is not available")

    start_minute = to_minutes(start_time)
    end_minute = to_minutes(end_time)
    if end_minute <= start_minute:
        raise InvalidInterval("End time must be after start time")
    if not isinstance(day, date):
        day = parse_date(day)

    try:
        _lock_court_day(court.id, day)

        conflict = find_conflict(court.id, day, start_minute, end_minute)
        if conflict is not None:
            raise SlotConflict(
                "This time is already booked",
                details={"conflictingTime": f"{conflict.start_time} - {conflict.end_time}"},
            )

        reservation = Reservation(
            court_id=court.id,
            user_id=user_id,
            date=day,
            start_minute=start_minute,
            end_minute=end_minute,
            status="pending",
            total_price=price(start_minute, end_minute, court.price_per_hour),
        )
        db.session.add(reservation)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return reservation


def _get_reservation(reservation_id) -> Reservation:
    reservation = db.session.get(Reservation, reservation_id)
    if reservation is None:
        raise NotFound("Reservation not found")
    return reservation


def set_reservation_status(reservation_id, new_status, caller) -> Reservation:
    reservation = _get_reservation(reservation_id)
    if new_status not in RESERVATION_STATUSES:
        raise InvalidStatus(f"Invalid status. Use one of: {', '.join(RESERVATION_STATUSES)}")

    is_owner = can_manage_court(caller, reservation.court)
    is_creator = caller is not None and reservation.user_id == caller.id

    if not is_owner and not is_creator:
        raise Forbidden("You are not allowed to modify this reservation")
    if not is_owner and new_status not in CREATOR_STATUSES:
        raise Forbidden(f"Only the store owner can set a reservation to {new_status}")

    if new_status not in ALLOWED_TRANSITIONS[reservation.status]:
        raise InvalidTransition(
            f"Cannot change reservation from {reservation.status} to {new_status}",
            details={"currentStatus": reservation.status},
        )

    reservation.status = new_status
    db.session.commit()
    return reservation


def get_reservation_for(reservation_id, caller) -> Reservation:
    reservation = _get_reservation(reservation_id)
    if not can_manage_court(caller, reservation.court) and reservation.user_id != caller.id:
        raise Forbidden("You are not allowed to view this reservation")
    return reservation


def reservations_for_user(user_id) -> list:
    return (
        Reservation.query
        .filter_by(user_id=user_id)
        .order_by(Reservation.date.desc(), Reservation.start_minute.desc())
        .all()
    )


def _owned_court_ids(caller) -> list:
    store = caller.store
    if store is None or not owns_store(caller, store.id):
        raise NotFound("No store assigned to this account")
    return [c.id for c in Court.query.filter_by(store_id=store.id).all()]


def store_reservations(caller) -> list:
    court_ids = _owned_court_ids(caller)
    if not court_ids:
        return []
    return (
        Reservation.query
        .filter(Reservation.court_id.in_(court_ids))
        .order_by(Reservation.date.desc(), Reservation.start_minute.desc())
        .all()
    )


def store_stats(caller) -> dict:
    stats = {status: 0 for status in RESERVATION_STATUSES}
    income = Decimal("0")
    rows = store_reservations(caller)
    for r in rows:
        stats[r.status] = stats.get(r.status, 0) + 1
        if r.status in ("confirmed", "completed"):
            income += Decimal(r.total_price)
    stats["total"] = len(rows)
    stats["totalIncome"] = float(income)
    return stats
