"""
Availability resolver.

Turns recurring weekly schedules into concrete slots for a calendar date and
removes the ones already taken by a blocking reservation.
"""
from datetime import date, timedelta

from flask import current_app

from models.court_schedule import CourtSchedule
from models.reservation import Reservation
from services.schedules import get_court_or_404
from utils.errors import InvalidInterval
from utils.schedule import day_of_week, from_minutes, generate_slots, overlaps, parse_date, price

NO_SCHEDULE_MESSAGE = "No schedule configured for this day"


def blocking_statuses() -> tuple:
    """Statuses whose reservations block a slot (pending/confirmed by default)."""
    return tuple(current_app.config.get("BLOCKING_RESERVATION_STATUSES", ("pending", "confirmed")))


def _as_date(value) -> date:
    if isinstance(value, date):
        return value
    return parse_date(value)


def active_schedules_for(court_id, dow) -> list:
    return (
        CourtSchedule.query
        .filter_by(court_id=court_id, day_of_week=int(dow), is_active=True)
        .order_by(CourtSchedule.start_minute.asc())
        .all()
    )


def blocking_reservations(court_id, start_day: date, end_day: date = None, for_update: bool = False) -> list:
    end_day = end_day or start_day
    query = (
        Reservation.query
        .filter(
            Reservation.court_id == court_id,
            Reservation.date >= start_day,
            Reservation.date <= end_day,
            Reservation.status.in_(blocking_statuses()),
        )
        .order_by(Reservation.date.asc(), Reservation.start_minute.asc())
    )
    if for_update:
        # locking read sees the latest committed rows, not the transaction snapshot
        query = query.with_for_update()
    return query.all()


def candidate_slots(schedules) -> list:
    # grouped by schedule, time-ordered within each schedule
    slots = []
    for schedule in schedules:
        slots.extend(generate_slots(schedule.start_minute, schedule.end_minute, schedule.slot_duration))
    return slots


def _is_free(slot, reservations) -> bool:
    return not any(overlaps(slot[0], slot[1], r.start_minute, r.end_minute) for r in reservations)


def available_slots(court_id, day) -> dict:
    day = _as_date(day)
    court = get_court_or_404(court_id)
    dow = day_of_week(day)

    schedules = active_schedules_for(court.id, dow)
    if not schedules:
        return {
            "date": day.isoformat(),
            "dayOfWeek": int(dow),
            "hasSchedule": False,
            "totalSlots": 0,
            "reservedSlots": 0,
            "availableSlots": [],
            "message": NO_SCHEDULE_MESSAGE,
        }

    slots = candidate_slots(schedules)
    reservations = blocking_reservations(court.id, day)
    free = [slot for slot in slots if _is_free(slot, reservations)]

    return {
        "date": day.isoformat(),
        "dayOfWeek": int(dow),
        "hasSchedule": True,
        "totalSlots": len(slots),
        "reservedSlots": len(reservations),
        "availableSlots": [
            {
                "startTime": from_minutes(start),
                "endTime": from_minutes(end),
                "price": float(price(start, end, court.price_per_hour)),
            }
            for start, end in free
        ],
        "schedules": [
            {
                "startTime": s.start_time,
                "endTime": s.end_time,
                "slotDuration": s.slot_duration,
            }
            for s in schedules
        ],
    }


def availability_range(court_id, start_day, end_day) -> list:
    """
    Per-day aggregate over [start_day, end_day] for calendar views.

    reservedCount is the number of blocking reservations dated that day.
    availableCount subtracts the slots those reservations actually overlap,
    so it agrees with available_slots for the same day.
    """
    start_day = _as_date(start_day)
    end_day = _as_date(end_day)
    if end_day < start_day:
        raise InvalidInterval("endDate must not be before startDate")
    max_days = current_app.config.get("AVAILABILITY_RANGE_MAX_DAYS", 62)
    if (end_day - start_day).days + 1 > max_days:
        raise InvalidInterval(f"Date range is limited to {max_days} days")

    court = get_court_or_404(court_id)

    schedules_by_day = {}
    for schedule in (
        CourtSchedule.query
        .filter_by(court_id=court.id, is_active=True)
        .order_by(CourtSchedule.start_minute.asc())
        .all()
    ):
        schedules_by_day.setdefault(schedule.day_of_week, []).append(schedule)

    reservations_by_day = {}
    for r in blocking_reservations(court.id, start_day, end_day):
        reservations_by_day.setdefault(r.date, []).append(r)

    out = []
    current = start_day
    while current <= end_day:
        dow = day_of_week(current)
        day_schedules = schedules_by_day.get(int(dow), [])
        day_reservations = reservations_by_day.get(current, [])

        slots = candidate_slots(day_schedules)
        blocked = sum(1 for slot in slots if not _is_free(slot, day_reservations))

        out.append({
            "date": current.isoformat(),
            "dayOfWeek": int(dow),
            "totalSlotCount": len(slots),
            "reservedCount": len(day_reservations),
            "availableCount": len(slots) - blocked,
            "hasSchedule": bool(day_schedules),
        })
        current += timedelta(days=1)
    return out


def reservations_on(court_id, day) -> dict:
    day = _as_date(day)
    court = get_court_or_404(court_id)
    reservations = blocking_reservations(court.id, day)
    return {
        "courtId": court.id,
        "date": day.isoformat(),
        "reservations": [
            {"startTime": r.start_time, "endTime": r.end_time, "status": r.status}
            for r in reservations
        ],
        "available": not reservations,
    }
