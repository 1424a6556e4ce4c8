"""
Schedule store: recurring weekly availability windows per court.
"""
from typing import List

from flask import current_app

from models import db
from models.court import Court
from models.court_schedule import CourtSchedule
from security.rbac import can_manage_court
from utils.errors import (
    Forbidden,
    InvalidDayOfWeek,
    InvalidFormat,
    InvalidSchedule,
    InvalidSlotDuration,
    NotFound,
)
from utils.schedule import DayOfWeek, from_minutes, overlaps, to_minutes


def _field(entry: dict, camel: str, snake: str):
    return entry[camel] if camel in entry else entry.get(snake)


def get_court_or_404(court_id) -> Court:
    court = db.session.get(Court, court_id)
    if court is None:
        raise NotFound("Court not found")
    return court


def validate_schedule_entry(entry) -> dict:
    """Validate one incoming schedule and return normalized column values."""
    if not isinstance(entry, dict):
        raise InvalidSchedule("Each schedule must be an object")

    try:
        start_minute = to_minutes(_field(entry, "startTime", "start_time"))
        end_minute = to_minutes(_field(entry, "endTime", "end_time"))
    except InvalidFormat as exc:
        raise InvalidSchedule(exc.message)
    if end_minute <= start_minute:
        raise InvalidSchedule("End time must be after start time")

    day = _field(entry, "dayOfWeek", "day_of_week")
    if isinstance(day, bool) or not isinstance(day, int) or not 0 <= day <= 6:
        raise InvalidDayOfWeek("Invalid day of week (0-6)")

    min_slot = current_app.config.get("MIN_SLOT_DURATION", 15)
    max_slot = current_app.config.get("MAX_SLOT_DURATION", 240)
    slot_duration = _field(entry, "slotDuration", "slot_duration")
    if slot_duration is None:
        slot_duration = current_app.config.get("DEFAULT_SLOT_DURATION", 60)
    elif isinstance(slot_duration, bool) or not isinstance(slot_duration, int) \
            or not min_slot <= slot_duration <= max_slot:
        raise InvalidSlotDuration(f"Invalid slot duration ({min_slot}-{max_slot} minutes)")

    is_active = _field(entry, "isActive", "is_active")
    return {
        "day_of_week": day,
        "start_minute": start_minute,
        "end_minute": end_minute,
        "slot_duration": slot_duration,
        "is_active": True if is_active is None else bool(is_active),
    }


def list_schedules(court_id) -> dict:
    get_court_or_404(court_id)
    schedules = (
        CourtSchedule.query
        .filter_by(court_id=court_id)
        .order_by(CourtSchedule.day_of_week.asc(), CourtSchedule.start_minute.asc())
        .all()
    )

    by_day = {int(day): [] for day in DayOfWeek}
    for schedule in schedules:
        by_day[schedule.day_of_week].append(schedule)
    return {"schedules": schedules, "schedules_by_day": by_day}


def _check_disjoint(rows):
    # windows on the same day must not overlap; touching is fine
    by_day = {}
    for row in rows:
        by_day.setdefault(row["day_of_week"], []).append(row)
    for day, windows in by_day.items():
        windows.sort(key=lambda w: w["start_minute"])
        for prev, nxt in zip(windows, windows[1:]):
            if overlaps(prev["start_minute"], prev["end_minute"], nxt["start_minute"], nxt["end_minute"]):
                raise InvalidSchedule(
                    "Schedules overlap on the same day",
                    details={"dayOfWeek": day, "startTime": from_minutes(nxt["start_minute"])},
                )


def replace_schedules(court_id, entries, caller) -> List[CourtSchedule]:
    """
    Replace every schedule of a court with `entries`.

    The whole set is validated before anything is written, and the delete and
    insert share one transaction, so readers never see a partial set.
    """
    court = get_court_or_404(court_id)
    if not can_manage_court(caller, court):
        raise Forbidden("You are not allowed to modify this court")

    if not isinstance(entries, list):
        raise InvalidSchedule("schedules must be a list")
    rows = [validate_schedule_entry(entry) for entry in entries]
    _check_disjoint(rows)

    try:
        CourtSchedule.query.filter_by(court_id=court.id).delete()
        created = [CourtSchedule(court_id=court.id, **values) for values in rows]
        db.session.add_all(created)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return created


def delete_schedule(schedule_id, caller) -> CourtSchedule:
    schedule = db.session.get(CourtSchedule, schedule_id)
    if schedule is None:
        raise NotFound("Schedule not found")
    if not can_manage_court(caller, schedule.court):
        raise Forbidden("You are not allowed to delete this schedule")

    db.session.delete(schedule)
    db.session.commit()
    return schedule
