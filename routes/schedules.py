from flask import Blueprint, request, jsonify, g

from services import availability as availability_service
from services import schedules as schedule_service
from utils.auth_context import login_required
from utils.audit import log_event

schedules_bp = Blueprint("schedules", __name__)


# ---------- PUBLIC: view court schedules ----------
@schedules_bp.get("/courts/<int:court_id>/schedules")
def list_schedules(court_id: int):
    result = schedule_service.list_schedules(court_id)
    return jsonify(
        schedules=[s.to_dict() for s in result["schedules"]],
        schedules_by_day={
            str(day): [s.to_dict() for s in rows]
            for day, rows in result["schedules_by_day"].items()
        },
    ), 200


# ---------- STORE OWNER / SUPER ADMIN: replace court schedules ----------
@schedules_bp.post("/courts/<int:court_id>/schedules")
@login_required
def replace_schedules(court_id: int):
    data = request.get_json(silent=True) or {}
    created = schedule_service.replace_schedules(court_id, data.get("schedules"), g.user)

    log_event(
        "SCHEDULES_REPLACE",
        user_id=g.user.id,
        entity="court",
        entity_id=court_id,
        metadata={"count": len(created)},
    )
    return jsonify(
        message="Schedules saved",
        schedules=[s.to_dict() for s in created],
    ), 200


@schedules_bp.delete("/schedules/<int:schedule_id>")
@login_required
def delete_schedule(schedule_id: int):
    schedule = schedule_service.delete_schedule(schedule_id, g.user)

    log_event(
        "SCHEDULE_DELETE",
        user_id=g.user.id,
        entity="schedule",
        entity_id=schedule_id,
        metadata={"court_id": schedule.court_id},
    )
    return jsonify(message="Schedule deleted"), 200


# ---------- PUBLIC: bookable slots for one date ----------
@schedules_bp.get("/courts/<int:court_id>/available-slots")
def available_slots(court_id: int):
    date_str = request.args.get("date")
    if not date_str:
        return jsonify(error="date is required (YYYY-MM-DD)"), 400

    return jsonify(availability_service.available_slots(court_id, date_str)), 200


# ---------- PUBLIC: calendar aggregate for a date range ----------
@schedules_bp.get("/courts/<int:court_id>/availability")
def availability(court_id: int):
    start_date = request.args.get("startDate")
    end_date = request.args.get("endDate")
    if not start_date or not end_date:
        return jsonify(error="startDate and endDate are required (YYYY-MM-DD)"), 400

    days = availability_service.availability_range(court_id, start_date, end_date)
    return jsonify(availability=days), 200
