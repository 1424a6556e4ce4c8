from flask import Blueprint, request, jsonify, g

from security.rbac import require_roles
from services import availability as availability_service
from services import reservations as reservation_service
from utils.auth_context import login_required
from utils.audit import log_event
from utils.errors import SlotConflict

reservations_bp = Blueprint("reservations", __name__, url_prefix="/reservations")

STATUS_MESSAGES = {
    "confirmed": "Reservation confirmed",
    "cancelled": "Reservation cancelled",
    "completed": "Reservation completed",
}


# ---------- USERS: book an interval (DOUBLE-BOOKING SAFE) ----------
@reservations_bp.post("")
@login_required
def create_reservation():
    data = request.get_json(silent=True) or {}
    court_id = data.get("courtId")
    date_str = data.get("date")
    start_time = data.get("startTime")
    end_time = data.get("endTime")

    if not court_id or not date_str or not start_time or not end_time:
        return jsonify(error="courtId, date, startTime, endTime are required"), 400

    try:
        reservation = reservation_service.create_reservation(
            court_id, g.user.id, date_str, start_time, end_time
        )
    except SlotConflict as exc:
        log_event(
            "RESERVATION_CONFLICT",
            user_id=g.user.id,
            entity="court",
            entity_id=court_id,
            metadata={"date": date_str, "start": start_time, "end": end_time, **exc.details},
        )
        raise

    log_event(
        "RESERVATION_CREATE",
        user_id=g.user.id,
        entity="reservation",
        entity_id=reservation.id,
        metadata={"court_id": reservation.court_id, "date": date_str},
    )
    return jsonify(
        reservation=reservation.to_dict(),
        message="Reservation created. Waiting for confirmation from the store owner.",
    ), 201


# ---------- OWNER / CREATOR: change status ----------
@reservations_bp.put("/<int:reservation_id>/status")
@login_required
def update_status(reservation_id: int):
    data = request.get_json(silent=True) or {}
    status = (data.get("status") or "").strip().lower()

    reservation = reservation_service.set_reservation_status(reservation_id, status, g.user)

    log_event(
        "RESERVATION_STATUS_CHANGE",
        user_id=g.user.id,
        entity="reservation",
        entity_id=reservation.id,
        metadata={"status": status},
    )
    return jsonify(
        reservation=reservation.to_dict(),
        message=STATUS_MESSAGES.get(status, "Reservation updated"),
    ), 200


@reservations_bp.get("/me")
@login_required
def my_reservations():
    rows = reservation_service.reservations_for_user(g.user.id)
    return jsonify(reservations=[r.to_dict() for r in rows]), 200


# ---------- STORE OWNER: reservations and stats for own store ----------
@reservations_bp.get("/store")
@require_roles("STORE_OWNER")
def store_reservations():
    rows = reservation_service.store_reservations(g.user)
    return jsonify(reservations=[r.to_dict() for r in rows]), 200


@reservations_bp.get("/store/stats")
@require_roles("STORE_OWNER")
def store_stats():
    return jsonify(stats=reservation_service.store_stats(g.user)), 200


@reservations_bp.get("/availability/<int:court_id>/<date_str>")
def day_availability(court_id: int, date_str: str):
    return jsonify(availability_service.reservations_on(court_id, date_str)), 200


@reservations_bp.get("/<int:reservation_id>")
@login_required
def get_reservation(reservation_id: int):
    reservation = reservation_service.get_reservation_for(reservation_id, g.user)
    return jsonify(reservation=reservation.to_dict()), 200
