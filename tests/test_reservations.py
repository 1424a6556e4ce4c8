from datetime import date
from decimal import Decimal

import pytest

from models import db
from models.audit_log import AuditLog
from models.court import Court
from models.court_day_lock import CourtDayLock
from models.reservation import Reservation
from services import reservations as reservation_service
from utils.errors import (
    CourtInactive,
    Forbidden,
    InvalidFormat,
    InvalidInterval,
    InvalidStatus,
    InvalidTransition,
    NotFound,
    SlotConflict,
)

MONDAY = date(2026, 10, 19)


def reserve(court, user, start, end, day=MONDAY):
    return reservation_service.create_reservation(court.id, user.id, day, start, end)


class TestBookingGuard:
    def test_creates_pending_priced_reservation(self, court, player):
        r = reserve(court, player, "09:00", "10:30")
        assert r.status == "pending"
        assert r.total_price == Decimal("30000.00")
        assert (r.start_time, r.end_time) == ("09:00", "10:30")
        assert r.date == MONDAY

    def test_accepts_date_string(self, court, player):
        r = reservation_service.create_reservation(court.id, player.id, "2026-10-19", "09:00", "10:00")
        assert r.date == MONDAY

    @pytest.mark.parametrize("start,end", [
        ("10:00", "11:00"),
        ("09:30", "10:30"),
        ("10:30", "11:30"),
        ("10:15", "10:45"),
        ("09:00", "12:00"),
    ])
    def test_overlapping_booking_conflicts(self, court, player, other_player, start, end):
        reserve(court, player, "10:00", "11:00")
        with pytest.raises(SlotConflict) as excinfo:
            reserve(court, other_player, start, end)
        assert excinfo.value.details["conflictingTime"] == "10:00 - 11:00"
        assert Reservation.query.count() == 1

    def test_touching_booking_succeeds(self, court, player, other_player):
        reserve(court, player, "10:00", "11:00")
        reserve(court, other_player, "11:00", "12:00")
        reserve(court, other_player, "09:00", "10:00")
        assert Reservation.query.count() == 3

    def test_other_day_or_court_does_not_conflict(self, court, store, player):
        second = Court(store_id=store.id, name="Cancha 2", price_per_hour=Decimal("15000"))
        db.session.add(second)
        db.session.commit()

        reserve(court, player, "10:00", "11:00")
        reserve(court, player, "10:00", "11:00", day=date(2026, 10, 20))
        reserve(second, player, "10:00", "11:00")
        assert Reservation.query.count() == 3

    def test_cancelled_slot_can_be_rebooked(self, court, owner, player, other_player):
        first = reserve(court, player, "10:00", "11:00")
        reservation_service.set_reservation_status(first.id, "cancelled", owner)
        reserve(court, other_player, "10:00", "11:00")

    def test_completed_does_not_block_by_default(self, court, owner, player, other_player):
        first = reserve(court, player, "10:00", "11:00")
        reservation_service.set_reservation_status(first.id, "confirmed", owner)
        reservation_service.set_reservation_status(first.id, "completed", owner)
        reserve(court, other_player, "10:00", "11:00")

    def test_completed_blocks_when_configured(self, app, court, owner, player, other_player):
        app.config["BLOCKING_RESERVATION_STATUSES"] = ("pending", "confirmed", "completed")
        first = reserve(court, player, "10:00", "11:00")
        reservation_service.set_reservation_status(first.id, "confirmed", owner)
        reservation_service.set_reservation_status(first.id, "completed", owner)
        with pytest.raises(SlotConflict):
            reserve(court, other_player, "10:30", "11:30")

    def test_takes_court_day_lock(self, court, player):
        reserve(court, player, "10:00", "11:00")
        reserve(court, player, "12:00", "13:00")
        lock = CourtDayLock.query.filter_by(court_id=court.id, day=MONDAY).one()
        assert lock.version == 2

    def test_unknown_court(self, app, player):
        with pytest.raises(NotFound):
            reservation_service.create_reservation(999, player.id, MONDAY, "10:00", "11:00")

    def test_inactive_court_checked_before_interval(self, court, player):
        court.is_active = False
        db.session.commit()
        with pytest.raises(CourtInactive):
            reserve(court, player, "11:00", "10:00")

    @pytest.mark.parametrize("start,end", [("11:00", "10:00"), ("10:00", "10:00")])
    def test_end_must_follow_start(self, court, player, start, end):
        with pytest.raises(InvalidInterval):
            reserve(court, player, start, end)

    def test_malformed_time(self, court, player):
        with pytest.raises(InvalidFormat):
            reserve(court, player, "10am", "11:00")


class TestStatusTransitions:
    @pytest.fixture
    def pending(self, court, player):
        return reserve(court, player, "10:00", "11:00")

    def test_owner_confirms_then_completes(self, pending, owner):
        assert reservation_service.set_reservation_status(pending.id, "confirmed", owner).status == "confirmed"
        assert reservation_service.set_reservation_status(pending.id, "completed", owner).status == "completed"

    def test_super_admin_confirms(self, pending, super_admin):
        assert reservation_service.set_reservation_status(pending.id, "confirmed", super_admin).status == "confirmed"

    def test_creator_cannot_confirm(self, pending, player):
        with pytest.raises(Forbidden):
            reservation_service.set_reservation_status(pending.id, "confirmed", player)
        assert db.session.get(Reservation, pending.id).status == "pending"

    def test_creator_cannot_complete(self, pending, owner, player):
        reservation_service.set_reservation_status(pending.id, "confirmed", owner)
        with pytest.raises(Forbidden):
            reservation_service.set_reservation_status(pending.id, "completed", player)

    def test_creator_cannot_reopen(self, pending, owner, player):
        with pytest.raises(Forbidden):
            reservation_service.set_reservation_status(pending.id, "pending", player)
        reservation_service.set_reservation_status(pending.id, "confirmed", owner)
        with pytest.raises(Forbidden):
            reservation_service.set_reservation_status(pending.id, "pending", player)
        assert db.session.get(Reservation, pending.id).status == "confirmed"

    def test_creator_cancels(self, pending, player):
        assert reservation_service.set_reservation_status(pending.id, "cancelled", player).status == "cancelled"

    @pytest.mark.parametrize("caller_fixture", ["other_player", "rival_owner"])
    def test_strangers_are_forbidden(self, request, pending, caller_fixture):
        caller = request.getfixturevalue(caller_fixture)
        with pytest.raises(Forbidden):
            reservation_service.set_reservation_status(pending.id, "cancelled", caller)

    @pytest.mark.parametrize("terminal", ["cancelled", "completed"])
    def test_terminal_states_are_final(self, pending, owner, terminal):
        if terminal == "completed":
            reservation_service.set_reservation_status(pending.id, "confirmed", owner)
        reservation_service.set_reservation_status(pending.id, terminal, owner)
        for target in ("pending", "confirmed", "cancelled", "completed"):
            with pytest.raises(InvalidTransition):
                reservation_service.set_reservation_status(pending.id, target, owner)

    def test_pending_cannot_jump_to_completed(self, pending, owner):
        with pytest.raises(InvalidTransition):
            reservation_service.set_reservation_status(pending.id, "completed", owner)

    def test_unknown_status(self, pending, owner):
        with pytest.raises(InvalidStatus):
            reservation_service.set_reservation_status(pending.id, "archived", owner)

    def test_missing_reservation(self, app, owner):
        with pytest.raises(NotFound):
            reservation_service.set_reservation_status(31337, "cancelled", owner)


class TestStoreViews:
    def test_store_stats(self, court, owner, player):
        a = reserve(court, player, "08:00", "09:00")
        b = reserve(court, player, "09:00", "10:30")
        reserve(court, player, "11:00", "12:00")
        reservation_service.set_reservation_status(a.id, "confirmed", owner)
        reservation_service.set_reservation_status(b.id, "confirmed", owner)
        reservation_service.set_reservation_status(b.id, "completed", owner)

        stats = reservation_service.store_stats(owner)
        assert stats["total"] == 3
        assert stats["pending"] == 1
        assert stats["confirmed"] == 1
        assert stats["completed"] == 1
        assert stats["cancelled"] == 0
        assert stats["totalIncome"] == 50000.0

    def test_store_reservations_only_own_courts(self, court, owner, rival_owner, player):
        reserve(court, player, "08:00", "09:00")
        assert len(reservation_service.store_reservations(owner)) == 1
        assert reservation_service.store_reservations(rival_owner) == []

    def test_account_without_store(self, super_admin):
        with pytest.raises(NotFound) as excinfo:
            reservation_service.store_stats(super_admin)
        assert excinfo.value.to_dict()["code"] == "NotFound"


class TestReservationRoutes:
    def _payload(self, court, start="10:00", end="11:00"):
        return {"courtId": court.id, "date": "2026-10-19", "startTime": start, "endTime": end}

    def test_create_requires_login(self, client, court):
        assert client.post("/reservations", json=self._payload(court)).status_code == 401

    def test_create_and_conflict(self, login, court, player):
        client = login(player)
        resp = client.post("/reservations", json=self._payload(court))
        assert resp.status_code == 201
        body = resp.get_json()["reservation"]
        assert body["status"] == "pending"
        assert body["totalPrice"] == 20000.0

        resp = client.post("/reservations", json=self._payload(court, "10:30", "11:30"))
        assert resp.status_code == 409
        assert resp.get_json()["conflictingTime"] == "10:00 - 11:00"

        resp = client.post("/reservations", json=self._payload(court, "11:00", "12:00"))
        assert resp.status_code == 201

        actions = [row.action for row in AuditLog.query.order_by(AuditLog.id).all()]
        assert actions == ["RESERVATION_CREATE", "RESERVATION_CONFLICT", "RESERVATION_CREATE"]

    def test_create_missing_fields(self, login, court, player):
        client = login(player)
        resp = client.post("/reservations", json={"courtId": court.id})
        assert resp.status_code == 400

    def test_creator_cannot_confirm_via_api(self, login, court, player):
        client = login(player)
        reservation_id = client.post("/reservations", json=self._payload(court)).get_json()["reservation"]["id"]
        resp = client.put(f"/reservations/{reservation_id}/status", json={"status": "confirmed"})
        assert resp.status_code == 403

    def test_owner_confirms_via_api(self, login, court, player, owner):
        reservation_id = reserve(court, player, "10:00", "11:00").id
        client = login(owner)
        resp = client.put(f"/reservations/{reservation_id}/status", json={"status": "confirmed"})
        assert resp.status_code == 200
        assert resp.get_json()["reservation"]["status"] == "confirmed"

        resp = client.put(f"/reservations/{reservation_id}/status", json={"status": "pending"})
        assert resp.status_code == 409
        assert resp.get_json()["code"] == "InvalidTransition"

    def test_view_reservation_permissions(self, login, court, player, other_player):
        reservation_id = reserve(court, player, "10:00", "11:00").id
        client = login(other_player)
        assert client.get(f"/reservations/{reservation_id}").status_code == 403
        client = login(player)
        assert client.get(f"/reservations/{reservation_id}").status_code == 200

    def test_my_reservations(self, login, court, player, other_player):
        reserve(court, player, "10:00", "11:00")
        reserve(court, other_player, "12:00", "13:00")
        resp = login(player).get("/reservations/me")
        assert [r["startTime"] for r in resp.get_json()["reservations"]] == ["10:00"]

    def test_store_routes_need_store_owner(self, login, court, player, owner):
        assert login(player).get("/reservations/store").status_code == 403
        resp = login(owner).get("/reservations/store/stats")
        assert resp.status_code == 200
        assert resp.get_json()["stats"]["total"] == 0

    def test_store_routes_without_store(self, login, super_admin):
        resp = login(super_admin).get("/reservations/store")
        assert resp.status_code == 404
        assert resp.get_json()["code"] == "NotFound"
