from datetime import datetime
from models.db import db
from utils.schedule import TimeOfDay

class CourtSchedule(db.Model):
    __tablename__ = "court_schedules"

    id = db.Column(db.Integer, primary_key=True)
    court_id = db.Column(db.Integer, db.ForeignKey("courts.id"), nullable=False, index=True)

    day_of_week = db.Column(db.Integer, nullable=False)  # 0 = Sunday ... 6 = Saturday
    # minutes since midnight, formatted as HH:MM only at the boundary
    start_minute = db.Column(db.Integer, nullable=False)
    end_minute = db.Column(db.Integer, nullable=False)
    slot_duration = db.Column(db.Integer, nullable=False, default=60)

    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    court = db.relationship("Court", back_populates="schedules")

    __table_args__ = (
        db.CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_schedule_day_of_week"),
        db.CheckConstraint("end_minute > start_minute", name="ck_schedule_interval"),
        db.CheckConstraint("slot_duration BETWEEN 15 AND 240", name="ck_schedule_slot_duration"),
        db.Index("ix_court_schedules_court_day", "court_id", "day_of_week"),
        {"sqlite_autoincrement": True},
    )

    @property
    def start_time(self) -> str:
        return str(TimeOfDay(self.start_minute))

    @property
    def end_time(self) -> str:
        return str(TimeOfDay(self.end_minute))

    def to_dict(self):
        return {
            "id": self.id,
            "courtId": self.court_id,
            "dayOfWeek": self.day_of_week,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "slotDuration": self.slot_duration,
            "isActive": self.is_active,
        }
