from datetime import datetime
from models.db import db
from utils.schedule import TimeOfDay

RESERVATION_STATUSES = ("pending", "confirmed", "cancelled", "completed")

class Reservation(db.Model):
    __tablename__ = "reservations"

    id = db.Column(db.Integer, primary_key=True)

    court_id = db.Column(db.Integer, db.ForeignKey("courts.id"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    date = db.Column(db.Date, nullable=False)
    start_minute = db.Column(db.Integer, nullable=False)
    end_minute = db.Column(db.Integer, nullable=False)

    status = db.Column(db.String(20), nullable=False, default="pending")
    # status values: pending, confirmed, cancelled, completed
    total_price = db.Column(db.Numeric(10, 2), nullable=False, default=0)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    court = db.relationship("Court")
    user = db.relationship("User")

    __table_args__ = (
        db.CheckConstraint("end_minute > start_minute", name="ck_reservation_interval"),
        db.Index("ix_reservations_court_date", "court_id", "date"),
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
            "userId": self.user_id,
            "date": self.date.isoformat(),
            "startTime": self.start_time,
            "endTime": self.end_time,
            "status": self.status,
            "totalPrice": float(self.total_price),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
