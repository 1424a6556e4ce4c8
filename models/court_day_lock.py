from models.db import db

class CourtDayLock(db.Model):
    __tablename__ = "court_day_locks"

    id = db.Column(db.Integer, primary_key=True)
    court_id = db.Column(db.Integer, db.ForeignKey("courts.id"), nullable=False)
    day = db.Column(db.Date, nullable=False)

    # bumped on every booking attempt so the UPDATE takes a row lock
    version = db.Column(db.Integer, default=0, nullable=False)

    __table_args__ = (
        # one lock row per court per calendar day
        db.UniqueConstraint("court_id", "day", name="uq_court_day_lock"),
    )
