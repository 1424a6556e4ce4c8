from datetime import datetime
from models.db import db

class Store(db.Model):
    __tablename__ = "stores"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    location = db.Column(db.String(160), nullable=True)

    owner_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, unique=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    owner = db.relationship("User", back_populates="store")
    courts = db.relationship("Court", back_populates="store", lazy=True)
