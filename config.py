import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

def _csv(value: str) -> tuple:
    return tuple(part.strip() for part in value.split(",") if part.strip())

class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # SQLite database file stored next to app.py as courtbook.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "courtbook.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Session cookie name for our auth token
    AUTH_COOKIE_NAME = "courtbook_session"

    # 8 hours session lifetime
    SESSION_LIFETIME_SECONDS = 8 * 60 * 60

    # Idle timeout: 20 minutes
    IDLE_TIMEOUT_SECONDS = 20 * 60

    # Session/cookie security defaults
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_SECURE = os.getenv("SESSION_COOKIE_SECURE", "false").lower() == "true"

    # CSRF double-submit cookie
    CSRF_ENABLED = True
    CSRF_COOKIE_NAME = "csrf_token"
    CSRF_HEADER_NAME = "X-CSRF-Token"

    # Schedule rules
    DEFAULT_SLOT_DURATION = 60
    MIN_SLOT_DURATION = 15
    MAX_SLOT_DURATION = 240

    # Reservations in these statuses block a slot. Add "completed" to keep
    # finished bookings from being overlapped by new ones.
    BLOCKING_RESERVATION_STATUSES = _csv(
        os.getenv("BLOCKING_RESERVATION_STATUSES", "pending,confirmed")
    )

    # Longest range accepted by the availability calendar
    AVAILABILITY_RANGE_MAX_DAYS = int(os.getenv("AVAILABILITY_RANGE_MAX_DAYS", "62"))

    # Basic app settings
    DEBUG = False

class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    CSRF_ENABLED = False
