from .db import db
from .user import User, Role, user_roles
from .audit_log import AuditLog
from .session import Session
from .store import Store
from .court import Court
from .court_schedule import CourtSchedule
from .reservation import Reservation, RESERVATION_STATUSES
from .court_day_lock import CourtDayLock
