from .health import health_bp
from .schedules import schedules_bp
from .reservations import reservations_bp
