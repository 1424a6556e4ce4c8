"""
Booking engine errors.

Every error maps to an HTTP status and a JSON body via the handler that
app.create_app registers, so route handlers can simply let them propagate.
"""


class BookingError(Exception):
    status_code = 400

    def __init__(self, message: str, code=None, details=None):
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(message)

    def to_dict(self):
        body = {"error": self.message, "code": self.code}
        body.update(self.details)
        return body


class InvalidFormat(BookingError):
    """Malformed HH:MM time or YYYY-MM-DD date."""


class InvalidInterval(BookingError):
    """End is not after start, or a date range is unusable."""


class InvalidSchedule(BookingError):
    pass


class InvalidDayOfWeek(InvalidSchedule):
    pass


class InvalidSlotDuration(InvalidSchedule):
    pass


class InvalidStatus(BookingError):
    pass


class CourtInactive(BookingError):
    pass


class NotFound(BookingError):
    status_code = 404


class Forbidden(BookingError):
    status_code = 403


class SlotConflict(BookingError):
    status_code = 409


class InvalidTransition(BookingError):
    status_code = 409
