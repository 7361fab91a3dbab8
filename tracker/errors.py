"""Operation-level failures surfaced to API callers."""


class TrackerError(Exception):
    """Base class for errors that carry a caller-facing message."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(TrackerError):
    status_code = 404


class Unauthorized(TrackerError):
    status_code = 401


class InvalidCredentials(Unauthorized):
    """Raised by login when the event name and keycode do not match a row."""


class ConstraintViolation(TrackerError):
    """Uniqueness or foreign-key failure reported by the database."""

    status_code = 409


class PayloadTooLarge(TrackerError):
    status_code = 413


class ConfigurationError(TrackerError):
    status_code = 500
