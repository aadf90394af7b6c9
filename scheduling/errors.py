class SchedulingError(Exception):
    """Base error for the appointment subsystem.

    Carries the HTTP status the request handler answers with and an
    optional list of ``{"field": ..., "message": ...}`` details.
    """

    status_code = 500
    message = "Scheduling error"

    def __init__(self, message=None, details=None):
        super().__init__(message or self.message)
        if message:
            self.message = message
        self.details = details or []

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(SchedulingError):
    status_code = 400
    message = "Validation failed"


class ConflictError(SchedulingError):
    status_code = 409
    message = "This time slot is no longer available"


class NotFoundError(SchedulingError):
    status_code = 404
    message = "Appointment not found"


class ForbiddenError(SchedulingError):
    status_code = 403
    message = "Forbidden"


class InvalidTransitionError(ForbiddenError):
    message = "Cannot change this appointment to the requested status"
