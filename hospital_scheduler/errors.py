"""Domain exceptions surfaced by the registry and the HTTP layer."""


class SchedulerError(Exception):
    """Base class for expected, caller-facing errors."""
    status_code = 500
    code = "SCHEDULER_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(SchedulerError):
    """Raised when a doctor id or specialization has no active match."""
    status_code = 404
    code = "NOT_FOUND"


class ConflictError(SchedulerError):
    """Raised on duplicate doctor ids and other state conflicts."""
    status_code = 409
    code = "CONFLICT"
