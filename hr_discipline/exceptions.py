"""Error taxonomy shared by the tardiness and disciplinary engine."""


class DisciplineError(Exception):
    """Base exception for attendance discipline failures."""


class ConfigurationError(DisciplineError):
    """Rule configuration is invalid or a required rule is missing."""


class NotFoundError(DisciplineError):
    """A referenced employee, rule, record or attendance row does not exist."""


class StateConflictError(DisciplineError):
    """The requested transition conflicts with the current state."""


class EmployeeTerminatedError(StateConflictError):
    """Disciplinary records cannot be opened for a terminated employee."""


class TransientError(DisciplineError):
    """Storage or lock contention; the operation is safe to retry."""


class SchedulerRunError(DisciplineError):
    """One record failed inside a scheduled sweep."""

    def __init__(self, message: str, *, attendance_id=None, employee_id=None):
        super().__init__(message)
        self.attendance_id = attendance_id
        self.employee_id = employee_id
