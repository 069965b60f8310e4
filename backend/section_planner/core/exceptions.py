from enum import Enum


class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class SchedulerError(AppError):
    """Raised when the scheduler encounters a logical error or invalid state."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class PreassignmentErrorKind(str, Enum):
    capacity_full = "CAPACITY_FULL"
    unknown_section = "UNKNOWN_SECTION"
    conflict = "CONFLICT"

class PreassignmentError(SchedulerError):
    """Raised when fixed sections cannot be placed; aborts the whole run."""
    def __init__(self, message: str, kind: PreassignmentErrorKind, details: dict = None):
        self.kind = kind
        super().__init__(message, details={"kind": kind.value, **(details or {})})

class PreassignmentConflictError(AppError):
    """Raised when a preassigned student holds two sections on the same block."""
    def __init__(self, conflict: dict):
        self.conflict = conflict
        super().__init__(
            f"Preassigned sections for student {conflict.get('student_code')} collide on block "
            f"{conflict.get('conflicting_block')}",
            status_code=409,
            details=conflict,
        )

class ConfigurationError(AppError):
    """Raised when system configuration is invalid."""
    def __init__(self, message: str):
        super().__init__(message, status_code=500)

class RosterImportError(AppError):
    """Raised when roster rows cannot be mapped onto the configured catalog."""
    def __init__(self, message: str):
        super().__init__(message, status_code=400)
