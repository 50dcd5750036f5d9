"""Routine scheduler errors."""

from typing import Any, Dict, List, Optional


class RoutineError(Exception):
    """Base class for routine scheduler errors."""

    code = "ROUTINE_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "message": self.message}


class RoutineValidationError(RoutineError):
    """Raised when routine input fails validation; nothing is persisted."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        self.errors = errors or []
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["errors"] = self.errors
        return data


class RoutineNotFoundError(RoutineError):
    """Raised when a routine id does not exist."""

    code = "ROUTINE_NOT_FOUND"

    def __init__(self, routine_id: str):
        self.routine_id = routine_id
        super().__init__(f"Routine {routine_id} not found")

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["routine_id"] = self.routine_id
        return data


class RoutineAlreadyTriggeredError(RoutineError):
    """Raised when a conditional trigger finds the cycle already fired."""

    code = "ALREADY_TRIGGERED"

    def __init__(self, routine_id: str):
        self.routine_id = routine_id
        super().__init__(f"Routine {routine_id} already triggered for this cycle")

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["routine_id"] = self.routine_id
        return data


class TriggerCommitError(RoutineError):
    """Raised when the trigger transaction aborts; no writes are kept."""

    code = "TRIGGER_COMMIT_FAILED"

    def __init__(self, routine_id: str, reason: str):
        self.routine_id = routine_id
        super().__init__(f"Trigger of routine {routine_id} rolled back: {reason}")

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["routine_id"] = self.routine_id
        return data
