"""Tariff Error Hierarchy.

Typed exceptions for the tariff store and billing path. Each carries an
error code that the surrounding application maps to a distinct HTTP status
and user-facing message.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class TariffErrorCode(Enum):
    """Standardized tariff error codes."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    NO_ACTIVE_CONFIGURATION = "NO_ACTIVE_CONFIGURATION"
    INVALID_STATE_TRANSITION = "INVALID_STATE_TRANSITION"
    ACTIVATION_CONFLICT = "ACTIVATION_CONFLICT"
    CONFIGURATION_NOT_FOUND = "CONFIGURATION_NOT_FOUND"


ERROR_STATUS_MAP: Dict[TariffErrorCode, int] = {
    TariffErrorCode.VALIDATION_ERROR: 400,
    TariffErrorCode.NO_ACTIVE_CONFIGURATION: 422,
    TariffErrorCode.INVALID_STATE_TRANSITION: 409,
    TariffErrorCode.ACTIVATION_CONFLICT: 409,
    TariffErrorCode.CONFIGURATION_NOT_FOUND: 404,
}


class TariffError(Exception):
    """Base exception for all tariff errors."""

    def __init__(
        self,
        message: str,
        error_code: TariffErrorCode = TariffErrorCode.VALIDATION_ERROR,
        details: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = ERROR_STATUS_MAP.get(error_code, 500)
        self.details = details or []

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_code": self.error_code.value,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(TariffError):
    """Raised when a configuration is malformed."""

    def __init__(
        self,
        message: str = "Tariff configuration is invalid",
        details: Optional[List[Dict[str, Any]]] = None,
        field: Optional[str] = None,
    ):
        if field and not details:
            details = [{"field": field, "issue": message}]
        super().__init__(message, TariffErrorCode.VALIDATION_ERROR, details)


class NoActiveConfiguration(TariffError):
    """Raised when no Active configuration applies to a billing date."""

    def __init__(self, evaluation_date: Optional[datetime] = None):
        self.evaluation_date = evaluation_date
        message = "No active tariff configuration"
        if evaluation_date is not None:
            message = f"{message} for {evaluation_date.isoformat()}"
        super().__init__(message, TariffErrorCode.NO_ACTIVE_CONFIGURATION)


class ConfigurationNotFound(TariffError):
    """Raised when a configuration id is unknown to the store."""

    def __init__(self, configuration_id: str):
        self.configuration_id = configuration_id
        super().__init__(
            f"Tariff configuration not found: {configuration_id}",
            TariffErrorCode.CONFIGURATION_NOT_FOUND,
            [{"resource_type": "tariff_configuration", "resource_id": configuration_id}],
        )


class InvalidStateTransition(TariffError):
    """Raised when a store operation is not allowed from the current state."""

    def __init__(
        self,
        configuration_id: str,
        current_state: Any,
        operation: str,
        message: Optional[str] = None,
        error_code: TariffErrorCode = TariffErrorCode.INVALID_STATE_TRANSITION,
    ):
        self.configuration_id = configuration_id
        self.current_state = current_state
        self.operation = operation
        state = getattr(current_state, "value", current_state)
        super().__init__(
            message or f"Cannot {operation} configuration {configuration_id} in state {state}",
            error_code,
            [{"configuration_id": configuration_id, "state": state, "operation": operation}],
        )


class ActivationConflict(InvalidStateTransition):
    """Raised when another configuration already holds the Active slot."""

    def __init__(self, configuration_id: str, current_state: Any,
                 operation: str, active_id: str):
        self.active_id = active_id
        super().__init__(
            configuration_id,
            current_state,
            operation,
            message=(
                f"Cannot {operation} configuration {configuration_id}: "
                f"configuration {active_id} is already active"
            ),
            error_code=TariffErrorCode.ACTIVATION_CONFLICT,
        )
