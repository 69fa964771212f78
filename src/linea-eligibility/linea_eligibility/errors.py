from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    REVERT = "revert"
    TRANSPORT = "transport"
    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    UNEXPECTED = "unexpected"


class EligibilityError(Exception):
    """Base error tagged with the kind of failure and structured details."""

    kind: ErrorKind = ErrorKind.UNEXPECTED

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    @property
    def is_revert(self) -> bool:
        return self.kind is ErrorKind.REVERT

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class RevertError(EligibilityError):
    """The node reported an execution revert for the call."""

    kind = ErrorKind.REVERT


class TransportError(EligibilityError):
    """HTTP, timeout, malformed response or non-revert node failure."""

    kind = ErrorKind.TRANSPORT


class ValidationError(EligibilityError, ValueError):
    kind = ErrorKind.VALIDATION


class ConfigurationError(EligibilityError):
    kind = ErrorKind.CONFIGURATION
