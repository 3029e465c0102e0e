"""Exception classes for SimpleHttp"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCategory(str, Enum):
    """Error category codes"""
    VALIDATION = "VAL"
    PROFILE = "PROFILE"
    INTERNAL = "INTERNAL"
    CONFIG = "CONFIG"
    UNKNOWN = "UNKNOWN"


class SimpleHttpError(Exception):
    """
    Base exception for SimpleHttp errors

    Every error raised by this package extends from this class.
    Transport failures are not raised; they are returned unchanged
    in ``RequestResult.error``.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        cause: Optional[Exception] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.status_code = status_code
        self.cause = cause
        self.details = details
        self.timestamp = datetime.utcnow()
        self.category = self._determine_category(code)

    def _determine_category(self, code: Optional[str]) -> ErrorCategory:
        """Determine error category from code"""
        if not code:
            return ErrorCategory.UNKNOWN

        if code.startswith("VAL"):
            return ErrorCategory.VALIDATION
        if code.startswith("PROFILE"):
            return ErrorCategory.PROFILE
        if code.startswith("INTERNAL"):
            return ErrorCategory.INTERNAL
        if code.startswith("CONFIG"):
            return ErrorCategory.CONFIG

        return ErrorCategory.UNKNOWN

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary"""
        return {
            "name": self.__class__.__name__,
            "message": str(self),
            "code": self.code,
            "status_code": self.status_code,
            "category": self.category.value,
            "timestamp": self.timestamp.isoformat() + "Z",
            "details": self.details,
        }

    def has_code(self, code: str) -> bool:
        """Check if error has a specific code"""
        return self.code == code

    def is_category(self, category: ErrorCategory) -> bool:
        """Check if error belongs to a category"""
        return self.category == category

    def get_description(self) -> str:
        """Get human-readable error description"""
        parts = [str(self)]

        if self.code:
            parts.insert(0, f"[{self.code}]")

        if self.status_code:
            parts.append(f"(HTTP {self.status_code})")

        return " ".join(parts)


class ValidationError(SimpleHttpError):
    """Client-side validation error, raised before any network activity"""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        cause: Optional[Exception] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message, code="VALIDATION_ERROR", cause=cause, details=details
        )
        self.field = field


class InvalidArgumentsError(ValidationError):
    """
    Raised when options are left over after classification

    ``keys`` holds exactly the unrecognized option keys, in the order
    they were supplied.
    """

    def __init__(self, keys: List[Any]) -> None:
        self.keys = list(keys)
        super().__init__(
            f"Invalid arguments: {', '.join(repr(k) for k in self.keys)}",
            details={"keys": self.keys},
        )


class ProfileError(SimpleHttpError):
    """The runtime could not start a connection profile"""

    def __init__(
        self,
        message: str,
        profile: Optional[str] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        super().__init__(
            message,
            code="PROFILE01",
            cause=cause,
            details={"profile": profile},
        )
        self.profile = profile


class InternalError(SimpleHttpError):
    """The runtime returned something outside its contract"""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL01",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, details=details)


class ConfigError(SimpleHttpError):
    """Configuration error"""

    def __init__(
        self,
        message: str,
        code: str = "CONFIG01",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, details=details)
