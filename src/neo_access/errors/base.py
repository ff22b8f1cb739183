"""
Base exception class for neo-access.

All access-layer exceptions inherit from NeoAccessError, which provides
structured error information including an error kind, a machine-readable
code and additional context details.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class NeoAccessError(Exception):
    """
    Base exception for all access-layer errors.

    Provides structured error information that can be serialized and logged.

    Attributes:
        message: Human-readable error description.
        code: Machine-readable error code (e.g., "INVALID_ADDRESS").
        details: Optional dictionary with additional error context.
        kind: Error category shared by the whole subclass tree.
        retryable: Whether callers may retry after backing off.

    Example:
        >>> raise NeoAccessError(
        ...     "Node returned an empty height",
        ...     code="EMPTY_RESPONSE",
        ...     details={"method": "getblockcount"}
        ... )
    """

    kind: str = "InternalError"
    retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        code: str = "NEO_ACCESS_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Initialize NeoAccessError.

        Args:
            message: Human-readable error description.
            code: Machine-readable error code.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        """Return formatted error message."""
        return f"[{self.code}] {self.message}"

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code!r}, "
            f"details={self.details!r})"
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to the uniform error shape.

        Returns:
            Dictionary representation of the error.
        """
        return {
            "kind": self.kind,
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "retryable": self.retryable,
        }
