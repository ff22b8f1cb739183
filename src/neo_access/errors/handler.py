"""
Conversion of arbitrary exceptions into the uniform error shape.

Collaborators (tool adapters, HTTP shims) call ``to_error_response`` at their
boundary so callers always receive ``{"error": {kind, code, message, ...}}``.
"""

from __future__ import annotations

from typing import Any, Dict

import httpx

from neo_access.errors.base import NeoAccessError
from neo_access.errors.types import InternalError, NetworkError, ValidationError


def normalize_error(error: BaseException) -> NeoAccessError:
    """
    Map any exception onto the error taxonomy.

    Args:
        error: Exception raised anywhere below the boundary

    Returns:
        The same error if it already belongs to the taxonomy, otherwise a
        NetworkError (for httpx failures), ValidationError (for ValueError
        and TypeError) or InternalError.
    """
    if isinstance(error, NeoAccessError):
        return error

    if isinstance(error, httpx.HTTPError):
        return NetworkError(
            f"Failed to reach ledger node: {error}",
            details={"cause": error.__class__.__name__},
        )

    if isinstance(error, (ValueError, TypeError)):
        return ValidationError(str(error) or "Invalid input")

    return InternalError(
        str(error) or "Unexpected internal error",
        details={"cause": error.__class__.__name__},
    )


def to_error_response(error: BaseException) -> Dict[str, Any]:
    """
    Build the response payload for an exception.

    Example:
        >>> to_error_response(ValidationError("bad"))["error"]["kind"]
        'ValidationError'
    """
    return {"error": normalize_error(error).to_dict()}
