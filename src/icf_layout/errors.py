# File: src/icf_layout/errors.py

"""
Exception types for the ICF layout engine.

Geometric ambiguity never raises; it is reported through status and reason
values on the result records. Only invalid configuration aborts a run.
"""

from typing import Any, Dict, List, Optional


class LayoutError(Exception):
    """
    Base class for layout engine exceptions.

    Carries an internal code and optional structured context so callers can
    report the failure without parsing the message.
    """
    def __init__(
        self,
        detail: str,
        internal_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize the error with details.

        Args:
            detail: Human-readable error message
            internal_code: Optional internal error code for client reference
            extra: Optional additional error context
        """
        self.detail = detail
        self.internal_code = internal_code
        self.extra = extra or {}
        super().__init__(detail)

    def to_dict(self) -> Dict[str, Any]:
        """Structured representation for JSON responses."""
        payload: Dict[str, Any] = {"detail": self.detail}
        if self.internal_code:
            payload["code"] = self.internal_code
        if self.extra:
            payload["extra"] = self.extra
        return payload


class LayoutConfigError(LayoutError, ValueError):
    """Raised when configuration values are invalid (e.g. a non-positive tolerance)."""
    def __init__(self, source: str, errors: List[str]):
        """
        Initialize with the list of validation failures.

        Args:
            source: Name of the configuration object that failed
            errors: Individual validation messages
        """
        self.errors = list(errors)
        super().__init__(
            detail=f"{source} validation failed:\n" + "\n".join(self.errors),
            internal_code="invalid_configuration",
            extra={"errors": self.errors},
        )
