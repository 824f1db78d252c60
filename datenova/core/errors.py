"""
Error Taxonomy Module

Every failure the CRM reports to a user is one of these exceptions. Validation
errors are raised before any remote call; remote errors wrap whatever the
database or the file store returned; NotFound signals a single-row lookup that
came back empty.
"""
from typing import List, Optional


class CRMError(Exception):
    """Base class for all domain errors."""

    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(CRMError):
    """
    One or more client-side rules failed.

    Attributes:
        errors: Ordered list of {"field", "message"} dicts, one per failing field
    """
    status_code = 422

    def __init__(self, errors: List[dict]):
        self.errors = errors
        message = errors[0]["message"] if errors else "Error de validación"
        super().__init__(message)


class RemoteOperationFailed(CRMError):
    """
    A data-access, storage or auth call returned an error.

    The code follows the SQLSTATE / PostgREST vocabulary ("23505", "23503",
    "42501", "PGRST116"...) so that a friendly message can be looked up.
    """

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code

    @property
    def status_code(self) -> int:
        if self.code in ("23505", "23503"):
            return 409
        if self.code == "42501":
            return 403
        if self.code == "PGRST116":
            return 404
        return 400


class NotFound(CRMError):
    """A lookup expected to return exactly one row returned none."""
    status_code = 404


class PermissionDenied(CRMError):
    """The acting user's role does not allow the operation."""
    status_code = 403


class InvalidTransition(CRMError):
    """A deliverable transition was requested from a state that does not allow it."""
    status_code = 409
