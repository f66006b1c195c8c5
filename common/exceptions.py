"""
Custom exceptions for the election integrity service.
"""


class ElectionIntegrityError(Exception):
    """Base exception for all election integrity errors."""
    pass


class PreconditionViolation(ElectionIntegrityError):
    """Input handed to an analysis routine does not meet its ordering or identity requirements."""
    pass


class AuditTrailNotFoundError(ElectionIntegrityError):
    """No audit entries exist for the requested election."""
    pass


class FraudCaseNotFoundError(ElectionIntegrityError):
    """Requested fraud case does not exist."""
    pass


class VerificationNotFoundError(ElectionIntegrityError):
    """No verification record matches the requested code."""
    pass
