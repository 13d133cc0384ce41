from typing import Any, Dict, Optional


class RentalError(Exception):
    """Base class for every domain error raised by the rental backend."""

    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(RentalError):
    status_code = 400


class NotFoundError(RentalError):
    status_code = 404


class ConflictError(RentalError):
    status_code = 409


class LeaseOverlapError(ConflictError):
    pass


class AlreadyPaidError(ConflictError):
    pass


class ConstraintViolation(RentalError):
    status_code = 409


class DataIncompleteError(RentalError):
    status_code = 400


class ExternalStorageError(RentalError):
    status_code = 502


class SigningError(RentalError):
    # never reaches a client, receipts fall back to unsigned
    status_code = 500
