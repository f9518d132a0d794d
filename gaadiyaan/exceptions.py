# gaadiyaan/exceptions.py
"""Error taxonomy.

Every error a caller can see carries a stable machine readable `kind` and the
HTTP status it maps to; `main.py` renders them as JSON.
"""
from typing import Iterable, List, Optional


class GaadiyaanError(Exception):
    kind = "error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(GaadiyaanError):
    kind = "validation_error"
    status_code = 400

    def __init__(self, message: str, fields: Optional[Iterable[str]] = None):
        super().__init__(message)
        self.fields: List[str] = list(fields or [])


class InvalidFilter(ValidationError):
    kind = "invalid_filter"

    def __init__(self, fields: Iterable[str]):
        fields = list(fields)
        super().__init__(f"Invalid filter values for: {', '.join(fields)}", fields)


class AuthenticationError(GaadiyaanError):
    kind = "unauthorized"
    status_code = 401


class PermissionDenied(GaadiyaanError):
    kind = "forbidden"
    status_code = 403


class NotFoundError(GaadiyaanError):
    kind = "not_found"
    status_code = 404


class ConflictError(GaadiyaanError):
    kind = "conflict"
    status_code = 409


class GenerationExhausted(GaadiyaanError):
    kind = "generation_exhausted"
    status_code = 503


class StorageError(GaadiyaanError):
    kind = "storage_error"
    status_code = 500
