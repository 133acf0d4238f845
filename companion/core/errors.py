# companion/core/errors.py
# -*- coding: utf-8 -*-
"""
Companion Server — Error taxonomy
---------------------------------
Every domain failure raised by the core components is a CompanionError.

Each subclass carries:
- `code`        : short machine-readable label sent to clients
- `status_code` : HTTP status used by the exception handler in main.py

Routers never build HTTP errors for these themselves; they let them
propagate and main.py turns them into JSON.
"""

from __future__ import annotations


class CompanionError(Exception):
    """Base class for all domain errors."""

    code: str = "error"
    status_code: int = 500

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.code)
        self.message = message or self.code


class UpstreamError(CompanionError):
    """Completion provider returned non-success, bad JSON, or timed out."""

    code = "upstream_error"
    status_code = 502


class ValidationError(CompanionError):
    """A required field is missing or malformed."""

    code = "validation_error"
    status_code = 400


class NotFound(CompanionError):
    code = "not_found"
    status_code = 404


class InsufficientFunds(CompanionError):
    code = "insufficient_funds"
    status_code = 409


class Forbidden(CompanionError):
    code = "forbidden"
    status_code = 403


class StorageError(CompanionError):
    """
    The datastore document could not be read or parsed.

    DocumentStore.read() recovers from this by returning an empty skeleton,
    so data in a corrupt document is lost on the next write.
    """

    code = "storage_error"
    status_code = 500
