"""Exception types and the export failure policy.

Convention:
- ``ExportError`` carries a structured ``ExportFailure``. Whether a failure
  can be absorbed is decided by ``is_recoverable`` alone, never by the type
  of the transport exception that caused it.
- Every other ``MirrorError`` subclass is fatal for the whole pass and is
  propagated to the command-line driver.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class MirrorError(Exception):
    """Base class for all gdoc-mirror errors."""


class ConfigError(MirrorError):
    """Client settings or credentials files are missing or unusable."""


class EligibilityMismatchError(MirrorError):
    """A catalog entry lacks a field required to judge its eligibility."""


class TransportError(MirrorError):
    """The catalog could not be reached or returned an unusable response."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class AuthError(TransportError):
    """Token acquisition or refresh failed."""


class ListingTruncatedError(TransportError):
    """The catalog listing has more pages than a single request returns."""


class StoreError(MirrorError):
    """The ledger or an output file could not be read or written."""


class ExportFailureKind(str, Enum):
    """Category of a failed export request."""

    SIZE_LIMIT_EXCEEDED = "size_limit_exceeded"
    OTHER = "other"


@dataclass(frozen=True)
class ExportFailure:
    """Structured description of a failed export."""

    kind: ExportFailureKind
    details: str = ""
    status_code: int | None = None

    @classmethod
    def size_limit(cls, details: str = "", status_code: int | None = None) -> "ExportFailure":
        return cls(ExportFailureKind.SIZE_LIMIT_EXCEEDED, details, status_code)

    @classmethod
    def other(cls, details: str = "", status_code: int | None = None) -> "ExportFailure":
        return cls(ExportFailureKind.OTHER, details, status_code)


class ExportError(MirrorError):
    """The catalog refused or failed to export a document."""

    def __init__(self, failure: ExportFailure):
        message = failure.details or failure.kind.value
        if failure.status_code is not None:
            message = f"HTTP {failure.status_code}: {message}"
        super().__init__(message)
        self.failure = failure


def is_recoverable(failure: ExportFailure) -> bool:
    """Return True if the pass may continue after this export failure.

    Only a size-limit refusal is recoverable: the document is recorded as
    too large and never retried until its version token changes.
    """
    return failure.kind is ExportFailureKind.SIZE_LIMIT_EXCEEDED
