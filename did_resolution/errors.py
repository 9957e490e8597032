"""Error taxonomy for DID resolution and dereferencing.

Two kinds of failure exist. DID Resolution errors (``ErrorCode``) are returned as
values inside resolution or dereferencing metadata; the request still produces
a well-formed envelope. Everything else derives from ``ResolverError`` and is
raised.
"""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes defined by DID Core and DID Resolution."""

    INVALID_DID = "invalidDid"
    INVALID_DID_URL = "invalidDidUrl"
    NOT_FOUND = "notFound"
    METHOD_NOT_SUPPORTED = "methodNotSupported"
    REPRESENTATION_NOT_SUPPORTED = "representationNotSupported"
    NOT_SUPPORTED = "notSupported"
    INTERNAL_ERROR = "internalError"

    def __str__(self) -> str:
        return self.value


STATUS_BY_CODE = {
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.INVALID_DID: 400,
    ErrorCode.INVALID_DID_URL: 400,
    ErrorCode.REPRESENTATION_NOT_SUPPORTED: 406,
    ErrorCode.METHOD_NOT_SUPPORTED: 501,
}

DEFAULT_MESSAGES = {
    ErrorCode.INVALID_DID: "The DID is not valid",
    ErrorCode.INVALID_DID_URL: "The DID URL is not valid",
    ErrorCode.NOT_FOUND: "The DID or DID URL was not found",
    ErrorCode.METHOD_NOT_SUPPORTED: "The DID method is not supported",
    ErrorCode.REPRESENTATION_NOT_SUPPORTED: "The requested representation is not supported",
    ErrorCode.NOT_SUPPORTED: "The requested feature is not supported",
    ErrorCode.INTERNAL_ERROR: "An internal error occurred",
}


@dataclass(frozen=True)
class IdentityError:
    """A DID Resolution error, carried to the transport for status mapping."""

    code: ErrorCode
    message: str = ""
    is_dereferencing: bool = False

    @classmethod
    def from_code(cls, code: str, is_dereferencing: bool = False) -> "IdentityError":
        """Build an error with the default message for a code."""
        code = ErrorCode(code)
        return cls(code, DEFAULT_MESSAGES[code], is_dereferencing)

    @property
    def status(self) -> int:
        """HTTP status for this error."""
        return STATUS_BY_CODE.get(self.code, 500)


class ResolverError(Exception):
    """Represents a hard failure during resolution or dereferencing."""


class InvalidDidUrl(ValueError):
    """Raised when an identifier cannot be split into DID URL components."""


class LedgerError(ResolverError):
    """Raised when the ledger cannot answer a query."""


class LedgerTimeout(LedgerError):
    """Raised when a ledger query exceeds its deadline."""


class UnsupportedContentType(ResolverError):
    """Raised when the engine is asked for a representation it cannot shape."""


class MalformedDocument(ResolverError):
    """Raised when a ledger record is not a valid DID document."""


class MalformedVerificationMaterial(MalformedDocument):
    """Raised when ledger key material cannot be deserialized."""


class ResourceSerializationError(ResolverError):
    """Raised when a dereferenced resource cannot be represented."""
