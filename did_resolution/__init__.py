"""DID Resolution."""

from did_resolution.config import ResolverConfig, Settings
from did_resolution.dereferencer import DereferencingService, DidDereferencing
from did_resolution.errors import ErrorCode, IdentityError, ResolverError
from did_resolution.ledger import LedgerService
from did_resolution.request import RequestService, ResolverResponse
from did_resolution.resolver import DidResolution, ResolutionService
from did_resolution.types import ContentType, DereferencingOptions, ResolutionOptions


__all__ = [
    "ContentType",
    "DereferencingOptions",
    "DereferencingService",
    "DidDereferencing",
    "DidResolution",
    "ErrorCode",
    "IdentityError",
    "LedgerService",
    "RequestService",
    "ResolutionOptions",
    "ResolutionService",
    "ResolverConfig",
    "ResolverError",
    "ResolverResponse",
    "Settings",
]
