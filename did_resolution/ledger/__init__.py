"""Ledger gateway interface.

The records below mirror what the ledger stores. They are converted into the
resolver's document model by ``did_resolution.document``.
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Awaitable, List, Optional, TypeVar

from ..errors import LedgerTimeout

T = TypeVar("T")


@dataclass
class LedgerVerificationMethod:
    """Verification method as stored on the ledger.

    ``verification_material`` is a JSON object holding either ``publicKeyJwk``
    or ``publicKeyMultibase``.
    """

    id: str
    verification_method_type: str
    controller: str
    verification_material: str


@dataclass
class LedgerDidService:
    """Service entry as stored on the ledger."""

    id: str
    service_type: str
    service_endpoint: List[str] = field(default_factory=list)


@dataclass
class LedgerDidDoc:
    """DID document as stored on the ledger."""

    id: str
    context: List[str] = field(default_factory=list)
    controller: List[str] = field(default_factory=list)
    verification_method: List[LedgerVerificationMethod] = field(default_factory=list)
    authentication: List[str] = field(default_factory=list)
    assertion_method: List[str] = field(default_factory=list)
    capability_invocation: List[str] = field(default_factory=list)
    capability_delegation: List[str] = field(default_factory=list)
    key_agreement: List[str] = field(default_factory=list)
    service: List[LedgerDidService] = field(default_factory=list)
    also_known_as: List[str] = field(default_factory=list)


@dataclass
class LedgerDidDocMetadata:
    """Versioning metadata stored alongside a DID document."""

    created: Optional[str] = None
    updated: Optional[str] = None
    deactivated: bool = False
    version_id: str = ""
    next_version_id: str = ""
    previous_version_id: str = ""


@dataclass
class LedgerDidDocWithMetadata:
    """A DID document and its metadata."""

    did_doc: LedgerDidDoc
    metadata: LedgerDidDocMetadata


@dataclass
class LedgerResourceMetadata:
    """Metadata of a resource anchored in a DID's collection."""

    collection_id: str
    id: str
    name: str
    resource_type: str
    media_type: str
    checksum: str = ""
    created: Optional[str] = None
    version: str = ""
    next_version_id: str = ""
    previous_version_id: str = ""


@dataclass
class LedgerResource:
    """A resource and its metadata."""

    metadata: LedgerResourceMetadata
    data: bytes


class LedgerService(ABC):
    """Ledger gateway interface.

    Every query returns None when the ledger has no matching entry and raises
    ``LedgerError`` (or ``LedgerTimeout``) when the ledger cannot be queried.
    """

    @abstractmethod
    async def query_did_doc(self, did: str) -> Optional[LedgerDidDocWithMetadata]:
        """Fetch a DID document with its metadata."""

    @abstractmethod
    async def query_resource(
        self, did: str, resource_id: str
    ) -> Optional[LedgerResource]:
        """Fetch a resource from the collection of a DID."""

    @abstractmethod
    async def query_collection_resources(
        self, did: str
    ) -> Optional[List[LedgerResourceMetadata]]:
        """Fetch the metadata of every resource in the collection of a DID."""


async def with_deadline(awaitable: Awaitable[T], timeout: Optional[float]) -> T:
    """Await a ledger call, converting deadline expiry into ``LedgerTimeout``."""
    try:
        return await asyncio.wait_for(awaitable, timeout)
    except asyncio.TimeoutError as err:
        raise LedgerTimeout(f"Ledger query exceeded {timeout}s deadline") from err


__all__ = [
    "LedgerDidDoc",
    "LedgerDidDocMetadata",
    "LedgerDidDocWithMetadata",
    "LedgerDidService",
    "LedgerResource",
    "LedgerResourceMetadata",
    "LedgerService",
    "LedgerVerificationMethod",
    "with_deadline",
]
