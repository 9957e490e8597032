"""DID resolution.

Implements https://w3c-ccg.github.io/did-resolution/#resolving for DIDs of the
configured method.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from pydid import DIDDocument

from .config import ResolverConfig
from .decomposer import is_valid_did, try_decompose
from .document import DidDocumentMetadata, ResourceMetadata, document_from_ledger
from .errors import ErrorCode
from .ledger import LedgerService
from .metadata import ResolutionMetadata, new_resolution_metadata
from .negotiation import effective_content_type, shape_context
from .types import ResolutionOptions

LOG = logging.getLogger(__name__)


@dataclass
class DidResolution:
    """Result of resolving a DID.

    When ``resolution_metadata`` carries an error, document and metadata are None.
    """

    document: Optional[DIDDocument]
    metadata: Optional[DidDocumentMetadata]
    resolution_metadata: ResolutionMetadata

    @property
    def error(self) -> str:
        """The resolution error, empty on success."""
        return self.resolution_metadata.resolution_error


class ResolutionService:
    """Resolve DIDs against the ledger."""

    def __init__(self, config: ResolverConfig, ledger: LedgerService):
        """Initialize the resolution service."""
        self.config = config
        self.ledger = ledger

    async def resolve(
        self, did: str, options: Optional[ResolutionOptions] = None
    ) -> DidResolution:
        """Resolve a DID to its document.

        Failures defined by DID Resolution are reported in the resolution metadata.

        Raises:
            LedgerError: if the ledger cannot be queried
            UnsupportedContentType: if the options ask for a representation
                documents cannot take
            MalformedDocument: if the ledger holds a broken document or broken
                key material
        """
        options = options or ResolutionOptions()
        content_type = effective_content_type(options.accept)

        url = try_decompose(did)
        if not url or url.method != self.config.method:
            LOG.debug("Method of %s is not supported", did)
            return self._error(url, content_type, ErrorCode.METHOD_NOT_SUPPORTED)

        if not is_valid_did(did, self.config.method, self.config.namespaces):
            LOG.debug("Invalid DID %s", did)
            return self._error(url, content_type, ErrorCode.INVALID_DID)

        result = await self.ledger.query_did_doc(did)
        if not result:
            LOG.debug("DID %s not found", did)
            return self._error(url, content_type, ErrorCode.NOT_FOUND)

        document = shape_context(document_from_ledger(result.did_doc), content_type)

        resources = await self.ledger.query_collection_resources(did) or []
        metadata = DidDocumentMetadata.from_ledger(
            result.metadata,
            [ResourceMetadata.from_ledger(did, resource) for resource in resources],
        )

        return DidResolution(
            document, metadata, new_resolution_metadata(url, content_type)
        )

    @staticmethod
    def _error(identifier, content_type, code: ErrorCode) -> DidResolution:
        return DidResolution(
            None, None, new_resolution_metadata(identifier, content_type, code)
        )
