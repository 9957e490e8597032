"""DID URL dereferencing.

Implements https://w3c-ccg.github.io/did-resolution/#dereferencing. Paths are
dereferenced against ledger resources (primary dereferencing); fragments, or
the absence of any path, select parts of the resolved document (secondary
dereferencing). Query dereferencing is not supported.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from pydid import DIDDocument, DIDUrl, VerificationMethod
from pydid.doc.doc import IDNotFoundError
from pydid.service import Service

from .config import ResolverConfig
from .content import (
    Content,
    DocumentContent,
    ResourceContent,
    ResourceListContent,
    ServiceContent,
    VerificationMethodContent,
)
from .decomposer import (
    DidUrl,
    is_valid_did,
    is_valid_did_url,
    parse_resource_path,
    try_decompose,
)
from .document import DidDocumentMetadata, ResourceMetadata
from .errors import ErrorCode
from .ledger import LedgerService
from .metadata import DereferencingMetadata, new_dereferencing_metadata
from .negotiation import effective_content_type, is_document_type
from .resolver import ResolutionService
from .types import ContentType, DereferencingOptions, MediaType

LOG = logging.getLogger(__name__)


def is_resource_representation(
    content_type: MediaType, media_type: Optional[str] = None
) -> bool:
    """Whether ledger resources can be represented in this type.

    Resources come in DID document types or their own media type. Plain
    ``application/json`` envelopes are not offered for them.
    """
    if media_type and content_type == media_type:
        return True
    return is_document_type(content_type) and content_type != ContentType.JSON


@dataclass
class DidDereferencing:
    """Result of dereferencing a DID URL.

    ``content`` is the dereferenced target and ``content_stream`` its serialized
    form. Both are None when ``dereferencing_metadata`` carries an error.
    """

    dereferencing_metadata: DereferencingMetadata
    content: Optional[Content] = None
    content_stream: Any = None
    content_metadata: Union[DidDocumentMetadata, ResourceMetadata, None] = None

    @property
    def error(self) -> str:
        """The dereferencing error, empty on success."""
        return self.dereferencing_metadata.dereferencing_error


class DereferencingService:
    """Dereference DID URLs against the ledger."""

    def __init__(
        self,
        config: ResolverConfig,
        ledger: LedgerService,
        resolution: Optional[ResolutionService] = None,
    ):
        """Initialize the dereferencing service."""
        self.config = config
        self.ledger = ledger
        self.resolution = resolution or ResolutionService(config, ledger)

    async def dereference(
        self, did_url: str, options: Optional[DereferencingOptions] = None
    ) -> DidDereferencing:
        """Dereference a DID URL.

        Failures defined by DID Resolution are reported in the dereferencing
        metadata.

        Raises:
            LedgerError: if the ledger cannot be queried
            MalformedDocument: if the ledger holds a broken document or broken
                key material
            ResourceSerializationError: if a resource cannot be represented
        """
        options = options or DereferencingOptions()

        url = try_decompose(did_url)
        if not url or not is_valid_did_url(did_url):
            return self._error(url, options.accept, ErrorCode.INVALID_DID_URL)

        LOG.debug(
            "did: %s, path: %s, query: %s, fragment: %s",
            url.did,
            url.path,
            url.query,
            url.fragment,
        )

        # TODO: dereference service and relativeRef query parameters
        if url.query:
            return self._error(url, options.accept, ErrorCode.NOT_SUPPORTED)

        if url.path:
            return await self._dereference_primary(url, options)
        return await self._dereference_secondary(url, options)

    async def _dereference_primary(
        self, url: DidUrl, options: DereferencingOptions
    ) -> DidDereferencing:
        """Dereference a resource path.

        Any DID outside this resolver's method, namespaces or id syntax has no
        resource collection here and reports ``notFound``.
        """
        resource_path = parse_resource_path(url.path)
        if not resource_path:
            LOG.debug("Unsupported path %s", url.path)
            return self._error(url, options.accept, ErrorCode.NOT_SUPPORTED)

        if not is_valid_did(url.did, self.config.method, self.config.namespaces):
            return self._error(url, options.accept, ErrorCode.NOT_FOUND)

        if resource_path.resource_id is None:
            collection = await self.ledger.query_collection_resources(url.did)
            if collection is None:
                return self._error(url, options.accept, ErrorCode.NOT_FOUND)
            return self._resource_list(
                url,
                options,
                [ResourceMetadata.from_ledger(url.did, entry) for entry in collection],
            )

        resource = await self.ledger.query_resource(url.did, resource_path.resource_id)
        if not resource:
            LOG.debug("Resource %s not found", resource_path.resource_id)
            return self._error(url, options.accept, ErrorCode.NOT_FOUND)

        metadata = ResourceMetadata.from_ledger(url.did, resource.metadata)
        if resource_path.metadata:
            return self._resource_list(url, options, [metadata])

        content_type = effective_content_type(options.accept, metadata.media_type)
        if not is_resource_representation(content_type, metadata.media_type):
            return self._error(
                url, content_type, ErrorCode.REPRESENTATION_NOT_SUPPORTED
            )

        content = ResourceContent(resource.data, metadata.media_type)
        return DidDereferencing(
            new_dereferencing_metadata(url, content_type),
            content,
            content.serialize(content_type),
            metadata,
        )

    def _resource_list(self, url: DidUrl, options: DereferencingOptions, resources):
        content_type = effective_content_type(options.accept)
        if not is_resource_representation(content_type):
            return self._error(
                url, content_type, ErrorCode.REPRESENTATION_NOT_SUPPORTED
            )
        content = ResourceListContent(resources)
        return DidDereferencing(
            new_dereferencing_metadata(url, content_type),
            content,
            content.serialize(content_type),
        )

    async def _dereference_secondary(
        self, url: DidUrl, options: DereferencingOptions
    ) -> DidDereferencing:
        content_type = effective_content_type(options.accept)
        if not is_document_type(content_type):
            return self._error(
                url, content_type, ErrorCode.REPRESENTATION_NOT_SUPPORTED
            )

        resolution = await self.resolution.resolve(
            url.did, options.to_resolution_options()
        )
        dereferencing_metadata = DereferencingMetadata.from_resolution(
            resolution.resolution_metadata
        )
        if dereferencing_metadata.dereferencing_error:
            return DidDereferencing(dereferencing_metadata)

        if url.fragment:
            content = self._find_fragment(resolution.document, url)
            if not content:
                LOG.debug("Fragment %s not found in %s", url.fragment, url.did)
                return self._error(url, content_type, ErrorCode.NOT_FOUND)
        else:
            content = DocumentContent(resolution.document)

        return DidDereferencing(
            dereferencing_metadata,
            content,
            content.serialize(content_type),
            resolution.metadata,
        )

    @staticmethod
    def _find_fragment(document: DIDDocument, url: DidUrl) -> Optional[Content]:
        """Find the verification method or service a fragment names.

        Ids are unique within a document, so at most one of the two matches.
        """
        reference = DIDUrl.parse(f"{url.did}#{url.fragment}")
        try:
            resource = document.dereference(reference)
        except IDNotFoundError:
            return None
        if isinstance(resource, VerificationMethod):
            return VerificationMethodContent(resource)
        if isinstance(resource, Service):
            return ServiceContent(resource)
        return None

    @staticmethod
    def _error(
        url: Optional[DidUrl], accept: MediaType, code: ErrorCode
    ) -> DidDereferencing:
        return DidDereferencing(
            new_dereferencing_metadata(url, effective_content_type(accept), code)
        )
