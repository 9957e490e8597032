"""Request processing.

Turns an identifier and an Accept header into a response body and status,
routing DIDs to resolution and DID URLs to dereferencing.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from .config import ResolverConfig
from .content import ResourceContent
from .decomposer import is_did_url
from .dereferencer import DereferencingService
from .envelope import (
    dereferencing_envelope,
    error_envelope,
    html_page,
    resolution_envelope,
    to_json,
)
from .errors import ErrorCode, IdentityError, ResolverError
from .ledger import LedgerService
from .negotiation import (
    DEFAULT_CONTENT_TYPE,
    effective_content_type,
    is_document_type,
    negotiate_accept,
)
from .resolver import ResolutionService
from .types import ContentType, DereferencingOptions, MediaType, ResolutionOptions

LOG = logging.getLogger(__name__)


@dataclass
class ResolverResponse:
    """A response ready for the transport."""

    body: Union[str, bytes]
    status: int
    content_type: str


class RequestService:
    """Entrypoint for resolution and dereferencing requests."""

    def __init__(self, config: ResolverConfig, ledger: LedgerService):
        """Initialize the request service."""
        self.config = config
        self.resolution = ResolutionService(config, ledger)
        self.dereferencing = DereferencingService(config, ledger, self.resolution)

    async def process(
        self, identifier: str, accept: Optional[str] = None
    ) -> ResolverResponse:
        """Resolve or dereference an identifier.

        Identifiers that decompose with a path, query or fragment are
        dereferenced. Everything else, including identifiers that do not
        decompose at all, is resolved.
        """
        dereferencing = is_did_url(identifier)
        requested = negotiate_accept(accept)

        if requested is None or not (
            dereferencing or is_document_type(effective_content_type(requested))
        ):
            LOG.debug("Cannot satisfy Accept: %s", accept)
            return self._error(
                identifier,
                DEFAULT_CONTENT_TYPE,
                IdentityError.from_code(
                    ErrorCode.REPRESENTATION_NOT_SUPPORTED, dereferencing
                ),
            )

        try:
            if dereferencing:
                LOG.info("Dereferencing %s", identifier)
                result = await self.dereferencing.dereference(
                    identifier, DereferencingOptions(accept=requested)
                )
                content_type = result.dereferencing_metadata.content_type
                if (
                    not result.error
                    and isinstance(result.content, ResourceContent)
                    and content_type == result.content.media_type
                ):
                    return ResolverResponse(result.content.data, 200, content_type)
                envelope = dereferencing_envelope(result)
            else:
                LOG.info("Resolving %s", identifier)
                result = await self.resolution.resolve(
                    identifier, ResolutionOptions(accept=requested)
                )
                content_type = result.resolution_metadata.content_type
                envelope = resolution_envelope(result)
        except ResolverError:
            LOG.exception("Failed to process %s", identifier)
            return self._error(
                identifier,
                effective_content_type(requested),
                IdentityError.from_code(ErrorCode.INTERNAL_ERROR, dereferencing),
            )

        status = 200
        if result.error:
            status = IdentityError.from_code(result.error, dereferencing).status
        return self._respond(envelope, status, content_type)

    def _error(
        self, identifier: str, content_type: MediaType, error: IdentityError
    ) -> ResolverResponse:
        envelope = error_envelope(identifier, content_type, error)
        return self._respond(envelope, error.status, content_type)

    @staticmethod
    def _respond(
        envelope: dict, status: int, content_type: MediaType
    ) -> ResolverResponse:
        body = to_json(envelope)
        if content_type == ContentType.HTML:
            return ResolverResponse(html_page(body), status, ContentType.HTML.value)
        if not is_document_type(content_type):
            content_type = ContentType.JSON
        return ResolverResponse(body, status, str(content_type))
