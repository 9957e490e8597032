"""Ledger gateway over the cheqd node REST API.

Endpoints used, relative to the REST base URL of a namespace:

    GET /cheqd/did/v2/{did}
    GET /cheqd/resource/v2/{collection_id}/resources/{resource_id}
    GET /cheqd/resource/v2/{collection_id}/metadata

The collection id of a DID is its unique id.
"""

import base64
import binascii
import logging
from typing import Any, Dict, List, Mapping, Optional

import aiohttp

from . import (
    LedgerDidDoc,
    LedgerDidDocMetadata,
    LedgerDidDocWithMetadata,
    LedgerDidService,
    LedgerResource,
    LedgerResourceMetadata,
    LedgerService,
    LedgerVerificationMethod,
    with_deadline,
)
from ..config import ResolverConfig
from ..decomposer import try_decompose
from ..errors import LedgerError

LOG = logging.getLogger(__name__)

DID_DOC_PATH = "/cheqd/did/v2/{did}"
RESOURCE_PATH = "/cheqd/resource/v2/{collection_id}/resources/{resource_id}"
COLLECTION_PATH = "/cheqd/resource/v2/{collection_id}/metadata"


def _optional(value: Any) -> Optional[str]:
    return value or None


def parse_verification_method(entry: Mapping[str, Any]) -> LedgerVerificationMethod:
    """Decode a verification method record."""
    return LedgerVerificationMethod(
        id=entry.get("id", ""),
        verification_method_type=entry.get("verification_method_type", ""),
        controller=entry.get("controller", ""),
        verification_material=entry.get("verification_material", ""),
    )


def parse_did_doc(entry: Mapping[str, Any]) -> LedgerDidDoc:
    """Decode a DID document record."""
    return LedgerDidDoc(
        id=entry.get("id", ""),
        context=list(entry.get("context") or []),
        controller=list(entry.get("controller") or []),
        verification_method=[
            parse_verification_method(vm)
            for vm in entry.get("verification_method") or []
        ],
        authentication=list(entry.get("authentication") or []),
        assertion_method=list(entry.get("assertion_method") or []),
        capability_invocation=list(entry.get("capability_invocation") or []),
        capability_delegation=list(entry.get("capability_delegation") or []),
        key_agreement=list(entry.get("key_agreement") or []),
        service=[
            LedgerDidService(
                id=service.get("id", ""),
                service_type=service.get("service_type", ""),
                service_endpoint=list(service.get("service_endpoint") or []),
            )
            for service in entry.get("service") or []
        ],
        also_known_as=list(entry.get("also_known_as") or []),
    )


def parse_did_doc_metadata(entry: Mapping[str, Any]) -> LedgerDidDocMetadata:
    """Decode DID document metadata."""
    return LedgerDidDocMetadata(
        created=_optional(entry.get("created")),
        updated=_optional(entry.get("updated")),
        deactivated=bool(entry.get("deactivated", False)),
        version_id=entry.get("version_id") or "",
        next_version_id=entry.get("next_version_id") or "",
        previous_version_id=entry.get("previous_version_id") or "",
    )


def parse_resource_metadata(entry: Mapping[str, Any]) -> LedgerResourceMetadata:
    """Decode resource metadata."""
    return LedgerResourceMetadata(
        collection_id=entry.get("collection_id", ""),
        id=entry.get("id", ""),
        name=entry.get("name", ""),
        resource_type=entry.get("resource_type", ""),
        media_type=entry.get("media_type", ""),
        checksum=entry.get("checksum") or "",
        created=_optional(entry.get("created")),
        version=entry.get("version") or "",
        next_version_id=entry.get("next_version_id") or "",
        previous_version_id=entry.get("previous_version_id") or "",
    )


def parse_resource(entry: Mapping[str, Any]) -> LedgerResource:
    """Decode a resource with its base64 payload."""
    try:
        data = base64.b64decode(entry.get("resource", {}).get("data") or "")
    except binascii.Error as err:
        raise LedgerError("Ledger returned an undecodable resource payload") from err
    return LedgerResource(
        metadata=parse_resource_metadata(entry.get("metadata") or {}), data=data
    )


class RestLedgerService(LedgerService):
    """Query the ledger through the REST API of its nodes."""

    def __init__(
        self,
        config: ResolverConfig,
        endpoints: Dict[str, str],
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """Initialize the REST ledger service.

        Args:
            config: resolver configuration; provides the query deadline
            endpoints: REST base URL per namespace
            session: HTTP session to use; a session is opened per query otherwise
        """
        self.timeout = config.ledger_timeout
        self.endpoints = {
            namespace: url.rstrip("/") for namespace, url in endpoints.items()
        }
        self.session = session

    def _base_url(self, did: str) -> Optional[str]:
        url = try_decompose(did)
        if not url:
            return None
        return self.endpoints.get(url.namespace)

    async def _get(self, url: str) -> Optional[dict]:
        """GET a JSON document, None on 404."""
        LOG.debug("Querying ledger: %s", url)
        if self.session:
            return await self._fetch(self.session, url)
        async with aiohttp.ClientSession() as session:
            return await self._fetch(session, url)

    async def _fetch(self, session: aiohttp.ClientSession, url: str) -> Optional[dict]:
        try:
            async with session.get(url) as resp:
                if resp.status == 404:
                    return None
                if resp.status != 200:
                    body = await resp.text()
                    raise LedgerError(
                        f"Ledger responded with error: code={resp.status} message={body}"
                    )
                return await resp.json(content_type=None)
        except aiohttp.ClientError as err:
            raise LedgerError(f"Failed to query ledger at {url}") from err
        except ValueError as err:
            raise LedgerError(f"Ledger returned invalid JSON from {url}") from err

    async def _query(self, did: str, path: str) -> Optional[dict]:
        base_url = self._base_url(did)
        if not base_url:
            return None
        return await with_deadline(self._get(base_url + path), self.timeout)

    async def query_did_doc(self, did: str) -> Optional[LedgerDidDocWithMetadata]:
        """Fetch a DID document with its metadata."""
        body = await self._query(did, DID_DOC_PATH.format(did=did))
        value = (body or {}).get("value")
        if not value or not value.get("did_doc"):
            return None
        return LedgerDidDocWithMetadata(
            did_doc=parse_did_doc(value["did_doc"]),
            metadata=parse_did_doc_metadata(value.get("metadata") or {}),
        )

    async def query_resource(
        self, did: str, resource_id: str
    ) -> Optional[LedgerResource]:
        """Fetch a resource from the collection of a DID."""
        collection_id = did.rsplit(":", 1)[-1]
        body = await self._query(
            did,
            RESOURCE_PATH.format(
                collection_id=collection_id, resource_id=resource_id.lower()
            ),
        )
        entry = (body or {}).get("resource")
        if not entry:
            return None
        return parse_resource(entry)

    async def query_collection_resources(
        self, did: str
    ) -> Optional[List[LedgerResourceMetadata]]:
        """Fetch the metadata of every resource in the collection of a DID."""
        collection_id = did.rsplit(":", 1)[-1]
        body = await self._query(
            did, COLLECTION_PATH.format(collection_id=collection_id)
        )
        if body is None:
            return None
        return [parse_resource_metadata(entry) for entry in body.get("resources") or []]
