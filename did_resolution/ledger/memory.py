"""In memory ledger."""

from typing import Dict, List, Optional

from . import (
    LedgerDidDocWithMetadata,
    LedgerResource,
    LedgerResourceMetadata,
    LedgerService,
)


class InMemoryLedgerService(LedgerService):
    """Ledger backed by dictionaries, keyed by DID."""

    def __init__(
        self,
        did_docs: Optional[Dict[str, LedgerDidDocWithMetadata]] = None,
        resources: Optional[Dict[str, List[LedgerResource]]] = None,
    ):
        """Initialize the InMemoryLedgerService."""
        self.did_docs = did_docs or {}
        self.resources = resources or {}

    async def query_did_doc(self, did: str) -> Optional[LedgerDidDocWithMetadata]:
        """Get a DID document by its DID."""
        return self.did_docs.get(did)

    async def query_resource(
        self, did: str, resource_id: str
    ) -> Optional[LedgerResource]:
        """Get a resource from the collection of a DID."""
        resource_id = resource_id.lower()
        for resource in self.resources.get(did, []):
            if resource.metadata.id.lower() == resource_id:
                return resource
        return None

    async def query_collection_resources(
        self, did: str
    ) -> Optional[List[LedgerResourceMetadata]]:
        """List the metadata of the resources in the collection of a DID."""
        if did not in self.did_docs:
            return None
        return [resource.metadata for resource in self.resources.get(did, [])]

    def add_did_doc(self, doc: LedgerDidDocWithMetadata) -> None:
        """Add a DID document to the ledger."""
        self.did_docs[doc.did_doc.id] = doc

    def add_resource(self, did: str, resource: LedgerResource) -> None:
        """Add a resource to the collection of a DID."""
        self.resources.setdefault(did, []).append(resource)
