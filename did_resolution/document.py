"""DID document model.

Documents are built from ledger records as ``pydid`` documents. Key material on
the ledger must deserialize; a verification method whose material is malformed
aborts document construction.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from pydid import DIDDocument, Resource

from . import multibase
from .errors import MalformedDocument, MalformedVerificationMaterial
from .ledger import (
    LedgerDidDoc,
    LedgerDidDocMetadata,
    LedgerDidService,
    LedgerResourceMetadata,
    LedgerVerificationMethod,
)


def _compact(values: Dict[str, Any]) -> Dict[str, Any]:
    """Drop unset and empty properties."""
    return {
        key: value
        for key, value in values.items()
        if value not in (None, "", [], {}, False)
    }


def verification_material(vm: LedgerVerificationMethod) -> Dict[str, Any]:
    """Parse and check the key material of a ledger verification method.

    Raises:
        MalformedVerificationMaterial: if the key material does not
            deserialize to exactly one of publicKeyJwk or publicKeyMultibase
    """
    try:
        material = json.loads(vm.verification_material)
    except (TypeError, ValueError) as err:
        raise MalformedVerificationMaterial(
            f"Invalid verification material for {vm.id}"
        ) from err

    if not isinstance(material, dict):
        raise MalformedVerificationMaterial(
            f"Verification material for {vm.id} is not an object"
        )

    jwk = material.get("publicKeyJwk")
    key = material.get("publicKeyMultibase")
    if bool(jwk) == bool(key):
        raise MalformedVerificationMaterial(
            "Exactly one of publicKeyJwk or publicKeyMultibase must be given "
            f"for {vm.id}"
        )

    if jwk:
        if not isinstance(jwk, dict):
            raise MalformedVerificationMaterial(f"Invalid publicKeyJwk for {vm.id}")
        return {"publicKeyJwk": jwk}

    if not isinstance(key, str):
        raise MalformedVerificationMaterial(f"Invalid publicKeyMultibase for {vm.id}")
    try:
        multibase.decode(key)
    except ValueError as err:
        raise MalformedVerificationMaterial(
            f"Invalid publicKeyMultibase for {vm.id}: {err}"
        ) from err
    return {"publicKeyMultibase": key}


def _verification_method(vm: LedgerVerificationMethod) -> Dict[str, Any]:
    return {
        "id": vm.id,
        "type": vm.verification_method_type,
        "controller": vm.controller,
        **verification_material(vm),
    }


def _service(service: LedgerDidService) -> Dict[str, Any]:
    return {
        "id": service.id,
        "type": service.service_type,
        "serviceEndpoint": list(service.service_endpoint),
    }


def document_from_ledger(doc: LedgerDidDoc) -> DIDDocument:
    """Build a DID document from its ledger record.

    The ledger context is carried over; content negotiation adjusts it.

    Raises:
        MalformedVerificationMaterial: if the ledger holds broken key material
        MalformedDocument: if the record is not a valid DID document
    """
    value = _compact(
        {
            "id": doc.id,
            "controller": list(doc.controller),
            "verificationMethod": [
                _verification_method(vm) for vm in doc.verification_method
            ],
            "authentication": list(doc.authentication),
            "assertionMethod": list(doc.assertion_method),
            "capabilityInvocation": list(doc.capability_invocation),
            "capabilityDelegation": list(doc.capability_delegation),
            "keyAgreement": list(doc.key_agreement),
            "service": [_service(service) for service in doc.service],
            "alsoKnownAs": list(doc.also_known_as),
        }
    )
    value["@context"] = list(dict.fromkeys(doc.context))
    try:
        return DIDDocument.deserialize(value)
    except ValueError as err:
        raise MalformedDocument(f"Invalid DID document for {doc.id}") from err


def serialize(resource: Union[DIDDocument, Resource]) -> Dict[str, Any]:
    """Serialize a document or document fragment with DID Core property names.

    An empty ``@context`` is left out.
    """
    value = resource.model_dump(
        mode="json", by_alias=True, exclude_none=True, serialize_as_any=True
    )
    if not value.get("@context"):
        value.pop("@context", None)
    return value


@dataclass
class ResourceMetadata:
    """Metadata describing a resource linked to a DID."""

    resource_uri: str
    collection_id: str
    id: str
    name: str
    type: str
    media_type: str
    checksum: str = ""
    created: Optional[str] = None
    version: str = ""
    next_version_id: str = ""
    previous_version_id: str = ""

    @classmethod
    def from_ledger(cls, did: str, metadata: LedgerResourceMetadata) -> "ResourceMetadata":
        """Build resource metadata from its ledger record."""
        return cls(
            resource_uri=f"{did}/resources/{metadata.id}",
            collection_id=metadata.collection_id,
            id=metadata.id,
            name=metadata.name,
            type=metadata.resource_type,
            media_type=metadata.media_type,
            checksum=metadata.checksum,
            created=metadata.created,
            version=metadata.version,
            next_version_id=metadata.next_version_id,
            previous_version_id=metadata.previous_version_id,
        )

    def serialize(self) -> dict:
        """Serialize with DID Resolution property names."""
        return _compact(
            {
                "resourceURI": self.resource_uri,
                "resourceCollectionId": self.collection_id,
                "resourceId": self.id,
                "resourceName": self.name,
                "resourceType": self.type,
                "resourceVersion": self.version,
                "mediaType": self.media_type,
                "created": self.created,
                "checksum": self.checksum,
                "previousVersionId": self.previous_version_id,
                "nextVersionId": self.next_version_id,
            }
        )


@dataclass
class DidDocumentMetadata:
    """Metadata describing a DID document."""

    created: Optional[str] = None
    updated: Optional[str] = None
    deactivated: bool = False
    version_id: str = ""
    next_version_id: str = ""
    previous_version_id: str = ""
    linked_resource_metadata: List[ResourceMetadata] = field(default_factory=list)

    @classmethod
    def from_ledger(
        cls,
        metadata: LedgerDidDocMetadata,
        resources: Optional[List[ResourceMetadata]] = None,
    ) -> "DidDocumentMetadata":
        """Build document metadata from its ledger record."""
        return cls(
            created=metadata.created,
            updated=metadata.updated,
            deactivated=metadata.deactivated,
            version_id=metadata.version_id,
            next_version_id=metadata.next_version_id,
            previous_version_id=metadata.previous_version_id,
            linked_resource_metadata=list(resources or []),
        )

    def serialize(self) -> dict:
        """Serialize with DID Resolution property names."""
        return _compact(
            {
                "created": self.created,
                "updated": self.updated,
                "deactivated": self.deactivated,
                "versionId": self.version_id,
                "nextVersionId": self.next_version_id,
                "previousVersionId": self.previous_version_id,
                "linkedResourceMetadata": [
                    resource.serialize() for resource in self.linked_resource_metadata
                ],
            }
        )
