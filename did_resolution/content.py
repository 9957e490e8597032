"""Dereferenced content.

Each kind of dereferencing target has its own representation. The flow that
finds a target wraps it in the matching class and serializes it for the
negotiated content type.
"""

import base64
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, List

from pydid import DIDDocument, VerificationMethod
from pydid.service import Service

from .document import ResourceMetadata, serialize
from .errors import ResourceSerializationError
from .negotiation import is_json_ld, shape_resource
from .types import DID_SCHEMA_JSONLD, MediaType


def is_json_media_type(media_type: str) -> bool:
    """Whether a media type denotes JSON content."""
    media_type = media_type.split(";")[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


class Content(ABC):
    """A dereferencing target."""

    @abstractmethod
    def serialize(self, content_type: MediaType) -> Any:
        """Represent the target as a JSON value for the given content type."""


@dataclass
class DocumentContent(Content):
    """A whole DID document."""

    document: DIDDocument

    def serialize(self, content_type: MediaType) -> Any:
        """Serialize the document; its context was shaped during resolution."""
        return serialize(self.document)


@dataclass
class VerificationMethodContent(Content):
    """A verification method selected by fragment."""

    verification_method: VerificationMethod

    def serialize(self, content_type: MediaType) -> Any:
        """Serialize the verification method with a matching context."""
        return shape_resource(self.verification_method, content_type)


@dataclass
class ServiceContent(Content):
    """A service selected by fragment."""

    service: Service

    def serialize(self, content_type: MediaType) -> Any:
        """Serialize the service with a matching context."""
        return shape_resource(self.service, content_type)


@dataclass
class ResourceContent(Content):
    """The payload of a ledger resource."""

    data: bytes
    media_type: str

    def serialize(self, content_type: MediaType) -> Any:
        """Embed the payload in a JSON envelope.

        JSON payloads are embedded as JSON, text as a string and anything else
        as base64.

        Raises:
            ResourceSerializationError: if a JSON typed payload is not JSON
        """
        if is_json_media_type(self.media_type):
            try:
                return json.loads(self.data)
            except ValueError as err:
                raise ResourceSerializationError(
                    f"Resource declared as {self.media_type} is not valid JSON"
                ) from err
        if self.media_type.startswith("text/"):
            try:
                return self.data.decode("utf-8")
            except UnicodeDecodeError as err:
                raise ResourceSerializationError(
                    "Text resource is not valid UTF-8"
                ) from err
        return base64.b64encode(self.data).decode()


@dataclass
class ResourceListContent(Content):
    """Metadata of one or more resources linked to a DID."""

    resources: List[ResourceMetadata] = field(default_factory=list)

    def serialize(self, content_type: MediaType) -> Any:
        """Serialize as a linked resource metadata list."""
        ret = {}
        if is_json_ld(content_type):
            ret["@context"] = [DID_SCHEMA_JSONLD]
        ret["linkedResourceMetadata"] = [
            resource.serialize() for resource in self.resources
        ]
        return ret
