"""Content types and request options."""

from dataclasses import dataclass
from enum import Enum
from typing import Union

DID_SCHEMA_JSONLD = "https://www.w3.org/ns/did/v1"


class ContentType(str, Enum):
    """Representations the resolver knows how to produce."""

    DID_JSON = "application/did+json"
    DID_JSON_LD = "application/did+ld+json"
    JSON_LD = "application/ld+json"
    DID_RESOLUTION = 'application/ld+json;profile="https://w3id.org/did-resolution"'
    JSON = "application/json"
    HTML = "text/html"
    ANY = "*/*"

    def __str__(self) -> str:
        return self.value


# A negotiated type is either one of ours or a resource's own media type
MediaType = Union[ContentType, str]


@dataclass(frozen=True)
class ResolutionOptions:
    """Options for resolving a DID."""

    accept: MediaType = ContentType.DID_JSON_LD


@dataclass(frozen=True)
class DereferencingOptions:
    """Options for dereferencing a DID URL."""

    accept: MediaType = ContentType.DID_JSON_LD

    def to_resolution_options(self) -> ResolutionOptions:
        """Reinterpret these options for a resolution call."""
        return ResolutionOptions(accept=self.accept)
