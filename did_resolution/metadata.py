"""Resolution and dereferencing metadata."""

from dataclasses import dataclass, field
from typing import Optional, Union

from .decomposer import DidUrl, try_decompose
from .errors import ErrorCode
from .types import MediaType


@dataclass(frozen=True)
class DidProperties:
    """Components of the DID a result was produced for."""

    did_string: str = ""
    method_specific_id: str = ""
    method: str = ""

    @classmethod
    def from_did_url(cls, url: Optional[DidUrl]) -> "DidProperties":
        """Derive properties from a decomposed identifier, empty when absent."""
        if not url:
            return cls()
        return cls(did_string=url.did, method_specific_id=url.id, method=url.method)

    def serialize(self) -> dict:
        """Serialize to DID Resolution property names."""
        return {
            "didString": self.did_string,
            "methodSpecificId": self.method_specific_id,
            "method": self.method,
        }


@dataclass(frozen=True)
class ResolutionMetadata:
    """DID resolution metadata."""

    content_type: str
    resolution_error: str = ""
    did_properties: DidProperties = field(default_factory=DidProperties)

    def serialize(self) -> dict:
        """Serialize to DID Resolution property names."""
        ret = {"contentType": self.content_type}
        if self.resolution_error:
            ret["error"] = self.resolution_error
        if self.did_properties.did_string:
            ret["did"] = self.did_properties.serialize()
        return ret


@dataclass(frozen=True)
class DereferencingMetadata:
    """DID URL dereferencing metadata."""

    content_type: str
    dereferencing_error: str = ""
    did_properties: DidProperties = field(default_factory=DidProperties)

    @classmethod
    def from_resolution(cls, metadata: ResolutionMetadata) -> "DereferencingMetadata":
        """Carry resolution metadata over into a dereferencing result."""
        return cls(
            content_type=metadata.content_type,
            dereferencing_error=metadata.resolution_error,
            did_properties=metadata.did_properties,
        )

    def serialize(self) -> dict:
        """Serialize to DID Resolution property names."""
        ret = {"contentType": self.content_type}
        if self.dereferencing_error:
            ret["error"] = self.dereferencing_error
        if self.did_properties.did_string:
            ret["did"] = self.did_properties.serialize()
        return ret


def _properties(identifier: Union[str, DidUrl, None]) -> DidProperties:
    if isinstance(identifier, str):
        identifier = try_decompose(identifier)
    return DidProperties.from_did_url(identifier)


def new_resolution_metadata(
    identifier: Union[str, DidUrl, None],
    content_type: MediaType,
    error: Optional[ErrorCode] = None,
) -> ResolutionMetadata:
    """Build resolution metadata for an identifier."""
    return ResolutionMetadata(
        content_type=str(content_type),
        resolution_error=str(error) if error else "",
        did_properties=_properties(identifier),
    )


def new_dereferencing_metadata(
    identifier: Union[str, DidUrl, None],
    content_type: MediaType,
    error: Optional[ErrorCode] = None,
) -> DereferencingMetadata:
    """Build dereferencing metadata for an identifier."""
    return DereferencingMetadata(
        content_type=str(content_type),
        dereferencing_error=str(error) if error else "",
        did_properties=_properties(identifier),
    )
