"""Content negotiation.

Decides which representation a request gets and shapes the JSON-LD context of
documents and document fragments to match it.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from pydid import DIDDocument, Resource

from .document import serialize
from .errors import UnsupportedContentType
from .types import DID_SCHEMA_JSONLD, ContentType, MediaType

DEFAULT_CONTENT_TYPE = ContentType.DID_JSON_LD

PLAIN_JSON_TYPES = (ContentType.DID_JSON, ContentType.JSON, ContentType.HTML)


def _as_content_type(value: MediaType) -> Union[ContentType, str]:
    try:
        return ContentType(value)
    except ValueError:
        return value


def is_json_ld(content_type: MediaType) -> bool:
    """Whether a type belongs to the JSON-LD family."""
    return str(content_type) == ContentType.DID_JSON_LD.value or (
        ContentType.JSON_LD.value in str(content_type)
    )


def is_document_type(content_type: MediaType) -> bool:
    """Whether documents can be represented in this type."""
    return is_json_ld(content_type) or _as_content_type(content_type) in PLAIN_JSON_TYPES


def _parse_accept(header: str) -> List[Tuple[float, str]]:
    entries = []
    for entry in header.split(","):
        media_type, *params = [part.strip() for part in entry.split(";")]
        if not media_type:
            continue
        quality = 1.0
        kept = []
        for param in params:
            name, _, value = param.partition("=")
            if name.strip().lower() == "q":
                try:
                    quality = float(value)
                except ValueError:
                    quality = 0.0
            elif param:
                kept.append(param)
        if quality <= 0:
            continue
        entries.append((quality, ";".join([media_type.lower(), *kept])))
    # stable: equal qualities keep header order
    return sorted(entries, key=lambda entry: -entry[0])


def negotiate_accept(header: Optional[str]) -> Optional[MediaType]:
    """Pick a representation from an HTTP Accept header.

    Entries are taken in q order. The first that is either one of our
    ``ContentType`` members or a concrete media type wins; a concrete type may
    name a resource's own type. Returns None when nothing in the header is
    acceptable.
    """
    if not header or not header.strip():
        return ContentType.ANY

    for _, media_type in _parse_accept(header):
        content_type = _as_content_type(media_type)
        if isinstance(content_type, ContentType):
            return content_type
        # Ignore unknown parameters on a known type
        bare = media_type.split(";")[0]
        content_type = _as_content_type(bare)
        if isinstance(content_type, ContentType):
            return content_type
        if "*" not in bare:
            return bare

    return None


def effective_content_type(
    accept: MediaType, media_type: Optional[str] = None
) -> MediaType:
    """Resolve the representation actually produced.

    A wildcard becomes the resource's own media type when there is one, the
    default document type otherwise.
    """
    accept = _as_content_type(accept)
    if accept == ContentType.ANY:
        if media_type:
            return _as_content_type(media_type)
        return DEFAULT_CONTENT_TYPE
    return accept


def shaped_context(context: Sequence[Any], content_type: MediaType) -> List[Any]:
    """Return the JSON-LD context a representation of this type carries.

    Raises:
        UnsupportedContentType: if the type is neither JSON-LD nor plain JSON
    """
    if is_json_ld(content_type):
        if DID_SCHEMA_JSONLD in context:
            return list(context)
        return [*context, DID_SCHEMA_JSONLD]
    if _as_content_type(content_type) in PLAIN_JSON_TYPES:
        return []
    raise UnsupportedContentType(f"content type {content_type} is not supported")


def shape_context(document: DIDDocument, content_type: MediaType) -> DIDDocument:
    """Return a copy of the document with the DID context added or stripped."""
    return document.model_copy(
        update={"context": shaped_context(document.context, content_type)}
    )


def shape_resource(resource: Resource, content_type: MediaType) -> Dict[str, Any]:
    """Serialize a document fragment with the context the type calls for."""
    context = shaped_context([], content_type)
    value = serialize(resource)
    if context:
        return {"@context": context, **value}
    return value
