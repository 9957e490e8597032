"""Result envelopes.

Both envelopes always carry their three keys. When the metadata reports an
error, the payload is ``null`` and the content metadata an empty list.
"""

import json
from typing import Any, Dict

from .dereferencer import DidDereferencing
from .document import serialize
from .errors import IdentityError
from .metadata import new_dereferencing_metadata, new_resolution_metadata
from .resolver import DidResolution
from .types import MediaType

HTML_TEMPLATE = (
    "<!DOCTYPE html><html><body><h1>DID Resolver</h1><pre id=\"r\"></pre>"
    "<script> var data = {data};"
    "document.getElementById(\"r\").innerHTML = JSON.stringify(data, null, 4);"
    "</script></body></html>"
)


def resolution_envelope(resolution: DidResolution) -> Dict[str, Any]:
    """Build the DID resolution result."""
    if resolution.error or resolution.document is None:
        document, metadata = None, []
    else:
        document = serialize(resolution.document)
        metadata = resolution.metadata.serialize() if resolution.metadata else {}
    return {
        "didResolutionMetadata": resolution.resolution_metadata.serialize(),
        "didDocument": document,
        "didDocumentMetadata": metadata,
    }


def dereferencing_envelope(dereferencing: DidDereferencing) -> Dict[str, Any]:
    """Build the DID URL dereferencing result."""
    if dereferencing.error:
        content_stream, metadata = None, []
    else:
        content_stream = dereferencing.content_stream
        metadata = (
            dereferencing.content_metadata.serialize()
            if dereferencing.content_metadata
            else {}
        )
    return {
        "contentStream": content_stream,
        "contentMetadata": metadata,
        "dereferencingMetadata": dereferencing.dereferencing_metadata.serialize(),
    }


def error_envelope(
    identifier: str, content_type: MediaType, error: IdentityError
) -> Dict[str, Any]:
    """Build the envelope for an error raised outside the engines."""
    if error.is_dereferencing:
        return dereferencing_envelope(
            DidDereferencing(
                new_dereferencing_metadata(identifier, content_type, error.code)
            )
        )
    return resolution_envelope(
        DidResolution(
            None, None, new_resolution_metadata(identifier, content_type, error.code)
        )
    )


def to_json(envelope: Dict[str, Any]) -> str:
    """Serialize an envelope."""
    return json.dumps(envelope)


def html_page(body: str) -> str:
    """Wrap a JSON envelope in a page that pretty prints it."""
    return HTML_TEMPLATE.format(data=body.replace("</", "<\\/"))
