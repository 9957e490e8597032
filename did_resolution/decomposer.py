"""DID and DID URL decomposition.

Ledger DIDs have the shape ``did:<method>[:<namespace>]:<unique-id>`` where the
unique id is either a UUID or a base58 string encoding 16 or 32 bytes. A DID URL
adds an optional path, query and fragment.
"""

import re
from dataclasses import dataclass
from typing import Iterable, NamedTuple, Optional

import base58
from pydid.did import DID, InvalidDIDError
from pydid.did_url import DIDUrl, InvalidDIDUrlError

from .errors import InvalidDidUrl

DID_URL_DELIMITERS = ("/", "?", "#")
NAMESPACE_PATTERN = re.compile(r"^[a-zA-Z0-9-]+$")
UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)

_pchar = r"(?:[A-Za-z0-9\-._~!$&'()*+,;=:@]|%[0-9A-Fa-f]{2})"
PATH_PATTERN = re.compile(rf"^(?:/{_pchar}*)*$")
QUERY_PATTERN = re.compile(rf"^(?:{_pchar}|[/?])*$")

RESOURCE_PATH_PATTERN = re.compile(r"^/resources/(?P<id>[^/]+)(?P<metadata>/metadata)?$")
ALL_RESOURCES_PATH = "/resources/all"


@dataclass(frozen=True)
class DidUrl:
    """A decomposed DID or DID URL."""

    method: str
    namespace: str
    id: str
    path: str = ""
    query: str = ""
    fragment: str = ""

    @property
    def did(self) -> str:
        """The bare DID this URL refers to."""
        if self.namespace:
            return f"did:{self.method}:{self.namespace}:{self.id}"
        return f"did:{self.method}:{self.id}"

    @property
    def is_url(self) -> bool:
        """Whether any of path, query or fragment is present."""
        return bool(self.path or self.query or self.fragment)


class ResourcePath(NamedTuple):
    """A recognized resource path.

    ``resource_id`` is None when the path addresses the whole collection.
    """

    resource_id: Optional[str]
    metadata: bool


def _parse(identifier: str):
    if not any(delimiter in identifier for delimiter in DID_URL_DELIMITERS):
        if not DID.is_valid(identifier):
            raise InvalidDidUrl(f"Not a DID: {identifier}")
        return DID(identifier), "", ""

    url = DIDUrl.parse(identifier)
    if not url.did:
        raise InvalidDidUrl(f"Not an absolute DID URL: {identifier}")
    path = url.path or ""
    if path and not path.startswith("/"):
        path = f"/{path}"
    return DID(url.did), path, url.fragment or ""


def decompose(identifier: str) -> DidUrl:
    """Split a DID or DID URL into its components.

    Raises:
        InvalidDidUrl: if the identifier does not have DID URL structure
    """
    if identifier.count("#") > 1:
        raise InvalidDidUrl(f"More than one fragment delimiter in {identifier}")

    try:
        did, path, fragment = _parse(identifier)
    except (InvalidDIDError, InvalidDIDUrlError) as err:
        raise InvalidDidUrl(f"Not a DID URL: {identifier}") from err

    namespace, _, unique_id = did.method_specific_id.rpartition(":")
    if namespace and not NAMESPACE_PATTERN.match(namespace):
        raise InvalidDidUrl(f"Invalid namespace in {identifier}")

    # The query is kept verbatim; the parsed form drops bare keys
    query = identifier.partition("#")[0].partition("?")[2]

    return DidUrl(
        method=did.method,
        namespace=namespace,
        id=unique_id,
        path=path,
        query=query,
        fragment=fragment,
    )


def try_decompose(identifier: str) -> Optional[DidUrl]:
    """Decompose an identifier, returning None when it is not a DID URL."""
    try:
        return decompose(identifier)
    except InvalidDidUrl:
        return None


def is_valid_unique_id(unique_id: str) -> bool:
    """Check a method specific unique id: a UUID or base58 of 16 or 32 bytes."""
    if UUID_PATTERN.match(unique_id):
        return True
    try:
        decoded = base58.b58decode(unique_id)
    except ValueError:
        return False
    return len(decoded) in (16, 32)


def is_valid_did(
    identifier: str,
    method: Optional[str] = None,
    namespaces: Iterable[str] = (),
) -> bool:
    """Validate a bare DID.

    Args:
        identifier: the DID to check
        method: required method, any method when None
        namespaces: allowed namespaces, any namespace when empty
    """
    url = try_decompose(identifier)
    if not url or url.is_url or identifier != url.did:
        return False
    if not DID.is_valid(identifier):
        return False
    if method and url.method != method:
        return False
    namespaces = set(namespaces)
    if namespaces and url.namespace not in namespaces:
        return False
    return is_valid_unique_id(url.id)


def is_valid_did_url(
    identifier: str,
    method: Optional[str] = None,
    namespaces: Iterable[str] = (),
) -> bool:
    """Validate a DID URL: its DID plus path, query and fragment syntax."""
    url = try_decompose(identifier)
    if not url:
        return False
    if not is_valid_did(url.did, method, namespaces):
        return False
    return bool(
        PATH_PATTERN.match(url.path)
        and QUERY_PATTERN.match(url.query)
        and QUERY_PATTERN.match(url.fragment)
    )


def is_did_url(identifier: str) -> bool:
    """Whether an identifier should be dereferenced rather than resolved."""
    url = try_decompose(identifier)
    return bool(url and url.is_url)


def parse_resource_path(path: str) -> Optional[ResourcePath]:
    """Recognize ``/resources/...`` paths.

    Resource ids are normalized to lower case so that upper and lower case
    UUIDs address the same resource.
    """
    if path == ALL_RESOURCES_PATH:
        return ResourcePath(None, True)
    match = RESOURCE_PATH_PATTERN.match(path)
    if not match:
        return None
    return ResourcePath(match.group("id").lower(), bool(match.group("metadata")))
