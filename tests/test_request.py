import asyncio
import json

import pytest

from did_resolution.config import ResolverConfig
from did_resolution.ledger import with_deadline
from did_resolution.ledger.memory import InMemoryLedgerService
from did_resolution.request import RequestService

from conftest import (
    DID,
    JSON_RESOURCE_DATA,
    JSON_RESOURCE_ID,
    TEXT_RESOURCE_DATA,
    TEXT_RESOURCE_ID,
    UNKNOWN_DID,
    make_did_doc,
)


class SlowLedgerService(InMemoryLedgerService):
    async def query_resource(self, did: str, resource_id: str):
        return await with_deadline(asyncio.sleep(1), 0.01)


@pytest.mark.asyncio
async def test_resolve(request_service: RequestService):
    response = await request_service.process(DID)

    assert response.status == 200
    assert response.content_type == "application/did+ld+json"
    body = json.loads(response.body)
    assert body["didDocument"]["@context"] == ["https://www.w3.org/ns/did/v1"]
    assert body["didResolutionMetadata"]["contentType"] == "application/did+ld+json"


@pytest.mark.asyncio
async def test_resolve_did_json(request_service: RequestService):
    response = await request_service.process(DID, "application/did+json")

    assert response.content_type == "application/did+json"
    assert "@context" not in json.loads(response.body)["didDocument"]


@pytest.mark.asyncio
async def test_resolve_html(request_service: RequestService):
    response = await request_service.process(
        DID, "text/html,application/xhtml+xml,*/*;q=0.8"
    )

    assert response.status == 200
    assert response.content_type == "text/html"
    assert response.body.startswith("<!DOCTYPE html>")
    assert DID in response.body


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "identifier,status,error",
    [
        (UNKNOWN_DID, 404, "notFound"),
        ("did:cheqd:testnet:abc", 400, "invalidDid"),
        ("did:example:55dbc8bf-fba3-4117-855c-1e0dc1d3bb47", 501, "methodNotSupported"),
        ("not a did", 501, "methodNotSupported"),
        ("not-a-did/x", 501, "methodNotSupported"),
        (f"{DID}#a#b", 501, "methodNotSupported"),
    ],
)
async def test_resolve_error(request_service: RequestService, identifier, status, error):
    response = await request_service.process(identifier)

    assert response.status == status
    body = json.loads(response.body)
    assert body["didResolutionMetadata"]["error"] == error
    assert "contentStream" not in body
    assert body["didDocument"] is None
    assert body["didDocumentMetadata"] == []


@pytest.mark.asyncio
@pytest.mark.parametrize("accept", ["image/png", "image/*"])
async def test_resolve_representation_not_supported(
    request_service: RequestService, accept
):
    response = await request_service.process(DID, accept)

    assert response.status == 406
    assert response.content_type == "application/did+ld+json"
    body = json.loads(response.body)
    assert body["didResolutionMetadata"]["error"] == "representationNotSupported"


@pytest.mark.asyncio
async def test_dereference_fragment(request_service: RequestService):
    response = await request_service.process(f"{DID}#key-2", "application/did+json")

    assert response.status == 200
    body = json.loads(response.body)
    assert body["contentStream"]["id"] == f"{DID}#key-2"
    assert body["contentStream"]["publicKeyJwk"]["kty"] == "OKP"
    assert body["dereferencingMetadata"]["contentType"] == "application/did+json"


@pytest.mark.asyncio
async def test_dereference_resource_raw(request_service: RequestService):
    response = await request_service.process(f"{DID}/resources/{JSON_RESOURCE_ID}", "*/*")

    assert response.status == 200
    assert response.content_type == "application/json"
    assert response.body == JSON_RESOURCE_DATA


@pytest.mark.asyncio
async def test_dereference_resource_own_media_type(request_service: RequestService):
    response = await request_service.process(
        f"{DID}/resources/{TEXT_RESOURCE_ID}", "text/plain"
    )

    assert response.status == 200
    assert response.content_type == "text/plain"
    assert response.body == TEXT_RESOURCE_DATA


@pytest.mark.asyncio
async def test_dereference_resource_accept_order(request_service: RequestService):
    response = await request_service.process(
        f"{DID}/resources/{TEXT_RESOURCE_ID}",
        "text/plain, application/did+ld+json;q=0.1",
    )

    assert response.status == 200
    assert response.content_type == "text/plain"
    assert response.body == TEXT_RESOURCE_DATA

    response = await request_service.process(
        f"{DID}/resources/{TEXT_RESOURCE_ID}",
        "text/plain;q=0.1, application/did+ld+json",
    )

    assert response.content_type == "application/did+ld+json"
    assert json.loads(response.body)["contentStream"] == TEXT_RESOURCE_DATA.decode()


@pytest.mark.asyncio
async def test_dereference_resource_envelope(request_service: RequestService):
    response = await request_service.process(f"{DID}/resources/{JSON_RESOURCE_ID}")

    assert response.status == 200
    assert response.content_type == "application/did+ld+json"
    body = json.loads(response.body)
    assert body["contentStream"] == json.loads(JSON_RESOURCE_DATA)
    assert body["contentMetadata"]["resourceId"] == JSON_RESOURCE_ID


@pytest.mark.asyncio
async def test_dereference_representation_not_supported(
    request_service: RequestService,
):
    response = await request_service.process(
        f"{DID}/resources/{JSON_RESOURCE_ID}", "image/png"
    )

    assert response.status == 406
    assert response.content_type == "application/json"
    body = json.loads(response.body)
    assert body["dereferencingMetadata"]["error"] == "representationNotSupported"
    assert body["dereferencingMetadata"]["contentType"] == "image/png"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "identifier,status,error",
    [
        ("did:cheqd:testnet:abc#key-1", 400, "invalidDidUrl"),
        (f"{DID}?versionId=1", 500, "notSupported"),
        (f"{DID}#key-3", 404, "notFound"),
    ],
)
async def test_dereference_error(
    request_service: RequestService, identifier, status, error
):
    response = await request_service.process(identifier)

    assert response.status == status
    body = json.loads(response.body)
    assert body["dereferencingMetadata"]["error"] == error
    assert body["contentStream"] is None
    assert body["contentMetadata"] == []


@pytest.mark.asyncio
async def test_dereference_resource_plain_json(request_service: RequestService):
    response = await request_service.process(
        f"{DID}/resources/{JSON_RESOURCE_ID}", "application/json"
    )

    assert response.status == 200
    assert response.content_type == "application/json"
    assert response.body == JSON_RESOURCE_DATA

    response = await request_service.process(
        f"{DID}/resources/{TEXT_RESOURCE_ID}", "application/json"
    )

    assert response.status == 406
    body = json.loads(response.body)
    assert body["dereferencingMetadata"]["error"] == "representationNotSupported"


@pytest.mark.asyncio
async def test_malformed_material_is_internal_error(config):
    ledger = InMemoryLedgerService()
    ledger.add_did_doc(make_did_doc(material="not json"))
    service = RequestService(config, ledger)

    response = await service.process(DID)

    assert response.status == 500
    assert json.loads(response.body)["didResolutionMetadata"]["error"] == "internalError"

    # The service keeps answering after a hard failure
    response = await service.process(f"{DID}/resources/all")
    assert response.status == 200


@pytest.mark.asyncio
async def test_ledger_timeout_is_internal_error():
    ledger = SlowLedgerService()
    ledger.add_did_doc(make_did_doc())
    service = RequestService(ResolverConfig(), ledger)

    response = await service.process(f"{DID}/resources/{JSON_RESOURCE_ID}")

    assert response.status == 500
    body = json.loads(response.body)
    assert body["dereferencingMetadata"]["error"] == "internalError"
    assert body["contentStream"] is None
