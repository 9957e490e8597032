import asyncio
import base64

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from did_resolution.config import DEFAULT_LEDGER_ENDPOINTS, ResolverConfig
from did_resolution.errors import LedgerError, LedgerTimeout
from did_resolution.ledger.rest import (
    RestLedgerService,
    parse_did_doc,
    parse_resource,
)
from did_resolution.request import RequestService

from conftest import DID, JSON_RESOURCE_DATA, JSON_RESOURCE_ID, UNKNOWN_DID

UUID = DID.rsplit(":", 1)[-1]

DID_DOC_RESPONSE = {
    "value": {
        "did_doc": {
            "context": ["https://www.w3.org/ns/did/v1"],
            "id": DID,
            "controller": [DID],
            "verification_method": [
                {
                    "id": f"{DID}#key-1",
                    "verification_method_type": "Ed25519VerificationKey2020",
                    "controller": DID,
                    "verification_material": '{"publicKeyMultibase": "z6MkhaXgBZDvotDkL5257faiztiGiC2QtKLGpbnnEGta2doK"}',
                }
            ],
            "authentication": [f"{DID}#key-1"],
            "assertion_method": [],
            "capability_invocation": [],
            "capability_delegation": [],
            "key_agreement": [],
            "service": [
                {
                    "id": f"{DID}#service-1",
                    "service_type": "LinkedDomains",
                    "service_endpoint": ["https://example.com"],
                }
            ],
            "also_known_as": [],
        },
        "metadata": {
            "created": "2023-01-25T11:58:10.390039347Z",
            "updated": None,
            "deactivated": False,
            "version_id": "e5615fc2-6f13-42b1-989c-49576a574cef",
            "next_version_id": "",
            "previous_version_id": "",
        },
    }
}

RESOURCE_METADATA = {
    "collection_id": UUID,
    "id": JSON_RESOURCE_ID,
    "name": "Degree",
    "version": "",
    "resource_type": "CL-Schema",
    "also_known_as": [],
    "media_type": "application/json",
    "created": "2023-01-25T12:08:39.63Z",
    "checksum": "a95380f460e63ad939541a57aecbfd795fcd37c6d78ee86c885340e33a91b559",
    "previous_version_id": "",
    "next_version_id": "",
}

RESOURCE_RESPONSE = {
    "resource": {
        "resource": {"data": base64.b64encode(JSON_RESOURCE_DATA).decode()},
        "metadata": RESOURCE_METADATA,
    }
}


async def handle_did_doc(request: web.Request):
    if request.match_info["did"] != DID:
        return web.json_response({"code": 5, "message": "not found"}, status=404)
    return web.json_response(DID_DOC_RESPONSE)


async def handle_resource(request: web.Request):
    if request.match_info["resource_id"] != JSON_RESOURCE_ID:
        raise web.HTTPNotFound()
    return web.json_response(RESOURCE_RESPONSE)


async def handle_collection(request: web.Request):
    if request.match_info["collection_id"] != UUID:
        raise web.HTTPNotFound()
    return web.json_response({"resources": [RESOURCE_METADATA]})


async def handle_error(request: web.Request):
    return web.json_response({"code": 13, "message": "internal"}, status=500)


async def handle_slow(request: web.Request):
    await asyncio.sleep(0.5)
    return web.json_response(DID_DOC_RESPONSE)


def ledger_app(did_doc_handler=handle_did_doc) -> web.Application:
    app = web.Application()
    app.add_routes(
        [
            web.get("/cheqd/did/v2/{did}", did_doc_handler),
            web.get(
                "/cheqd/resource/v2/{collection_id}/resources/{resource_id}",
                handle_resource,
            ),
            web.get("/cheqd/resource/v2/{collection_id}/metadata", handle_collection),
        ]
    )
    return app


def rest_ledger(server: TestServer, timeout: float = 5.0) -> RestLedgerService:
    return RestLedgerService(
        ResolverConfig(ledger_timeout=timeout),
        {"testnet": str(server.make_url("/"))},
    )


def test_parse_did_doc():
    doc = parse_did_doc(DID_DOC_RESPONSE["value"]["did_doc"])
    assert doc.id == DID
    assert doc.verification_method[0].verification_method_type == (
        "Ed25519VerificationKey2020"
    )
    assert doc.service[0].service_endpoint == ["https://example.com"]


def test_parse_resource():
    resource = parse_resource(RESOURCE_RESPONSE["resource"])
    assert resource.data == JSON_RESOURCE_DATA
    assert resource.metadata.media_type == "application/json"

    with pytest.raises(LedgerError):
        parse_resource({"resource": {"data": "not base64!"}, "metadata": {}})


@pytest.mark.asyncio
async def test_query_did_doc():
    async with TestServer(ledger_app()) as server:
        ledger = rest_ledger(server)

        result = await ledger.query_did_doc(DID)
        assert result.did_doc.id == DID
        assert result.metadata.created == "2023-01-25T11:58:10.390039347Z"
        assert result.metadata.updated is None

        assert await ledger.query_did_doc(UNKNOWN_DID) is None


@pytest.mark.asyncio
async def test_query_resources():
    async with TestServer(ledger_app()) as server:
        ledger = rest_ledger(server)

        resource = await ledger.query_resource(DID, JSON_RESOURCE_ID.upper())
        assert resource.data == JSON_RESOURCE_DATA
        assert await ledger.query_resource(DID, UUID) is None

        [metadata] = await ledger.query_collection_resources(DID)
        assert metadata.id == JSON_RESOURCE_ID
        assert await ledger.query_collection_resources(UNKNOWN_DID) is None


@pytest.mark.asyncio
async def test_unknown_namespace():
    async with TestServer(ledger_app()) as server:
        ledger = rest_ledger(server)
        assert await ledger.query_did_doc(f"did:cheqd:mainnet:{UUID}") is None


@pytest.mark.asyncio
async def test_ledger_error():
    async with TestServer(ledger_app(handle_error)) as server:
        with pytest.raises(LedgerError):
            await rest_ledger(server).query_did_doc(DID)


@pytest.mark.asyncio
async def test_ledger_timeout():
    async with TestServer(ledger_app(handle_slow)) as server:
        with pytest.raises(LedgerTimeout):
            await rest_ledger(server, timeout=0.05).query_did_doc(DID)


@pytest.mark.asyncio
async def test_request_over_rest_ledger():
    async with TestServer(ledger_app()) as server:
        service = RequestService(ResolverConfig(), rest_ledger(server))

        response = await service.process(f"{DID}/resources/{JSON_RESOURCE_ID}", "*/*")
        assert response.status == 200
        assert response.body == JSON_RESOURCE_DATA


@pytest.mark.external_fetch
@pytest.mark.asyncio
async def test_resolve_testnet():
    config = ResolverConfig()
    service = RequestService(config, RestLedgerService(config, DEFAULT_LEDGER_ENDPOINTS))
    response = await service.process(
        "did:cheqd:testnet:55dbc8bf-fba3-4117-855c-1e0dc1d3bb47"
    )
    assert response.status in (200, 404)
