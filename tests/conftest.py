import json

import pytest

from did_resolution.config import ResolverConfig
from did_resolution.dereferencer import DereferencingService
from did_resolution.ledger import (
    LedgerDidDoc,
    LedgerDidDocMetadata,
    LedgerDidDocWithMetadata,
    LedgerDidService,
    LedgerResource,
    LedgerResourceMetadata,
    LedgerVerificationMethod,
)
from did_resolution.ledger.memory import InMemoryLedgerService
from did_resolution.request import RequestService
from did_resolution.resolver import ResolutionService

DID = "did:cheqd:testnet:55dbc8bf-fba3-4117-855c-1e0dc1d3bb47"
UNKNOWN_DID = "did:cheqd:testnet:c1685ca0-1f5b-439c-8eb8-5c0e85ab7cd0"
MULTIBASE = "z6MkhaXgBZDvotDkL5257faiztiGiC2QtKLGpbnnEGta2doK"
JWK = {
    "crv": "Ed25519",
    "kty": "OKP",
    "x": "VCpo2LMLhn6iWku8MKvSLg2ZAoC-nlOyPVQaO3FxVeQ",
}
JSON_RESOURCE_ID = "9ba3922e-d5f5-4f53-b265-fc0d4e988c77"
TEXT_RESOURCE_ID = "3f7e6c51-2b6e-4c57-9f63-7a0f8b5d2a10"
JSON_RESOURCE_DATA = b'{"name": "Degree", "version": "1.0"}'
TEXT_RESOURCE_DATA = b"hello resource"
SERVICE_ENDPOINT = "https://example.com/endpoint/8377464"


def pytest_addoption(parser):
    parser.addoption(
        "--runexternal",
        action="store_true",
        default=False,
        help="run tests that query a public ledger",
    )


def pytest_configure(config):
    config.addinivalue_line("markers", "external_fetch: mark test as querying a public ledger")


def pytest_collection_modifyitems(config, items):
    if config.getoption("--runexternal"):
        # --runexternal given in cli: do not skip external tests
        return
    skip_external = pytest.mark.skip(reason="need --runexternal option to run")
    for item in items:
        if "external_fetch" in item.keywords:
            item.add_marker(skip_external)


def make_did_doc(did: str = DID, material: str = None) -> LedgerDidDocWithMetadata:
    """A ledger document with a multibase key, a JWK key and a service."""
    return LedgerDidDocWithMetadata(
        did_doc=LedgerDidDoc(
            id=did,
            context=["https://www.w3.org/ns/did/v1"],
            controller=[did],
            verification_method=[
                LedgerVerificationMethod(
                    id=f"{did}#key-1",
                    verification_method_type="Ed25519VerificationKey2020",
                    controller=did,
                    verification_material=material
                    or json.dumps({"publicKeyMultibase": MULTIBASE}),
                ),
                LedgerVerificationMethod(
                    id=f"{did}#key-2",
                    verification_method_type="JsonWebKey2020",
                    controller=did,
                    verification_material=json.dumps({"publicKeyJwk": JWK}),
                ),
            ],
            authentication=[f"{did}#key-1"],
            assertion_method=[f"{did}#key-2"],
            service=[
                LedgerDidService(
                    id=f"{did}#service-1",
                    service_type="LinkedDomains",
                    service_endpoint=[SERVICE_ENDPOINT],
                )
            ],
        ),
        metadata=LedgerDidDocMetadata(
            created="2023-01-25T11:58:10.390039347Z",
            version_id="e5615fc2-6f13-42b1-989c-49576a574cef",
        ),
    )


def make_resource(
    resource_id: str, media_type: str, data: bytes, name: str = "Degree"
) -> LedgerResource:
    return LedgerResource(
        metadata=LedgerResourceMetadata(
            collection_id=DID.rsplit(":", 1)[-1],
            id=resource_id,
            name=name,
            resource_type="CL-Schema",
            media_type=media_type,
            checksum="a95380f460e63ad939541a57aecbfd795fcd37c6d78ee86c885340e33a91b559",
            created="2023-01-25T12:08:39.63Z",
        ),
        data=data,
    )


@pytest.fixture
def config():
    yield ResolverConfig()


@pytest.fixture
def ledger():
    ledger = InMemoryLedgerService()
    ledger.add_did_doc(make_did_doc())
    ledger.add_resource(
        DID, make_resource(JSON_RESOURCE_ID, "application/json", JSON_RESOURCE_DATA)
    )
    ledger.add_resource(
        DID,
        make_resource(TEXT_RESOURCE_ID, "text/plain", TEXT_RESOURCE_DATA, "Greeting"),
    )
    yield ledger


@pytest.fixture
def resolution(config, ledger):
    yield ResolutionService(config, ledger)


@pytest.fixture
def dereferencing(config, ledger):
    yield DereferencingService(config, ledger)


@pytest.fixture
def request_service(config, ledger):
    yield RequestService(config, ledger)
