"""Pytest configuration and fixtures."""

import json

import httpx
import pytest

from config import Config
from reflector.lookup import IPLookupClient
from reflector.service import ShortLinkService
from reflector.storage.json_file import JSONFileMappingStore
from reflector.common.logging_config import setup_logging
from web_app import create_app


class ScriptedRandom:
    """Random source that replays fixed values (cycling when exhausted)."""

    def __init__(self, values):
        self.values = list(values)
        self.calls = 0

    def randrange(self, stop):
        value = self.values[self.calls % len(self.values)]
        self.calls += 1
        assert 0 <= value < stop
        return value


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
def mappings_file(tmp_path):
    """Mapping file seeded with one short link."""
    path = tmp_path / "url_mappings.json"
    path.write_text(json.dumps({"a1b2": "https://www.google.com"}), encoding="utf-8")
    return path


@pytest.fixture
def store(mappings_file, logger):
    return JSONFileMappingStore(str(mappings_file), logger=logger)


@pytest.fixture
def service(store, logger):
    """Create service instance."""
    return ShortLinkService(store=store, logger=logger)


@pytest.fixture
def upstream_requests():
    """Requests seen by the mocked lookup services."""
    return []


@pytest.fixture
def upstream_transport(upstream_requests):
    """Mock geolocation/ASN services echoing the looked-up target."""

    def handler(request: httpx.Request) -> httpx.Response:
        upstream_requests.append(request)
        if request.url.host == "geo.test":
            target = request.url.path.rsplit("/", 1)[-1]
            return httpx.Response(200, json={"query": target, "country": "Testland"})
        return httpx.Response(200, text=f"AS64500, {request.url.params.get('q')}")

    return httpx.MockTransport(handler)


@pytest.fixture
def config(mappings_file):
    return Config(
        mappings_file=str(mappings_file),
        base_url="http://testserver",
        enable_admin_api=True,
        geo_lookup_url="http://geo.test/json/{target}",
        asn_lookup_url="http://asn.test/aslookup/?q={target}",
        lookup_max_retries=1,
    )


@pytest.fixture
async def lookup_client(config, upstream_transport, logger):
    client = IPLookupClient(
        geo_url=config.geo_lookup_url,
        asn_url=config.asn_lookup_url,
        max_retries=config.lookup_max_retries,
        logger=logger,
        transport=upstream_transport,
    )
    yield client
    await client.close()


@pytest.fixture
def app(service, lookup_client, config):
    """Create test FastAPI app."""
    return create_app(
        service_instance=service,
        lookup_instance=lookup_client,
        config=config,
    )


@pytest.fixture
async def client(app):
    """Create test client."""
    transport = httpx.ASGITransport(app=app, client=("203.0.113.7", 50000))
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
