"""Tests for HTTP endpoints."""

import json

import httpx
import pytest

from config import Config
from reflector.lookup import IPLookupClient
from web_app import create_app


@pytest.mark.asyncio
class TestReflectorEndpoints:
    """Test the plain-text reflector routes."""

    async def test_client_ip_from_socket(self, client):
        response = await client.get("/")

        assert response.status_code == 200
        assert response.text == "203.0.113.7\n"
        assert response.headers["content-type"].startswith("text/plain")

    async def test_client_ip_from_edge_header(self, client):
        response = await client.get("/", headers={
            "CF-Connecting-IP": "198.51.100.1",
            "X-Forwarded-For": "192.0.2.1, 10.0.0.1",
        })
        assert response.text == "198.51.100.1\n"

    async def test_client_ip_from_forwarded_for(self, client):
        response = await client.get("/", headers={"X-Forwarded-For": "192.0.2.1, 10.0.0.1"})
        assert response.text == "192.0.2.1\n"

    async def test_agent(self, client):
        response = await client.get("/agent", headers={"User-Agent": "curl/8.5.0"})

        assert response.status_code == 200
        assert response.text == "curl/8.5.0\n"

    async def test_headers(self, client):
        response = await client.get("/headers", headers={"X-Custom": "hello"})

        assert response.status_code == 200
        lines = response.text.splitlines()
        assert "x-custom: hello" in lines
        names = [line.split(":", 1)[0] for line in lines]
        assert names == sorted(names)

    async def test_tls_from_edge_headers(self, client):
        response = await client.get("/tls", headers={
            "X-Forwarded-Proto": "https",
            "X-TLS-Version": "TLSv1.3",
            "X-TLS-Cipher": "TLS_AES_128_GCM_SHA256",
        })

        assert response.status_code == 200
        assert response.text == (
            "scheme: https\n"
            "tls_version: TLSv1.3\n"
            "tls_cipher: TLS_AES_128_GCM_SHA256\n"
        )

    async def test_tls_unknown_without_tls(self, client):
        response = await client.get("/tls")
        assert "tls_version: Unknown" in response.text
        assert "scheme: http" in response.text

    async def test_json(self, client):
        response = await client.get("/json", headers={"User-Agent": "pytest"})

        assert response.status_code == 200
        data = response.json()
        assert data["client_ip"] == "203.0.113.7"
        assert data["user_agent"] == "pytest"
        assert set(data["tls"]) == {"scheme", "tls_version", "tls_cipher"}
        assert data["headers"]["user-agent"] == "pytest"

    async def test_readme(self, client):
        response = await client.get("/readme")

        assert response.status_code == 200
        assert "/agent" in response.text
        assert "/ln/<id>" in response.text

    async def test_head_client_ip(self, client):
        response = await client.head("/")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")

    async def test_unknown_route(self, client):
        response = await client.get("/nope")

        assert response.status_code == 404
        assert response.text == "Not found\n"

    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


@pytest.mark.asyncio
class TestShortLinkRedirects:
    """Test /ln/<code>."""

    async def test_redirect(self, client):
        response = await client.get("/ln/a1b2", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == "https://www.google.com"

    async def test_redirect_case_insensitive(self, client):
        response = await client.get("/ln/A1B2", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == "https://www.google.com"

    async def test_not_found(self, client):
        response = await client.get("/ln/ffff", follow_redirects=False)

        assert response.status_code == 404
        assert response.text == "Short link 'ffff' not found\n"

    async def test_no_zero_padding(self, client, mappings_file):
        mappings_file.write_text(json.dumps({"04ac": "https://x.example"}))

        response = await client.get("/ln/4ac", follow_redirects=False)
        assert response.status_code == 404
        assert "'4ac'" in response.text

        response = await client.get("/ln/04ac", follow_redirects=False)
        assert response.status_code == 302

    async def test_invalid_code_is_generic_miss(self, client):
        for path in ("/ln/zzzz", "/ln/12345", "/ln/", "/ln/a1b2/", "/ln/a1b2/x"):
            response = await client.get(path, follow_redirects=False)
            assert response.status_code == 404, path
            assert response.text == "Not found\n", path

    async def test_head_redirect(self, client):
        response = await client.head("/ln/a1b2", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == "https://www.google.com"

    async def test_redirect_query_string_ignored(self, client):
        response = await client.get("/ln/a1b2?utm=1", follow_redirects=False)
        assert response.status_code == 302


@pytest.mark.asyncio
class TestLookupEndpoints:
    """Test /geo and /asn proxying."""

    async def test_geo(self, client, upstream_requests):
        response = await client.get("/geo/1.1.1.1")

        assert response.status_code == 200
        assert response.json() == {"query": "1.1.1.1", "country": "Testland"}
        assert upstream_requests[0].url.host == "geo.test"

    async def test_asn_cidr(self, client):
        response = await client.get("/asn/10.1.2.3/8")

        assert response.status_code == 200
        assert response.text == "AS64500, 10.0.0.0/8"

    async def test_invalid_target(self, client, upstream_requests):
        response = await client.get("/geo/example.com")

        assert response.status_code == 400
        assert response.text == "Invalid IP address or CIDR\n"
        assert upstream_requests == []

    async def test_upstream_failure(self, service, config):
        def handler(request):
            raise httpx.ConnectError("down", request=request)

        lookup = IPLookupClient(
            geo_url=config.geo_lookup_url,
            asn_url=config.asn_lookup_url,
            max_retries=1,
            transport=httpx.MockTransport(handler),
        )
        app = create_app(service_instance=service, lookup_instance=lookup, config=config)

        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver") as ac:
            response = await ac.get("/geo/8.8.8.8")
        await lookup.close()

        assert response.status_code == 502
        assert response.text.startswith("Bad Gateway")


@pytest.mark.asyncio
class TestAPIEndpoints:
    """Test /api routes."""

    async def test_create_link(self, client, mappings_file):
        response = await client.post("/api/links", json={"url": "https://example.com/page"})

        assert response.status_code == 201
        data = response.json()
        assert len(data["code"]) == 4
        assert data["url"] == "https://example.com/page"
        assert data["short_path"] == f"/ln/{data['code']}"
        assert data["short_url"] == f"http://testserver/ln/{data['code']}"

        stored = json.loads(mappings_file.read_text())
        assert stored[data["code"]] == "https://example.com/page"

        redirect = await client.get(data["short_path"], follow_redirects=False)
        assert redirect.status_code == 302
        assert redirect.headers["location"] == "https://example.com/page"

    async def test_create_link_short_url_behind_proxy(self, client):
        response = await client.post(
            "/api/links",
            json={"url": "https://example.com"},
            headers={"X-Forwarded-Proto": "https", "X-Forwarded-Host": "edge.example"},
        )
        data = response.json()
        assert data["short_url"] == f"https://edge.example/ln/{data['code']}"

    async def test_create_link_invalid_url(self, client, mappings_file):
        before = mappings_file.read_text()
        response = await client.post("/api/links", json={"url": "not-a-url"})

        assert response.status_code == 400
        assert "Invalid URL" in response.json()["detail"]
        assert mappings_file.read_text() == before

    async def test_create_link_exhausted(self, client, mappings_file):
        mappings_file.write_text(json.dumps({f"{i:04x}": "https://x" for i in range(0x10000)}))

        response = await client.post("/api/links", json={"url": "https://example.com"})

        assert response.status_code == 507

    async def test_list_links(self, client):
        response = await client.get("/api/links")

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 1
        assert data["links"][0]["code"] == "a1b2"
        assert data["links"][0]["short_path"] == "/ln/a1b2"

    async def test_admin_api_disabled(self, service, lookup_client, mappings_file):
        config = Config(mappings_file=str(mappings_file), enable_admin_api=False)
        app = create_app(service_instance=service, lookup_instance=lookup_client, config=config)

        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver") as ac:
            created = await ac.post("/api/links", json={"url": "https://example.com"})
            listed = await ac.get("/api/links")

        assert created.status_code == 404
        assert listed.status_code == 404
        assert created.json() == {"detail": "Not Found"}

    async def test_health(self, client):
        response = await client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["storage"] == "healthy"
        assert data["mappings"] == 1
