"""Tests for the async fetch client."""

import httpx
import pytest
import respx
from httpx import Response

from sentinelscan.errors import TransportError
from sentinelscan.tools.http import DEFAULT_USER_AGENT, FetchClient


class TestFetchClient:
    """Test FetchClient functionality."""

    @respx.mock
    @pytest.mark.asyncio
    async def test_get_request(self):
        """Status, body and timing are captured."""
        respx.get("https://example.com").mock(return_value=Response(200, text="Hello World"))

        async with FetchClient() as client:
            response = await client.get("https://example.com")

        assert response.status == 200
        assert response.body == "Hello World"
        assert response.elapsed_ms >= 0
        assert not response.is_server_error

    @respx.mock
    @pytest.mark.asyncio
    async def test_error_status_is_returned_not_raised(self):
        """Test error status is returned not raised."""
        respx.get("https://example.com/missing").mock(return_value=Response(404, text="nope"))
        respx.get("https://example.com/boom").mock(return_value=Response(503))

        async with FetchClient() as client:
            missing = await client.get("https://example.com/missing")
            boom = await client.get("https://example.com/boom")

        assert missing.status == 404
        assert boom.is_server_error

    @respx.mock
    @pytest.mark.asyncio
    async def test_user_agent_and_extra_headers_sent(self):
        """Test user agent and extra headers sent."""
        route = respx.get("https://example.com").mock(return_value=Response(200))

        async with FetchClient() as client:
            await client.get("https://example.com", headers={"X-Forwarded-For": "203.0.113.9"})

        request = route.calls.last.request
        assert request.headers["user-agent"] == DEFAULT_USER_AGENT
        assert request.headers["x-forwarded-for"] == "203.0.113.9"

    @respx.mock
    @pytest.mark.asyncio
    async def test_head_request(self):
        """Test head request."""
        respx.head("https://example.com").mock(
            return_value=Response(200, headers={"Server": "nginx"})
        )

        async with FetchClient() as client:
            response = await client.head("https://example.com")

        assert response.headers.get("server") == "nginx"

    @respx.mock
    @pytest.mark.asyncio
    async def test_multi_valued_headers_preserved(self):
        """Test multi valued headers preserved."""
        respx.get("https://example.com").mock(
            return_value=Response(
                200, headers=[("Set-Cookie", "a=1; Secure"), ("Set-Cookie", "b=2; HttpOnly")]
            )
        )

        async with FetchClient() as client:
            response = await client.get("https://example.com")

        assert response.headers.get_list("set-cookie") == ["a=1; Secure", "b=2; HttpOnly"]

    @respx.mock
    @pytest.mark.asyncio
    async def test_redirects_not_followed_when_disabled(self):
        """Test redirects not followed when disabled."""
        respx.get("https://example.com/go").mock(
            return_value=Response(302, headers={"Location": "https://example.com/home"})
        )

        async with FetchClient() as client:
            response = await client.fetch("https://example.com/go", follow_redirects=False)

        assert response.status == 302
        assert response.headers["location"] == "https://example.com/home"

    @respx.mock
    @pytest.mark.asyncio
    async def test_transport_failure_raises_transport_error(self):
        """Test transport failure raises transport error."""
        respx.get("https://unreachable.test").mock(side_effect=httpx.ConnectError("refused"))

        async with FetchClient() as client:
            with pytest.raises(TransportError) as exc_info:
                await client.get("https://unreachable.test")

        assert exc_info.value.url == "https://unreachable.test"
        assert exc_info.value.elapsed_ms >= 0
        assert "refused" in str(exc_info.value)

    @respx.mock
    @pytest.mark.asyncio
    async def test_timeout_raises_transport_error(self):
        """Test timeout raises transport error."""
        respx.get("https://slow.test").mock(side_effect=httpx.ReadTimeout("too slow"))

        async with FetchClient(timeout=0.1) as client:
            with pytest.raises(TransportError):
                await client.get("https://slow.test")

    @pytest.mark.asyncio
    async def test_fetch_requires_context_manager(self):
        """Test fetch requires context manager."""
        client = FetchClient()
        with pytest.raises(RuntimeError):
            await client.get("https://example.com")
