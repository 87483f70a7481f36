"""Tests for active single-probe detectors."""

import html

import httpx
import pytest
import respx
from httpx import Response

from sentinelscan.errors import TransportError
from sentinelscan.modules.detectors import (
    DirectoryListingDetector,
    HttpMethodsDetector,
    OpenRedirectDetector,
    SqlInjectionDetector,
    XssDetector,
    append_query,
    is_https,
    join_path,
)
from sentinelscan.modules.detectors.active_checks import looks_like_listing

TARGET = "https://example.com"


class TestUrlHelpers:
    """Tests for query and path helpers."""

    def test_append_query_encodes_value(self):
        """Test append query encodes value."""
        assert append_query(TARGET, "url", "http://evil.com") == (
            "https://example.com?url=http%3A%2F%2Fevil.com"
        )

    def test_append_query_uses_ampersand_when_query_present(self):
        """Test append query uses ampersand when query present."""
        assert append_query(f"{TARGET}/?a=1", "test", "x y") == "https://example.com/?a=1&test=x%20y"

    def test_append_query_keeps_unreserved_marks(self):
        """Test append query keeps unreserved marks."""
        assert append_query(TARGET, "test", "' OR '1'='1") == (
            "https://example.com?test='%20OR%20'1'%3D'1"
        )

    def test_append_query_keeps_fragment_last(self):
        """Test the parameter lands in the query, not after the fragment."""
        assert append_query(f"{TARGET}/app?a=1#top", "test", "x") == (
            "https://example.com/app?a=1&test=x#top"
        )
        assert append_query(f"{TARGET}/app#top", "url", "y") == "https://example.com/app?url=y#top"

    def test_is_https(self):
        """Test scheme detection used by the not-applicable checks."""
        assert is_https("https://example.com/app") is True
        assert is_https("HTTPS://example.com") is True
        assert is_https("http://example.com") is False

    def test_join_path_does_not_double_slash(self):
        """Test join path does not double slash."""
        assert join_path(f"{TARGET}/", "/admin/") == "https://example.com/admin/"
        assert join_path(TARGET, "/admin/") == "https://example.com/admin/"


class TestSqlInjectionDetector:
    """Tests for the sqlInjection check."""

    @respx.mock
    @pytest.mark.asyncio
    async def test_single_payload_with_sql_error(self):
        """Test single payload with sql error."""
        def respond(request: httpx.Request) -> Response:
            if "DROP" in request.url.params.get("test", ""):
                return Response(200, text="You have an error in your SQL syntax near 'DROP'")
            return Response(200, text="<p>ok</p>")

        respx.route(host="example.com").mock(side_effect=respond)

        finding = await SqlInjectionDetector().check(TARGET)

        assert finding.vulnerable is True
        assert len(finding["findings"]) == 1
        assert finding["findings"][0]["error"] == "SQL error detected"
        assert finding["tested_payloads"] == 5

    @respx.mock
    @pytest.mark.asyncio
    async def test_no_sql_errors(self):
        """Test no sql errors."""
        respx.route(host="example.com").mock(return_value=Response(200, text="<p>ok</p>"))

        finding = await SqlInjectionDetector().check(TARGET)

        assert finding.vulnerable is False
        assert finding["findings"] == []

    @respx.mock
    @pytest.mark.asyncio
    async def test_internal_server_error_recorded(self):
        """Test internal server error recorded."""
        respx.route(host="example.com").mock(return_value=Response(500, text="sql syntax"))

        finding = await SqlInjectionDetector().check(TARGET)

        assert len(finding["findings"]) == 5
        assert all(f["error"] == "500 Internal Server Error" for f in finding["findings"])

    @respx.mock
    @pytest.mark.asyncio
    async def test_other_server_errors_ignored(self):
        """Test other server errors ignored."""
        respx.route(host="example.com").mock(return_value=Response(502, text="sql syntax"))

        finding = await SqlInjectionDetector().check(TARGET)

        assert finding.vulnerable is False

    @respx.mock
    @pytest.mark.asyncio
    async def test_transport_failures_skip_payload(self):
        """Test transport failures skip payload."""
        respx.route(host="example.com").mock(side_effect=httpx.ConnectError("refused"))

        finding = await SqlInjectionDetector().check(TARGET)

        assert finding.vulnerable is False


class TestXssDetector:
    """Tests for the xss check."""

    @respx.mock
    @pytest.mark.asyncio
    async def test_reflected_payload(self):
        """Test reflected payload."""
        respx.route(host="example.com").mock(
            side_effect=lambda request: Response(
                200, text=f"<p>You searched {request.url.params['test']}</p>"
            )
        )

        finding = await XssDetector().check(TARGET)

        assert finding.vulnerable is True
        assert finding["tested_url"].startswith("https://example.com?test=")

    @respx.mock
    @pytest.mark.asyncio
    async def test_escaped_payload(self):
        """Test escaped payload."""
        respx.route(host="example.com").mock(
            side_effect=lambda request: Response(
                200, text=f"<p>You searched {html.escape(request.url.params['test'])}</p>"
            )
        )

        finding = await XssDetector().check(TARGET)

        assert finding.vulnerable is False

    @respx.mock
    @pytest.mark.asyncio
    async def test_transport_failure_propagates(self):
        """Test transport failure propagates."""
        respx.route(host="example.com").mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(TransportError):
            await XssDetector().check(TARGET)


class TestOpenRedirectDetector:
    """Tests for the openRedirect check."""

    @respx.mock
    @pytest.mark.asyncio
    async def test_redirect_to_probe_url(self):
        """Test redirect to probe url."""
        respx.route(host="example.com").mock(
            return_value=Response(302, headers={"Location": "http://evil.com/"})
        )

        finding = await OpenRedirectDetector().check(TARGET)

        assert finding.vulnerable is True
        assert finding["status"] == 302
        assert finding["redirect_location"] == "http://evil.com/"

    @respx.mock
    @pytest.mark.asyncio
    async def test_local_redirect(self):
        """Test local redirect."""
        respx.route(host="example.com").mock(
            return_value=Response(302, headers={"Location": "/home"})
        )

        finding = await OpenRedirectDetector().check(TARGET)

        assert finding.vulnerable is False
        assert finding.issues == []

    @respx.mock
    @pytest.mark.asyncio
    async def test_transport_failure_is_negative(self):
        """Test transport failure is negative."""
        respx.route(host="example.com").mock(side_effect=httpx.ConnectError("refused"))

        finding = await OpenRedirectDetector().check(TARGET)

        assert finding.vulnerable is False
        assert "refused" in finding["error"]


class TestHttpMethodsDetector:
    """Tests for the methods check."""

    @respx.mock
    @pytest.mark.asyncio
    async def test_rejected_method_excluded(self):
        """Test rejected method excluded."""
        respx.route(method="PUT", host="example.com").mock(return_value=Response(405))
        respx.route(host="example.com").mock(return_value=Response(200))

        finding = await HttpMethodsDetector().check(TARGET)

        assert finding["allowed"] == ["GET", "HEAD", "POST", "DELETE", "PATCH", "OPTIONS"]
        assert finding.vulnerable is True

    @respx.mock
    @pytest.mark.asyncio
    async def test_only_safe_methods(self):
        """Test only safe methods."""
        for method in ("PUT", "DELETE", "PATCH"):
            respx.route(method=method, host="example.com").mock(return_value=Response(405))
        respx.route(method="POST", host="example.com").mock(return_value=Response(500))
        respx.route(host="example.com").mock(return_value=Response(200))

        finding = await HttpMethodsDetector().check(TARGET)

        assert finding["allowed"] == ["GET", "HEAD", "OPTIONS"]
        assert finding.vulnerable is False


class TestDirectoryListingDetector:
    """Tests for the directoryListing check."""

    @respx.mock
    @pytest.mark.asyncio
    async def test_index_page_listed(self):
        """Test index page listed."""
        respx.get(f"{TARGET}/admin/").mock(
            return_value=Response(200, text="<html><title>Index of /admin</title></html>")
        )
        respx.route(host="example.com").mock(return_value=Response(404))

        finding = await DirectoryListingDetector().check(TARGET)

        assert finding["directories"] == ["/admin/"]
        assert finding.vulnerable is True

    @respx.mock
    @pytest.mark.asyncio
    async def test_no_listings(self):
        """Test no listings."""
        respx.route(host="example.com").mock(return_value=Response(404))

        finding = await DirectoryListingDetector().check(TARGET)

        assert finding["directories"] == []
        assert finding.vulnerable is False

    def test_listing_heuristic(self):
        """Test listing heuristic."""
        assert looks_like_listing("<h1>Directory listing for /</h1>")
        assert looks_like_listing('<a href="../">Parent Directory</a>')
        assert not looks_like_listing("<h1>Welcome</h1>")
