"""Tests for the Scraper orchestrator."""

import json
from unittest.mock import AsyncMock, patch

import pytest
from treescrape import (
    CoercionError,
    ExtractionError,
    InputError,
    Link,
    Profile,
    ResolutionError,
    SchemaError,
    Scraper,
    ScraperConfig,
    TransportError,
    get_profile_blocking,
)
from treescrape.http import HttpResponse

ALICE_PAGE_PROPS = {
    "account": {"id": 1, "username": "alice", "isActive": True},
    "links": [
        {"id": 10, "url": "https://a.example", "type": "LINK"},
        {"id": 11, "locked": True, "type": "LINK"},
    ],
}


def make_page(page_props):
    payload = json.dumps({"props": {"pageProps": page_props}, "page": "/[profile]"})
    return f'<html><body><script id="__NEXT_DATA__" type="application/json">{payload}</script></body></html>'.encode()


def make_response(url, content, content_type="text/html; charset=utf-8"):
    return HttpResponse(status_code=200, content=content, content_type=content_type, headers={}, url=url)


class MockHttpClient:
    """Mock HTTP client serving one profile page and one gate response."""

    def __init__(
        self,
        page: bytes | None = None,
        gate: bytes = b'{"links": []}',
        page_error: Exception | None = None,
        gate_error: Exception | None = None,
    ):
        self.page = page
        self.gate = gate
        self.page_error = page_error
        self.gate_error = gate_error
        self.gets: list[dict] = []
        self.posts: list[dict] = []

    async def get(self, url, *, timeout=None, headers=None):
        """Mock GET request."""
        self.gets.append({"url": url, "timeout": timeout})
        if self.page_error is not None:
            raise self.page_error
        return make_response(url, self.page or b"")

    async def post(self, url, *, json=None, timeout=None, headers=None):
        """Mock POST request."""
        self.posts.append({"url": url, "json": json, "timeout": timeout, "headers": headers})
        if self.gate_error is not None:
            raise self.gate_error
        return make_response(url, self.gate, "application/json")


class TestGetProfile:
    """End-to-end tests for Scraper.get_profile with a mocked client."""

    @pytest.mark.asyncio
    async def test_end_to_end_alice(self):
        """Test visible and gated links are merged into the profile."""
        client = MockHttpClient(
            page=make_page(ALICE_PAGE_PROPS),
            gate=b'{"links":[{"url":"https://hidden.example"}]}',
        )

        async with Scraper(http_client=client) as scraper:
            result = await scraper.get_profile(username="alice")

        assert result.profile == Profile(
            username="alice",
            source_url="https://linktr.ee/alice",
            account_id=1,
            tier="Unknown",
            is_active=True,
            links=[Link("https://a.example"), Link("https://hidden.example")],
        )
        assert result.raw == ALICE_PAGE_PROPS
        assert result.link_error is None
        assert result.is_partial is False

        assert client.gets[0]["url"] == "https://linktr.ee/alice"
        assert client.posts[0]["json"]["accountId"] == 1
        assert client.posts[0]["json"]["validationInput"]["acceptedSensitiveContent"] == [11]

    @pytest.mark.asyncio
    async def test_url_takes_precedence(self):
        """Test that a supplied URL is fetched and kept as source_url."""
        client = MockHttpClient(page=make_page(ALICE_PAGE_PROPS))

        async with Scraper(http_client=client) as scraper:
            result = await scraper.get_profile(url="https://linktr.ee/alice?utm_source=x", username="ignored")

        assert client.gets[0]["url"] == "https://linktr.ee/alice?utm_source=x"
        assert result.profile.source_url == "https://linktr.ee/alice?utm_source=x"

    @pytest.mark.asyncio
    async def test_source_url_from_account_username(self):
        """Test the derived URL uses the username the page reports."""
        page_props = {"account": {"id": 1, "username": "Alice"}, "links": []}
        client = MockHttpClient(page=make_page(page_props))

        async with Scraper(http_client=client) as scraper:
            result = await scraper.get_profile(username="alice")

        assert result.profile.source_url == "https://linktr.ee/Alice"

    @pytest.mark.asyncio
    async def test_timeout_propagates_to_both_calls(self):
        """Test that the caller's timeout reaches the page fetch and unlock call."""
        client = MockHttpClient(page=make_page(ALICE_PAGE_PROPS))

        async with Scraper(http_client=client) as scraper:
            await scraper.get_profile(username="alice", timeout=7.5)

        assert client.gets[0]["timeout"] == 7.5
        assert client.posts[0]["timeout"] == 7.5

    @pytest.mark.asyncio
    @pytest.mark.parametrize("url,username", [(None, None), ("", ""), (None, "")])
    async def test_no_input_raises(self, url, username):
        """Test that a URL or username is required."""
        client = MockHttpClient()

        async with Scraper(http_client=client) as scraper:
            with pytest.raises(InputError, match="username or url"):
                await scraper.get_profile(url=url, username=username)

        assert client.gets == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("url,username", [("ftp://linktr.ee/alice", None), (None, "alice/../admin")])
    async def test_invalid_input_raises(self, url, username):
        """Test that malformed input is rejected before any request."""
        client = MockHttpClient()

        async with Scraper(http_client=client) as scraper:
            with pytest.raises(InputError):
                await scraper.get_profile(url=url, username=username)

        assert client.gets == []

    @pytest.mark.asyncio
    async def test_page_fetch_failure_is_fatal(self):
        """Test that a failed page fetch aborts the call."""
        client = MockHttpClient(page_error=TransportError("HTTP 404", status_code=404))

        async with Scraper(http_client=client) as scraper:
            with pytest.raises(TransportError):
                await scraper.get_profile(username="nobody")

    @pytest.mark.asyncio
    async def test_missing_payload_is_fatal(self):
        """Test that a page without the embedded payload aborts the call."""
        client = MockHttpClient(page=b"<html><body>Sorry, this page isn't available.</body></html>")

        async with Scraper(http_client=client) as scraper:
            with pytest.raises(ExtractionError):
                await scraper.get_profile(username="alice")

    @pytest.mark.asyncio
    async def test_missing_account_is_fatal_with_raw(self):
        """Test that a payload without account raises with the raw tree attached."""
        page_props = {"links": [{"id": 1, "url": "https://a.example"}]}
        client = MockHttpClient(page=make_page(page_props))

        async with Scraper(http_client=client) as scraper:
            with pytest.raises(SchemaError) as exc_info:
                await scraper.get_profile(username="alice")

        assert exc_info.value.raw == page_props
        assert client.posts == []

    @pytest.mark.asyncio
    async def test_unlock_failure_keeps_visible_links(self, caplog):
        """Test that a failed unlock call keeps the profile and its visible links."""
        client = MockHttpClient(page=make_page(ALICE_PAGE_PROPS), gate_error=TransportError("timed out"))

        async with Scraper(http_client=client) as scraper:
            result = await scraper.get_profile(username="alice")

        assert result.profile.username == "alice"
        assert result.profile.account_id == 1
        assert result.profile.links == [Link("https://a.example")]
        assert isinstance(result.link_error, ResolutionError)
        assert result.link_error.raw == ALICE_PAGE_PROPS
        assert result.is_partial is True
        assert "Error getting links for alice" in caplog.text

    @pytest.mark.asyncio
    async def test_invalid_unlock_response_keeps_visible_links(self):
        """Test that a non-JSON unlock response leaves the visible links in place."""
        client = MockHttpClient(page=make_page(ALICE_PAGE_PROPS), gate=b"<html>blocked</html>")

        async with Scraper(http_client=client) as scraper:
            result = await scraper.get_profile(username="alice")

        assert result.profile.link_urls == ["https://a.example"]
        assert isinstance(result.link_error, ResolutionError)

    @pytest.mark.asyncio
    async def test_unusable_gated_id_degrades_to_empty_links(self):
        """Test that a gated link without a usable id drops the links and sends nothing."""
        page_props = {
            "account": {"id": 1, "username": "alice"},
            "links": [
                {"id": 10, "url": "https://a.example"},
                {"id": "eleven", "locked": True},
            ],
        }
        client = MockHttpClient(page=make_page(page_props))

        async with Scraper(http_client=client) as scraper:
            result = await scraper.get_profile(username="alice")

        assert result.profile.links == []
        assert isinstance(result.link_error, CoercionError)
        assert result.link_error.raw == page_props
        assert client.posts == []

    @pytest.mark.asyncio
    async def test_invalid_links_structure_degrades(self):
        """Test that a malformed links array does not discard the profile."""
        page_props = {"account": {"id": 1, "username": "alice"}, "links": "not-a-list"}
        client = MockHttpClient(page=make_page(page_props))

        async with Scraper(http_client=client) as scraper:
            result = await scraper.get_profile(username="alice")

        assert result.profile.username == "alice"
        assert result.profile.links == []
        assert isinstance(result.link_error, SchemaError)

    @pytest.mark.asyncio
    async def test_missing_links_key_degrades(self):
        """Test that a payload without links still yields the account."""
        page_props = {"account": {"id": 1, "username": "alice"}}
        client = MockHttpClient(page=make_page(page_props))

        async with Scraper(http_client=client) as scraper:
            result = await scraper.get_profile(username="alice")

        assert result.profile.links == []
        assert result.is_partial is True

    @pytest.mark.asyncio
    async def test_no_gated_links_single_request(self):
        """Test that only the page is fetched when nothing is gated."""
        page_props = {
            "account": {"id": "42", "username": "bob", "tier": "free"},
            "links": [
                {"id": 1, "url": "https://a.example", "type": "CLASSIC"},
                {"id": 2, "url": "https://shop.example", "type": "COMMERCE_PAY"},
            ],
        }
        client = MockHttpClient(page=make_page(page_props))

        async with Scraper(http_client=client) as scraper:
            result = await scraper.get_profile(username="bob")

        assert result.profile.account_id == 42
        assert result.profile.tier == "free"
        assert result.profile.link_urls == ["https://a.example"]
        assert client.posts == []

    @pytest.mark.asyncio
    async def test_not_initialized(self):
        """Test that get_profile requires the async context."""
        scraper = Scraper()
        with pytest.raises(RuntimeError, match="not initialized"):
            await scraper.get_profile(username="alice")


class TestScraperLifecycle:
    """Tests for Scraper client ownership."""

    @pytest.mark.asyncio
    async def test_owned_client_created_from_config(self):
        """Test that an AsyncHttpClient is built from the network config."""
        config = ScraperConfig(network={"proxy": "http://proxy:8080", "timeout": 12, "max_retries": 0})

        with patch("treescrape.core.scraper.AsyncHttpClient") as mock_client_cls:
            mock_client = AsyncMock()
            mock_client_cls.return_value = mock_client

            async with Scraper(config):
                pass

        kwargs = mock_client_cls.call_args.kwargs
        assert kwargs["proxy"] == "http://proxy:8080"
        assert kwargs["default_timeout"] == 12
        assert kwargs["max_retries"] == 0
        mock_client.__aenter__.assert_awaited_once()
        mock_client.__aexit__.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_injected_client_not_created(self):
        """Test that an injected client is used as is."""
        client = MockHttpClient(page=make_page(ALICE_PAGE_PROPS))

        with patch("treescrape.core.scraper.AsyncHttpClient") as mock_client_cls:
            async with Scraper(http_client=client) as scraper:
                await scraper.get_profile(username="alice")

        mock_client_cls.assert_not_called()


class TestGetProfileBlocking:
    """Tests for the blocking wrapper."""

    def test_blocking_call(self):
        """Test the sync wrapper runs the scrape."""
        client = MockHttpClient(
            page=make_page(ALICE_PAGE_PROPS),
            gate=b'{"links":[{"url":"https://hidden.example"}]}',
        )

        with patch("treescrape.core.scraper.AsyncHttpClient") as mock_client_cls:
            mock_client_cls.return_value.__aenter__ = AsyncMock(return_value=client)
            mock_client_cls.return_value.__aexit__ = AsyncMock(return_value=None)
            mock_client_cls.return_value.get = client.get
            mock_client_cls.return_value.post = client.post

            result = get_profile_blocking(username="alice")

        assert result.profile.link_urls == ["https://a.example", "https://hidden.example"]

    @pytest.mark.asyncio
    async def test_refuses_running_loop(self):
        """Test the sync wrapper refuses to run inside an event loop."""
        with pytest.raises(RuntimeError, match="async context"):
            get_profile_blocking(username="alice")
