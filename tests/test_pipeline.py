import asyncio
import json

import httpx
import pytest

from syndicore.errors import (
    FeedParseError,
    GuardedPageError,
    GuardedUrlError,
    RateLimitError,
    UnprocessedPipelineError,
)
from syndicore.resilience import FeedFetcher, FetchContext, Pipeline, RateLimiter

RSS = b"""<?xml version="1.0"?>
<rss version="2.0"><channel><title>Example</title>
<item><guid>1</guid><title>One</title></item>
<item><guid>2</guid><title>Two</title></item>
</channel></rss>"""

JSON_FEED = {
    "version": "https://jsonfeed.org/version/1.1",
    "title": "Example",
    "items": [{"id": "1", "content_text": "Hello"}],
}

CLOUDFLARE_PAGE = "<html><head><title>Just a moment...</title></head></html>"


def make_fetcher(store, handler):
    return FeedFetcher(RateLimiter(store), transport=httpx.MockTransport(handler))


def fetch(store, handler, url="https://example.com/feed"):
    return asyncio.run(make_fetcher(store, handler).fetch_feed(url))


def test_fetches_rss(store):
    def handler(request):
        return httpx.Response(200, content=RSS, headers={"content-type": "application/rss+xml"})

    document = fetch(store, handler)

    assert document.format == "rss"
    assert document.version == "2.0"
    assert document.feed.title == "Example"
    assert document.item_count == 2


def test_fetches_json_feed(store):
    def handler(request):
        return httpx.Response(200, json=JSON_FEED, headers={"content-type": "application/feed+json"})

    document = fetch(store, handler)

    assert document.format == "jsonfeed"
    assert document.version == "https://jsonfeed.org/version/1.1"
    assert document.feed.items[0].content_text == "Hello"


def test_sends_user_agent(store):
    seen = []

    def handler(request):
        seen.append(request.headers["user-agent"])
        return httpx.Response(200, content=RSS)

    fetch(store, handler)
    assert seen[0].startswith("Mozilla/5.0 (compatible; syndicore")


def test_preflight_blocks_cooling_domain(store):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, content=RSS)

    store.values["rate_limit:example.com"] = "1"
    store.expiries["rate_limit:example.com"] = 90

    with pytest.raises(RateLimitError) as excinfo:
        fetch(store, handler)

    assert excinfo.value.reason == "example.com (cached)"
    assert calls == []


def test_429_records_header_cool_down(store):
    def handler(request):
        return httpx.Response(429, headers={"retry-after": "120"})

    with pytest.raises(RateLimitError) as excinfo:
        fetch(store, handler)

    assert excinfo.value.reason == "Rate limit"
    assert store.expiries == {"rate_limit:example.com": 120}


def test_429_without_headers_uses_fallback(store):
    def handler(request):
        return httpx.Response(429)

    with pytest.raises(RateLimitError):
        fetch(store, handler)
    assert store.expiries == {"rate_limit:example.com": 300}


def test_github_403_is_rate_limited(store):
    def handler(request):
        return httpx.Response(403, text="API rate limit exceeded")

    with pytest.raises(RateLimitError) as excinfo:
        fetch(store, handler, "https://raw.github.com/user/repo/feed.xml")

    assert excinfo.value.reason == "GitHub"
    assert store.expiries == {"rate_limit:raw.github.com": 600}


def test_other_403_is_unprocessed(store):
    def handler(request):
        return httpx.Response(403, text="Forbidden")

    with pytest.raises(UnprocessedPipelineError) as excinfo:
        fetch(store, handler)

    assert excinfo.value.status == 403
    assert store.values == {}


def test_cloudflare_wall(store):
    def handler(request):
        return httpx.Response(403, text=CLOUDFLARE_PAGE, headers={"server": "cloudflare"})

    with pytest.raises(GuardedPageError) as excinfo:
        fetch(store, handler)

    assert excinfo.value.guard_type == "Cloudflare"
    assert not excinfo.value.is_retryable


def test_guarded_request_url(store):
    def handler(request):
        return httpx.Response(200, content=RSS)

    with pytest.raises(GuardedUrlError) as excinfo:
        fetch(store, handler, "https://example.com/.well-known/sgcaptcha/?r=%2Ffeed")
    assert excinfo.value.guard_type == "SiteGround"


def test_redirect_to_challenge(store):
    def handler(request):
        if request.url.path == "/feed":
            return httpx.Response(
                302, headers={"location": "https://example.com/cdn-cgi/challenge-platform/h/b"}
            )
        return httpx.Response(200, text="<html></html>")

    with pytest.raises(GuardedUrlError) as excinfo:
        fetch(store, handler)
    assert excinfo.value.guard_type == "Cloudflare"


def test_transport_errors_pass_through(store):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(httpx.ConnectError):
        fetch(store, handler)


def test_server_error_is_unprocessed(store):
    def handler(request):
        return httpx.Response(500, text="oops")

    with pytest.raises(UnprocessedPipelineError) as excinfo:
        fetch(store, handler)

    assert str(excinfo.value) == "Unprocessed pipeline, HTTP code: 500"
    assert excinfo.value.is_retryable


def test_pipeline_skips_work_once_result_is_set():
    calls = []

    async def short_circuit(context, next_step):
        calls.append("first")
        context.result = "cached"
        await next_step()

    async def worker(context, next_step):
        calls.append("second")
        if context.result is None:
            context.result = "fresh"
        await next_step()

    result = asyncio.run(Pipeline([short_circuit, worker]).run(FetchContext("https://example.com")))

    assert result == "cached"
    assert calls == ["first", "second"]


def test_empty_pipeline_is_unprocessed():
    with pytest.raises(UnprocessedPipelineError) as excinfo:
        asyncio.run(Pipeline([]).run(FetchContext("https://example.com")))
    assert str(excinfo.value) == "Unprocessed pipeline, HTTP code: Unknown"


def test_fetch_result_reports_failures(store):
    def handler(request):
        if request.url.host == "limited.example":
            return httpx.Response(429, headers={"retry-after": "30"})
        if request.url.host == "broken.example":
            return httpx.Response(200, text="<html>not a feed</html>", headers={"content-type": "text/html"})
        return httpx.Response(200, content=json.dumps(JSON_FEED).encode())

    fetcher = make_fetcher(store, handler)
    results = fetcher.fetch_feeds_sync(
        ["https://ok.example/feed", "https://limited.example/feed", "https://broken.example/feed"]
    )
    ok, limited, broken = results

    assert ok.success and ok.item_count == 1 and ok.error is None
    assert not limited.success
    assert limited.retryable
    assert limited.retry_delay_ms == 35000
    assert limited.error == "RateLimitError: Rate limit: https://limited.example/feed"
    assert not broken.success
    assert not broken.retryable
    assert broken.error.startswith("FeedParseError: Unreadable feed")


def test_fetch_feed_sync(store):
    def handler(request):
        return httpx.Response(200, content=RSS)

    assert make_fetcher(store, handler).fetch_feed_sync("https://example.com/feed").item_count == 2
    assert make_fetcher(store, handler).fetch_feeds_sync([]) == []


def refresh_page(target):
    return f'<html><head><meta http-equiv="refresh" content="0; url={target}"></head></html>'


def test_follows_meta_refresh(store):
    requested = []

    def handler(request):
        requested.append(str(request.url))
        if request.url.path == "/feed":
            return httpx.Response(200, text=refresh_page("https://feeds.example.net/rss"))
        return httpx.Response(200, content=RSS)

    document = fetch(store, handler)

    assert document.item_count == 2
    assert requested == ["https://example.com/feed", "https://feeds.example.net/rss"]


def test_follows_relative_meta_refresh(store):
    def handler(request):
        if request.url.path == "/feed":
            return httpx.Response(200, text=refresh_page("/feed.xml"))
        return httpx.Response(200, content=RSS)

    assert fetch(store, handler).feed.title == "Example"


def test_redirected_domain_is_rate_limit_checked(store):
    store.values["rate_limit:feeds.example.net"] = "1"

    def handler(request):
        return httpx.Response(200, text=refresh_page("https://feeds.example.net/rss"))

    with pytest.raises(RateLimitError) as excinfo:
        fetch(store, handler)
    assert excinfo.value.reason == "feeds.example.net (cached)"


def test_self_refresh_is_not_followed(store):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, text=refresh_page("https://example.com/feed"))

    with pytest.raises(FeedParseError):
        fetch(store, handler)
    assert len(calls) == 1


def test_refresh_loop_stops(store):
    calls = []

    def handler(request):
        calls.append(request)
        target = "/b" if request.url.path == "/a" else "/a"
        return httpx.Response(200, text=refresh_page(target))

    with pytest.raises(FeedParseError):
        fetch(store, handler, "https://example.com/a")
    assert len(calls) == 6


def test_feed_with_refresh_in_content_is_parsed(store):
    description = b"<description><![CDATA[" + refresh_page("/elsewhere").encode() + b"]]></description>"
    body = RSS.replace(b"<title>One</title>", b"<title>One</title>" + description)

    def handler(request):
        return httpx.Response(200, content=body)

    assert fetch(store, handler).item_count == 2


def test_atom_feed_is_reported_as_failure(store):
    def handler(request):
        return httpx.Response(
            200,
            text='<feed xmlns="http://www.w3.org/2005/Atom"><title>Atom</title><entry><id>1</id></entry></feed>',
            headers={"content-type": "application/atom+xml"},
        )

    result = asyncio.run(make_fetcher(store, handler).fetch_result("https://example.com/atom"))

    assert not result.success
    assert not result.retryable
    assert "unsupported root <feed>" in result.error


def test_url_without_host_does_not_abort_batch(store):
    def handler(request):
        return httpx.Response(200, content=RSS)

    good, bad = make_fetcher(store, handler).fetch_feeds_sync(
        ["https://example.com/feed", "example.org/feed"]
    )

    assert good.success and good.item_count == 2
    assert not bad.success
    assert not bad.retryable
    assert bad.error == "InvalidUrlError: URL has no hostname: example.org/feed"
