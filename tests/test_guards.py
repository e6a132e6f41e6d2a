import pytest
from pydantic import ValidationError

from syndicore.resilience import GuardSignature, detect_guarded_page, detect_guarded_url
from syndicore.resilience.guards import detect_rate_limited

CLOUDFLARE_PAGE = """<!DOCTYPE html><html lang="en-US"><head>
<title>Just a moment...</title></head><body>Checking your browser</body></html>"""


def test_cloudflare_page_requires_403():
    assert detect_guarded_page(CLOUDFLARE_PAGE, 403).name == "Cloudflare"
    assert detect_guarded_page(CLOUDFLARE_PAGE, 200) is None


def test_siteground_page():
    page = '<html><meta http-equiv="refresh" content="0;/.well-known/sgcaptcha/?r=%2Ffeed"></html>'
    assert detect_guarded_page(page, 202).name == "SiteGround"
    assert detect_guarded_page(page, 200) is None


@pytest.mark.parametrize(
    "page",
    [
        '<script src="/.lsrecap/recaptcha?v=1"></script>',
        '<script src="https://www.recaptcha.net/recaptcha/api.js"></script>',
        "<p>Verifying that you are not a robot...</p>",
    ],
)
def test_recaptcha_interstitials(page):
    assert detect_guarded_page(page, 200).name == "Unknown"


def test_ordinary_feed_is_not_guarded():
    assert detect_guarded_page("<rss><channel><title>Just a moment</title></channel></rss>", 200) is None


@pytest.mark.parametrize(
    "url, name",
    [
        ("https://example.com/.well-known/sgcaptcha/?r=%2Ffeed", "SiteGround"),
        ("https://example.com/.well-known/captcha/", "SiteGround"),
        ("https://example.com/cdn-cgi/challenge-platform/h/b/orchestrate", "Cloudflare"),
        ("https://example.com/.lsrecap/recaptcha?q=1", "Unknown"),
    ],
)
def test_guarded_urls(url, name):
    assert detect_guarded_url(url).name == name


def test_plain_url_is_not_guarded():
    assert detect_guarded_url("https://example.com/feed.xml") is None


def test_custom_signatures():
    signatures = [GuardSignature(name="Custom", text="/blocked", status=None)]

    assert detect_guarded_page("see /blocked", 500, signatures).name == "Custom"
    assert detect_guarded_url("https://example.com/blocked", signatures).name == "Custom"


def test_signatures_are_immutable():
    signature = GuardSignature(name="Custom", text="x")
    with pytest.raises(ValidationError):
        signature.text = "y"


@pytest.mark.parametrize(
    "status, hostname, expected",
    [
        (429, "example.com", 300),
        (403, "api.github.com", 600),
        (403, "github.com", 600),
        (403, "someone.github.io", 600),
    ],
)
def test_rate_limited_responses(status, hostname, expected):
    assert detect_rate_limited(status, hostname).fallback_seconds == expected


@pytest.mark.parametrize(
    "status, hostname",
    [(403, "example.com"), (403, "notgithub.com"), (200, "github.com"), (503, "example.com")],
)
def test_not_rate_limited(status, hostname):
    assert detect_rate_limited(status, hostname) is None
