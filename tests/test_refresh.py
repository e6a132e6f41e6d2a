import pytest

from syndicore.content import extract_redirect_url


@pytest.mark.parametrize(
    "html",
    [
        '<meta http-equiv="refresh" content="0;url=http://example.com">',
        "<meta http-equiv='refresh' content='0; url=http://example.com'>",
        '<meta http-equiv=refresh content="0;url=http://example.com">',
        '<meta content="0; url=http://example.com" http-equiv="refresh">',
        '<meta http-equiv="refresh" content="0;  url=http://example.com">',
        '<meta http-equiv="refresh" content="0 ;url=http://example.com">',
        '<meta http-equiv="Refresh" content="10;URL=http://example.com">',
        '<meta http-equiv="refresh" content="5;url=http://example.com"/>',
    ],
)
def test_extracts_refresh_target(html):
    assert extract_redirect_url(html) == "http://example.com"


def test_extracts_from_full_document():
    html = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta http-equiv="refresh" content="0;url=https://example.com/feed?format=rss#top">
  <title>Redirecting...</title>
</head>
<body><p>Redirecting to new page...</p></body>
</html>"""
    assert extract_redirect_url(html) == "https://example.com/feed?format=rss#top"


@pytest.mark.parametrize(
    "html",
    [
        "",
        "<html></html>",
        '<meta content="something">',
        '<meta http-equiv="content-type" content="text/html">',
        '<meta http-equiv="refresh" content="0;url=">',
        '<meta http-equiv="refresh">',
        '<meta http-equiv="refresh" content="">',
        '<meta http-equiv="refresh" content="0;">',
    ],
)
def test_no_target(html):
    assert extract_redirect_url(html) is None
