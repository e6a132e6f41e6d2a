import pytest

from syndicore.errors import FeedValidationError
from syndicore.parsers import check_opml, dump_opml, parse_opml, validate_opml
from syndicore.parsers.opml import ValidatedOpml1, ValidatedOpml20

FIXTURE_NAMES = [
    "category",
    "directory",
    "placesLived",
    "simpleScript",
    "states",
    "subscriptionList",
]


def opml_document(body: str, version: str = "2.0", head: str = "<title>t</title>") -> str:
    return f'<?xml version="1.0"?><opml version="{version}"><head>{head}</head><body>{body}</body></opml>'


def issue_paths(xml: str):
    with pytest.raises(FeedValidationError) as excinfo:
        validate_opml(xml)
    return excinfo.value.paths


@pytest.mark.parametrize("name", FIXTURE_NAMES)
def test_parse_matches_golden_output(fixtures_dir, name):
    xml = (fixtures_dir / "opml" / f"{name}.opml").read_bytes()
    expected = (fixtures_dir / "opml" / f"{name}.json").read_text(encoding="utf-8")

    assert dump_opml(parse_opml(xml)) == expected.rstrip("\n")


@pytest.mark.parametrize("name", FIXTURE_NAMES)
def test_fixtures_pass_validation(fixtures_dir, name):
    xml = (fixtures_dir / "opml" / f"{name}.opml").read_bytes()

    assert isinstance(validate_opml(xml), ValidatedOpml20)
    assert check_opml(xml).is_valid


def test_parse_empty_input_is_absent():
    assert parse_opml("") is None
    assert parse_opml("   \n") is None


def test_parse_non_opml_root_is_absent():
    assert parse_opml("<rss><channel/></rss>") is None


def test_parse_keeps_unknown_attributes_in_order():
    document = parse_opml(opml_document('<outline zeta="1" text="a" customAttr="x"/>'))
    outline = document.body.outline[0]

    assert outline.attributes == {"zeta": "1", "text": "a", "customAttr": "x"}
    assert outline.outline is None


def test_parse_fills_defaults_for_missing_parts():
    document = parse_opml("<opml><head/><body/></opml>")

    assert document.version == ""
    assert document.head == {}
    assert document.body.outline == []
    assert dump_opml(document) == '{\n  "version": "",\n  "head": {},\n  "body": {\n    "outline": []\n  }\n}'


def test_parse_nested_outlines():
    document = parse_opml(
        opml_document('<outline text="parent"><outline text="child"><outline text="leaf"/></outline></outline>')
    )
    parent = document.body.outline[0]

    assert parent.attributes == {"text": "parent"}
    assert parent.outline[0].outline[0].attributes == {"text": "leaf"}


def test_validate_v1_outline_flags():
    document = validate_opml(
        opml_document('<outline text="a" isComment="true" isBreakpoint="false"/>', version="1.0")
    )
    assert isinstance(document, ValidatedOpml1)
    assert document.body.outline[0].is_comment == "true"

    paths = issue_paths(opml_document('<outline text="a" isComment="yes"/>', version="1.1"))
    assert paths == ["body.outline.0.isComment"]


def test_validate_v1_children_are_checked():
    xml = opml_document(
        '<outline text="a"><outline text="b" isBreakpoint="1"/></outline>', version="1.0"
    )
    assert issue_paths(xml) == ["body.outline.0.outline.0.isBreakpoint"]


def test_validate_v1_head_accepts_any_date_string():
    head = "<dateCreated>yesterday</dateCreated><windowTop>10</windowTop>"
    document = validate_opml(opml_document('<outline text="a"/>', version="1.0", head=head))

    assert document.head.date_created == "yesterday"
    assert document.head.window_top == 10


def test_validate_v2_rss_requires_xml_url():
    assert issue_paths(opml_document('<outline text="Feed" type="rss"/>')) == ["body.outline.0.xmlUrl"]

    document = validate_opml(
        opml_document('<outline text="Feed" type="rss" xmlUrl="https://example.com/feed" version="RSS2"/>')
    )
    assert document.body.outline[0].xml_url == "https://example.com/feed"


def test_validate_v2_rss_version_enum():
    xml = opml_document('<outline text="Feed" type="rss" xmlUrl="https://example.com/feed" version="Atom"/>')
    assert issue_paths(xml) == ["body.outline.0.version"]


@pytest.mark.parametrize("outline_type", ["link", "include"])
def test_validate_v2_link_and_include_require_url(outline_type):
    xml = opml_document(f'<outline text="x" type="{outline_type}"/>')
    assert issue_paths(xml) == ["body.outline.0.url"]


def test_validate_v2_untyped_outline_passes_through():
    document = validate_opml(opml_document('<outline text="x" type="custom" extra="kept"/>'))
    outline = document.body.outline[0]

    assert outline.type == "custom"
    assert outline.model_extra == {"extra": "kept"}


def test_validate_v2_requires_text_at_every_level():
    xml = opml_document('<outline text="a"><outline text="b"/><outline type="link" url="u"/></outline>')
    assert issue_paths(xml) == ["body.outline.0.outline.1.text"]


def test_validate_v2_head_types():
    head = "<dateCreated>not a date</dateCreated><windowTop>abc</windowTop><vertScrollState>3</vertScrollState>"
    paths = issue_paths(opml_document('<outline text="a"/>', head=head))
    assert set(paths) == {"head.dateCreated", "head.windowTop"}


def test_validate_unknown_version():
    assert issue_paths(opml_document('<outline text="a"/>', version="3.0")) == ["version"]


def test_validate_reports_every_issue():
    xml = opml_document('<outline type="rss"/><outline text="ok"/><outline type="link"/>')
    paths = issue_paths(xml)

    assert "body.outline.0.text" in paths
    assert "body.outline.0.xmlUrl" in paths
    assert "body.outline.2.url" in paths
    assert not any(path.startswith("body.outline.1") for path in paths)


def test_check_opml_never_raises():
    result = check_opml("")
    assert not result.is_valid
    assert result.error.is_retryable is False

    assert not check_opml("<rss/>").is_valid
