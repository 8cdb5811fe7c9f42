"""Tests for the request grammar parser."""

import pytest

from meta_exporter.errors import InvalidOptionError
from meta_exporter.models import WrapSpec
from meta_exporter.request import parse_options, parse_request


def test_names_and_tags():
    """Test bare names and colon-prefixed tags."""
    request = parse_request(["f1", ":a"])

    assert [(item.kind, item.identifier) for item in request.items] == [
        ("name", "f1"),
        ("tag", "a"),
    ]
    assert request.on_clash is None


def test_empty_request():
    """Test that no tokens yield an empty request."""
    assert parse_request([]).is_empty


def test_options_follow_item():
    """Test that a mapping applies to the preceding name or tag."""
    request = parse_request(["f1", ":a", {"prefix": "a_"}, "f2", {"as": "bar"}])

    assert request.items[0].options.prefix is None
    assert request.items[1].kind == "tag"
    assert request.items[1].options.prefix == "a_"
    assert request.items[2].options.as_ == "bar"


def test_pair_tokens():
    """Test (name, options) pairs."""
    request = parse_request([(":b", {"suffix": "_s"}), ("f1", {"wrap": False})])

    assert request.items[0].kind == "tag"
    assert request.items[0].options.suffix == "_s"
    assert request.items[1].options.wrap == WrapSpec(enabled=False)


def test_request_option_token():
    """Test -on_clash followed by its value."""
    request = parse_request(["f1", "-on_clash", "bail"])

    assert len(request.items) == 1
    assert request.on_clash == "bail"


def test_request_option_keyword():
    """Test request-wide options passed as keywords."""
    assert parse_request(["f1"], on_clash="force").on_clash == "force"


def test_wrap_shortcuts():
    """Test args_as and curry shortcuts merge into the wrap conversion."""
    options = parse_options({"args_as": "array", "curry": {"a": 10}})
    assert options.wrap == WrapSpec(conversion={"args_as": "array", "curry": {"a": 10}})

    options = parse_options({"wrap": {"convert": {"timeout": 10}}, "curry": {"a": 1}})
    assert options.wrap.conversion == {"timeout": 10, "curry": {"a": 1}}


def test_wrap_forms():
    """Test bool and mapping forms of the wrap option."""
    assert parse_options({"wrap": True}).wrap == WrapSpec()
    assert parse_options({"wrap": 0}).wrap == WrapSpec(enabled=False)
    assert parse_options({"wrap": {"convert": {"retry": 3}}}).wrap == WrapSpec(
        conversion={"retry": 3}
    )


@pytest.mark.parametrize(
    "tokens",
    [
        [{"prefix": "x_"}],
        ["f1", {"prefix": "x_"}, {"suffix": "_y"}],
        ["f1", {"bogus": 1}],
        ["f1", {"as": 5}],
        ["f1", {"on_clash": "maybe"}],
        ["f1", {"wrap": "yes"}],
        ["f1", {"wrap": False, "curry": {"a": 1}}],
        ["f1", "-on_clash"],
        ["f1", "-bogus", 1],
        ["f1", "-on_clash", "sometimes"],
        [":"],
        [42],
        [("f1",)],
    ],
)
def test_invalid_requests(tokens):
    """Test malformed requests raise InvalidOptionError."""
    with pytest.raises(InvalidOptionError):
        parse_request(tokens)
