"""Tests for tolerant payload decoding."""

import pytest

from crcast_source.decode import decode_payload, require_list, require_mapping
from crcast_source.errors import DeckFormatError

STRICT = {"calls": [{"text": ["A", "B"]}], "responses": [{"text": ["R"]}]}


def test_structured_passthrough():
    assert decode_payload(STRICT) is STRICT


def test_list_passthrough():
    doc = [1, 2]
    assert decode_payload(doc) is doc


def test_strict_json_string():
    text = '{"calls": [{"text": ["A", "B"]}], "responses": [{"text": ["R"]}]}'
    assert decode_payload(text) == STRICT


def test_trailing_commas():
    text = '{"calls": [{"text": ["A", "B",],},], "responses": [{"text": ["R"],},],}'
    assert decode_payload(text) == STRICT


def test_unquoted_keys_and_comments():
    text = """
    // exported by CrCast
    {
        calls: [{text: ["A", "B"]}],
        /* responses follow */
        responses: [{text: ['R']}],
    }
    """
    assert decode_payload(text) == STRICT


def test_bytes_body():
    assert decode_payload(b'{name: "Deck"}') == {"name": "Deck"}


def test_garbage_raises():
    with pytest.raises(DeckFormatError, match="could not be parsed"):
        decode_payload("<html>Bad Gateway</html>", "deck info")


def test_empty_string_raises():
    with pytest.raises(DeckFormatError):
        decode_payload("")


def test_unexpected_type_raises():
    with pytest.raises(DeckFormatError, match="unexpected type int"):
        decode_payload(42)


def test_require_mapping():
    assert require_mapping({"a": 1}) == {"a": 1}
    with pytest.raises(DeckFormatError, match="must be an object"):
        require_mapping([1], "deck info")


def test_require_list():
    assert require_list(STRICT, "calls") == STRICT["calls"]
    with pytest.raises(DeckFormatError, match="missing a 'responses' list"):
        require_list({"calls": []}, "responses", "deck cards")
