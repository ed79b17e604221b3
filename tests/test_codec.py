"""
Tests for the stored value codec.
"""

import json
import warnings

import pytest

from featureflags.core.exceptions import DecodeWarning, FeatureValidationError
from featureflags.storage.codec import (
    decode_value,
    encode_value,
    parse_cli_value,
    validate_value,
)


class TestEncodeValue:
    """Tests for encode_value."""

    def test_none_stays_null(self):
        assert encode_value(None) is None

    def test_scalars_encode_as_json(self):
        assert encode_value(500) == "500"
        assert encode_value(True) == "true"
        assert encode_value("on") == '"on"'
        assert encode_value(1.5) == "1.5"

    def test_nested_structure(self):
        encoded = encode_value({"limit": 100, "tags": ["a", "b"]})
        assert encoded == '{"limit":100,"tags":["a","b"]}'

    def test_unicode_kept_readable(self):
        assert encode_value("café") == '"café"'

    def test_rejects_non_json_types(self):
        with pytest.raises(FeatureValidationError) as exc:
            encode_value({"when": object()})
        assert exc.value.details["path"] == "$.when"

    def test_rejects_non_string_keys(self):
        with pytest.raises(FeatureValidationError):
            encode_value({1: "one"})

    def test_rejects_nan(self):
        with pytest.raises(FeatureValidationError):
            encode_value([1.0, float("nan")])

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            validate_value({"bad": {1, 2}})


class TestDecodeValue:
    """Tests for decode_value."""

    def test_null_and_empty(self):
        assert decode_value(None) is None
        assert decode_value("") is None

    def test_decodes_structures(self):
        assert decode_value('{"limit":100,"tags":["a","b"]}') == {"limit": 100, "tags": ["a", "b"]}

    def test_number_types_survive(self):
        assert decode_value("500") == 500
        assert isinstance(decode_value("500"), int)
        assert decode_value("0.25") == 0.25

    def test_invalid_json_passes_through_with_warning(self):
        with pytest.warns(DecodeWarning):
            assert decode_value("not json {") == "not json {"

    def test_valid_json_emits_no_warning(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            assert decode_value("false") is False


class TestParseCliValue:
    """Tests for parse_cli_value."""

    def test_json_text_is_parsed(self):
        assert parse_cli_value("1000") == 1000
        assert parse_cli_value('{"a": [1]}') == {"a": [1]}

    def test_plain_text_kept(self):
        assert parse_cli_value("blue") == "blue"

    @pytest.mark.parametrize("raw", ["NaN", "Infinity", "-Infinity", "[1, NaN]"])
    def test_non_finite_constants_kept_as_text(self, raw):
        assert parse_cli_value(raw) == raw
        assert encode_value(parse_cli_value(raw)) == json.dumps(raw)

    def test_none(self):
        assert parse_cli_value(None) is None
