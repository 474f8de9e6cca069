"""Unit tests for app.utils validators and JSON extraction."""

import math

import pytest

from app.utils import (
    extract_json_object,
    format_coordinate,
    is_valid_base64_image,
    is_valid_latitude,
    is_valid_longitude,
)


class TestValidators:
    @pytest.mark.parametrize("data", ["data:image/png;base64,iVBORw0KGgo=", "data:image/jpeg;base64,/9j/"])
    def test_accepts_image_data_urls(self, data):
        assert is_valid_base64_image(data)

    @pytest.mark.parametrize(
        "data",
        [
            "iVBORw0KGgo=",
            "data:text/plain;base64,aGVsbG8=",
            "data:image/png,rawbytes",
            "https://example.com/pothole.jpg",
        ],
    )
    def test_rejects_non_image_data_urls(self, data):
        assert not is_valid_base64_image(data)

    @pytest.mark.parametrize("lat", [-90, 0, 45.5, 90])
    def test_latitude_in_range(self, lat):
        assert is_valid_latitude(lat)

    def test_integers_beyond_float_range_rejected(self):
        huge = 10 ** 400
        assert not is_valid_latitude(huge)
        assert not is_valid_latitude(-huge)
        assert not is_valid_longitude(huge)
        assert not is_valid_longitude(-huge)

    @pytest.mark.parametrize("lat", [91, -91, math.nan, math.inf, "12.5", None, True])
    def test_latitude_rejected(self, lat):
        assert not is_valid_latitude(lat)

    @pytest.mark.parametrize("lng", [-180, 0, 179.9999, 180])
    def test_longitude_in_range(self, lng):
        assert is_valid_longitude(lng)

    @pytest.mark.parametrize("lng", [181, -180.01, math.nan, -math.inf, [1], False])
    def test_longitude_rejected(self, lng):
        assert not is_valid_longitude(lng)

    def test_format_coordinate_rounds_to_four_places(self):
        assert format_coordinate(12.971598) == "12.9716"
        assert format_coordinate(-0.5) == "-0.5000"


class TestExtractJsonObject:
    def test_plain_object(self):
        assert extract_json_object('{"isValid": true}') == {"isValid": True}

    def test_fenced_object_with_prose(self):
        text = 'Here is my assessment:\n```json\n{"category": "waste", "confidence": 70}\n```\nThanks!'
        assert extract_json_object(text) == {"category": "waste", "confidence": 70}

    def test_braces_inside_strings_are_ignored(self):
        text = '{"reason": "looks like a } shaped crack", "isValid": true} trailing {'
        assert extract_json_object(text) == {"reason": "looks like a } shaped crack", "isValid": True}

    def test_escaped_quote_inside_string(self):
        text = r'{"title": "The \"big\" pothole"}'
        assert extract_json_object(text) == {"title": 'The "big" pothole'}

    def test_nested_object(self):
        assert extract_json_object('x {"a": {"b": 1}} y') == {"a": {"b": 1}}

    def test_first_object_wins(self):
        assert extract_json_object('{"a": 1} and {"b": 2}') == {"a": 1}

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "I cannot help with that",
            '{"isValid": true',
            "{not json at all}",
            None,
        ],
    )
    def test_unusable_output_returns_none(self, text):
        assert extract_json_object(text) is None
