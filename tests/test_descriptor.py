"""Tests for the BodyGen descriptor grammar."""

import pytest

from bodymorph.core.descriptor import (
    Slider,
    format_descriptor,
    format_preset_line,
    format_value,
    parse_descriptor,
)


class TestFormat:

    def test_format_value(self):
        assert format_value(1.0) == "1"
        assert format_value(-2) == "-2"
        assert format_value(0.5) == "0.5"
        assert format_value(-0.25) == "-0.25"
        assert format_value(0.1 + 0.2) == "0.30000000000000004"

    def test_format_descriptor(self):
        sliders = [Slider("BigButt", 1.0), Slider("Thighs", -0.5)]

        assert format_descriptor(sliders) == "BigButt@1,Thighs@-0.5"

    def test_empty(self):
        assert format_descriptor([]) == ""

    def test_preset_line(self):
        assert format_preset_line("Curvy", "BigButt@1") == "Curvy=BigButt@1"


class TestParse:

    def test_parse(self):
        assert parse_descriptor("BigButt@1, Thighs @ -0.5") == [
            Slider("BigButt", 1.0),
            Slider("Thighs", -0.5),
        ]

    def test_skips_empty_segments(self):
        assert parse_descriptor("") == []
        assert parse_descriptor("A@1,,") == [Slider("A", 1.0)]

    def test_parse_format_agree(self):
        text = "A@0.3,B@-1,C@0.125"

        assert format_descriptor(parse_descriptor(text)) == text

    @pytest.mark.parametrize("text", ["NoValue", "@1", "A@abc"])
    def test_malformed(self, text):
        with pytest.raises(ValueError):
            parse_descriptor(text)
