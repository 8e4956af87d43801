"""Tests for the total field coercers."""

import math

import pytest

from craftconnect.schemas.fields import (
    OVERSIZED_INT,
    as_bool,
    as_choice,
    as_int,
    as_text,
    as_text_list,
    parse_leading_int,
    pick,
    section,
)


class TestPick:
    def test_first_present_key_wins(self):
        payload = {"businessType": "A", "business_type": "B"}
        assert pick(payload, "businessType", "business_type") == "A"

    def test_alias(self):
        assert pick({"business_type": "B"}, "businessType", "business_type") == "B"

    def test_non_mapping(self):
        assert pick(["a"], "a") is None
        assert pick(None, "a") is None

    def test_section_always_mapping(self):
        assert section({"a": "text"}, "a") == {}
        assert section({"a": {"b": 1}}, "a") == {"b": 1}


class TestAsInt:
    def test_in_range(self):
        assert as_int(87, 85, minimum=0, maximum=100) == 87

    def test_clamped_high(self):
        assert as_int(120, 85, minimum=0, maximum=100) == 100

    def test_clamped_low(self):
        assert as_int(-5, 85, minimum=0, maximum=100) == 0

    def test_float_rounds(self):
        assert as_int(86.6, 85, minimum=0, maximum=100) == 87

    def test_numeric_string(self):
        assert as_int("87%", 85, minimum=0, maximum=100) == 87

    def test_oversized_numeric_string_clamped(self):
        assert as_int("9" * 5000, 85, minimum=0, maximum=100) == 100
        assert as_int("-" + "9" * 5000, 85, minimum=0, maximum=100) == 0

    def test_numeric_string_clamped(self):
        assert as_int("250", 85, minimum=0, maximum=100) == 100

    def test_non_numeric_string(self):
        assert as_int("high", 85, minimum=0, maximum=100) == 85

    def test_strings_disallowed(self):
        assert as_int("87", 85, allow_strings=False) == 85

    @pytest.mark.parametrize("value", [True, False])
    def test_bool_is_not_a_number(self, value):
        assert as_int(value, 85, minimum=0, maximum=100) == 85

    def test_nan(self):
        assert as_int(math.nan, 85, minimum=0, maximum=100) == 85

    def test_infinity_clamps_to_bound(self):
        assert as_int(math.inf, 85, minimum=0, maximum=100) == 100
        assert as_int(-math.inf, 85, minimum=0, maximum=100) == 0

    def test_infinity_without_bound(self):
        assert as_int(math.inf, 85) == 85

    @pytest.mark.parametrize("value", [None, [], {}, object()])
    def test_other_types(self, value):
        assert as_int(value, 85) == 85


class TestParseLeadingInt:
    def test_prefix(self):
        assert parse_leading_int("  42 rupees") == 42

    def test_signed(self):
        assert parse_leading_int("-7") == -7

    def test_no_digits(self):
        assert parse_leading_int("about 42") is None

    def test_oversized_digits_keep_sign(self):
        assert parse_leading_int("9" * 5000) == OVERSIZED_INT
        assert parse_leading_int("-" + "9" * 5000) == -OVERSIZED_INT


class TestAsText:
    def test_kept_verbatim(self):
        assert as_text("  Pottery ", "x") == "  Pottery "

    @pytest.mark.parametrize("value", ["", "   ", None, 42, ["a"]])
    def test_default(self, value):
        assert as_text(value, "Craft Business") == "Craft Business"


class TestAsBool:
    def test_bool(self):
        assert as_bool(False, True) is False

    @pytest.mark.parametrize(
        "value,expected",
        [("true", True), (" Yes ", True), ("FALSE", False), ("no", False)],
    )
    def test_strings(self, value, expected):
        assert as_bool(value, not expected) is expected

    @pytest.mark.parametrize("value", [1, 0, "maybe", None])
    def test_default(self, value):
        assert as_bool(value, True) is True


class TestAsChoice:
    def test_case_insensitive_trimmed(self):
        allowed = ("website", "whatsapp")
        assert as_choice("  WhatsApp ", allowed, "website") == "whatsapp"

    def test_not_allowed(self):
        assert as_choice("facebook", ("website", "whatsapp"), "website") == "website"

    def test_non_string(self):
        assert as_choice(3, ("website",), "website") == "website"


class TestAsTextList:
    def test_filters_empty_and_non_strings(self):
        assert as_text_list(["a", "", "  ", 3, None, "b"], ["d"]) == ["a", "b"]

    def test_missing_uses_default(self):
        assert as_text_list(None, ["d"], ["e"]) == ["d"]

    def test_all_filtered_uses_empty_default(self):
        assert as_text_list(["", 1], ["d"], ["e"]) == ["e"]

    def test_all_filtered_without_empty_default(self):
        assert as_text_list([], ["d"]) == ["d"]

    def test_tuple_accepted(self):
        assert as_text_list(("a", "b"), ["d"]) == ["a", "b"]

    def test_default_is_copied(self):
        default = ["d"]
        result = as_text_list(None, default)
        result.append("x")
        assert default == ["d"]
