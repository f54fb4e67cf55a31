"""Tests for quantity phrase parsing."""

import pytest

from order_assistant.ordering.nlp import (
    QuantityPhrase,
    parse_quantity_phrase,
    query_words,
    strip_filler_prefix,
)


class TestUnitPhrasing:
    """"<n> <unit> [of] <item>" phrasing."""

    def test_boxes_of_napkins(self):
        assert parse_quantity_phrase("5 boxes of napkins") == QuantityPhrase(5, "napkins")

    def test_without_of(self):
        assert parse_quantity_phrase("12 rolls paper towels") == QuantityPhrase(12, "paper towels")

    def test_inside_sentence(self):
        """Should find the phrase after leading words and lower-case the fragment."""
        result = parse_quantity_phrase("Can I get 3 Cases of Hot Cups please?")
        assert result == QuantityPhrase(3, "hot cups")

    @pytest.mark.parametrize("unit", ["box", "case", "pack", "bottle", "carton", "dozen", "bundles", "packages"])
    def test_unit_variants(self, unit):
        result = parse_quantity_phrase(f"2 {unit} of lids")
        assert result == QuantityPhrase(2, "lids")

    def test_zero_is_clamped(self):
        assert parse_quantity_phrase("0 boxes of napkins").quantity == 1


class TestTrailingPhrasing:
    """"<item> x <n>" phrasing."""

    def test_napkins_x_5(self):
        assert parse_quantity_phrase("napkins x 5") == QuantityPhrase(5, "napkins")

    def test_no_spaces(self):
        assert parse_quantity_phrase("napkins x5") == QuantityPhrase(5, "napkins")

    def test_filler_is_stripped(self):
        assert parse_quantity_phrase("I need the hot cups x 10") == QuantityPhrase(10, "hot cups")

    def test_multiplication_sign(self):
        assert parse_quantity_phrase("lids × 4") == QuantityPhrase(4, "lids")


class TestNoQuantity:
    def test_plain_request(self):
        assert parse_quantity_phrase("I need napkins") is None

    def test_empty(self):
        assert parse_quantity_phrase("") is None
        assert parse_quantity_phrase(None) is None

    def test_bare_number_without_unit(self):
        assert parse_quantity_phrase("3 napkins") is None

    def test_only_first_phrase_is_read(self):
        """Multiple quantities in one message collapse to the first."""
        result = parse_quantity_phrase("3 bags of cups and 5 cases of lids")
        assert result.quantity == 3
        assert result.item_fragment.startswith("cups")


class TestHelpers:
    def test_strip_filler_prefix(self):
        assert strip_filler_prefix("hey I need the napkins please") == "napkins"

    def test_query_words_drops_short_words(self):
        assert query_words("I need the WHITE napkins") == ["need", "white", "napkins"]
