"""
Unit tests for price and SKU derivation.

Run: pytest tests/unit/test_pricing.py -v
"""

import pytest

from draft_order_service.models import Pricebook, Selection
from draft_order_service.pricing import (
    build_sku,
    compute_price,
    sanitize_token,
    selection_key,
    sku_tokens,
)


def make(pricebook: dict, **selection) -> tuple:
    return Pricebook.model_validate(pricebook), Selection.model_validate(selection)


FRAME_PRICEBOOK = {"base": {"Portrait": {"Small": 10}}, "adds": {"Frame": 5}}
COLOR_PRICEBOOK = {"base": {"Portrait": {"Small": 10}}, "adds": {"Color": {"Red": 2, "Blue": 3}}}


class TestComputePrice:
    """Tests for compute_price()"""

    def test_flat_add_selected(self):
        """Should add the flat price when the checkbox is set: 10 + 5."""
        pricebook, selection = make(FRAME_PRICEBOOK, orientation="Portrait", size="Small", Frame=True)

        assert compute_price(pricebook, selection) == 15.00

    def test_flat_add_not_selected(self):
        """Should ignore the flat price when the checkbox is false."""
        pricebook, selection = make(FRAME_PRICEBOOK, orientation="Portrait", size="Small", Frame=False)

        assert compute_price(pricebook, selection) == 10.00

    def test_flat_add_missing_from_selection(self):
        """Should treat an absent checkbox as unchecked."""
        pricebook, selection = make(FRAME_PRICEBOOK, orientation="Portrait", size="Small")

        assert compute_price(pricebook, selection) == 10.00

    def test_choice_add_matched(self):
        """Should add the price of the chosen label: 10 + 3."""
        pricebook, selection = make(COLOR_PRICEBOOK, orientation="Portrait", size="Small", Color="Blue")

        assert compute_price(pricebook, selection) == 13.00

    def test_choice_add_unmatched_contributes_zero(self):
        """Should count an unknown label as 0."""
        pricebook, selection = make(COLOR_PRICEBOOK, orientation="Portrait", size="Small", Color="Green")

        assert compute_price(pricebook, selection) == 10.00

    def test_unknown_size_yields_zero_base(self):
        """Should use 0 when base has no entry for orientation/size."""
        pricebook, selection = make(FRAME_PRICEBOOK, orientation="Portrait", size="Huge")

        assert compute_price(pricebook, selection) == 0.0

    def test_unknown_orientation_with_add(self):
        """Should still add selected add-ons when the base price is missing."""
        pricebook, selection = make(FRAME_PRICEBOOK, orientation="Square", size="Small", Frame=True)

        assert compute_price(pricebook, selection) == 5.0

    def test_rounds_half_up_to_cents(self):
        """Should round 10.005 up to 10.01."""
        pricebook, selection = make(
            {"base": {"Portrait": {"Small": 10.005}}},
            orientation="Portrait", size="Small"
        )

        assert compute_price(pricebook, selection) == 10.01

    def test_avoids_float_accumulation_error(self):
        """Should sum 0.1 + 0.2 to exactly 0.30 on top of the base."""
        pricebook, selection = make(
            {"base": {"Portrait": {"Small": 0.1}}, "adds": {"Gift": 0.2}},
            orientation="Portrait", size="Small", Gift=True
        )

        assert compute_price(pricebook, selection) == 0.3

    def test_is_deterministic(self, sample_pricebook):
        """Should return identical results for identical inputs."""
        pricebook, selection = make(
            sample_pricebook, orientation="Portrait", size="Large", Frame=True, Color="Red"
        )

        results = {compute_price(pricebook, selection) for _ in range(5)}

        assert results == {27.0}


class TestSanitizeToken:
    """Tests for sanitize_token()"""

    def test_uppercases_and_strips_whitespace(self):
        """Should remove all whitespace: ' extra large ' → 'EXTRALARGE'."""
        assert sanitize_token(" extra large ") == "EXTRALARGE"

    def test_removes_unsafe_characters(self):
        """Should keep only A-Z, 0-9 and dashes."""
        assert sanitize_token("30x40 cm/Öl_#1-b") == "30X40CML1-B"

    def test_none_becomes_na(self):
        """Should render a missing value as NA."""
        assert sanitize_token(None) == "NA"

    def test_booleans_render_like_json(self):
        """Should render booleans the way JSON spells them."""
        assert sanitize_token(True) == "TRUE"
        assert sanitize_token(False) == "FALSE"

    def test_numbers(self):
        assert sanitize_token(40) == "40"

    @pytest.mark.parametrize("raw", ["Portrait", " a b ", "x/y-z", "ÄÖÜ", "", "12.5"])
    def test_is_idempotent(self, raw):
        """Should not change an already sanitized token."""
        once = sanitize_token(raw)

        assert sanitize_token(once) == once


class TestSelectionKey:
    """Tests for selection_key()"""

    def test_joins_adds_in_declared_order(self, sample_pricebook):
        pricebook, selection = make(
            sample_pricebook, orientation="Portrait", size="Small", Color="Red", Frame=True
        )

        assert selection_key(pricebook, selection) == "Portrait|Small|Frame:true|Color:Red"

    def test_missing_values(self, sample_pricebook):
        """Should render an unset flat add as false and an unset choice as empty."""
        pricebook, selection = make(sample_pricebook, orientation="Portrait", size="Small")

        assert selection_key(pricebook, selection) == "Portrait|Small|Frame:false|Color:"

    def test_without_adds(self):
        pricebook, selection = make({"base": {}}, orientation="Landscape", size="Large")

        assert selection_key(pricebook, selection) == "Landscape|Large"


class TestBuildSku:
    """Tests for build_sku()"""

    def test_flat_add_without_code(self):
        """Should fall back to TRUE when no code exists for the flat add."""
        pricebook, selection = make(
            {
                "base": {"Portrait": {"Small": 10}},
                "adds": {"Frame": 5},
                "sku": {
                    "format": "{prefix}-{orientation}-{size}-{Frame}",
                    "codes": {"orientation": {"Portrait": "P"}}
                }
            },
            orientation="Portrait", size="Small", Frame=True
        )

        assert build_sku(pricebook, selection) == "SKU-P-SMALL-TRUE"

    def test_default_format(self):
        """Should use {prefix}-{orientation}-{size} without a sku section."""
        pricebook, selection = make(FRAME_PRICEBOOK, orientation="Portrait", size="Small")

        assert build_sku(pricebook, selection) == "SKU-PORTRAIT-SMALL"

    def test_empty_format_and_prefix_fall_back(self):
        pricebook, selection = make(
            {"sku": {"format": "", "prefix": ""}}, orientation="Portrait", size="Small"
        )

        assert build_sku(pricebook, selection) == "SKU-PORTRAIT-SMALL"

    def test_codes_translate_values(self, sample_pricebook):
        pricebook, selection = make(
            sample_pricebook, orientation="Portrait", size="Large", Frame=True, Color="Red"
        )

        assert build_sku(pricebook, selection) == "ART-P-LARGE-FR-R"

    def test_uncoded_values_are_sanitized(self, sample_pricebook):
        """Should fall back to the raw label and FALSE when no code exists."""
        pricebook, selection = make(
            sample_pricebook, orientation="Landscape", size="Small", Frame=False, Color="Sky Blue"
        )

        assert build_sku(pricebook, selection) == "ART-L-SMALL-FALSE-SKYBLUE"

    def test_missing_choice_becomes_na(self, sample_pricebook):
        pricebook, selection = make(sample_pricebook, orientation="Portrait", size="Small")

        assert build_sku(pricebook, selection) == "ART-P-SMALL-FALSE-NA"

    def test_size_is_not_translated(self):
        """Should ignore codes for size and use the raw value."""
        pricebook, selection = make(
            {"sku": {"codes": {"size": {"Small": "S"}}}}, orientation="Portrait", size="Small"
        )

        assert build_sku(pricebook, selection) == "SKU-PORTRAIT-SMALL"

    def test_unknown_placeholder_becomes_na(self):
        pricebook, selection = make(
            {"sku": {"format": "{prefix}-{size}-{Material}-{weird token}"}},
            orientation="Portrait", size="Small"
        )

        assert build_sku(pricebook, selection) == "SKU-SMALL-NA-NA"

    def test_result_never_contains_braces(self):
        """Should drop stray braces that do not form a placeholder."""
        pricebook, selection = make(
            {"sku": {"format": "{prefix}}-{{size}-{"}}, orientation="Portrait", size="Small"
        )

        sku = build_sku(pricebook, selection)

        assert "{" not in sku
        assert "}" not in sku
        assert sku == "SKU-SMALL-"

    def test_sku_map_override_wins(self, sample_pricebook):
        """Should return the literal sku_map entry regardless of format and codes."""
        sample_pricebook["sku_map"] = {"Portrait|Small|Frame:true|Color:Red": "LEGACY-0042"}
        pricebook, selection = make(
            sample_pricebook, orientation="Portrait", size="Small", Frame=True, Color="Red"
        )

        assert build_sku(pricebook, selection) == "LEGACY-0042"

    def test_sku_map_without_match_formats(self, sample_pricebook):
        sample_pricebook["sku_map"] = {"Portrait|Small|Frame:false|Color:Red": "LEGACY-0041"}
        pricebook, selection = make(
            sample_pricebook, orientation="Portrait", size="Small", Frame=True, Color="Red"
        )

        assert build_sku(pricebook, selection) == "ART-P-SMALL-FR-R"

    def test_is_deterministic(self, sample_pricebook):
        pricebook, selection = make(
            sample_pricebook, orientation="Portrait", size="Large", Color="Blue"
        )

        assert len({build_sku(pricebook, selection) for _ in range(5)}) == 1


class TestSkuTokens:
    """Tests for sku_tokens()"""

    def test_all_tokens_sanitized(self, sample_pricebook):
        pricebook, selection = make(
            sample_pricebook, orientation="Portrait", size="x large", Frame=True, Color="Blue"
        )

        tokens = sku_tokens(pricebook, selection)

        assert tokens == {
            "prefix": "ART",
            "orientation": "P",
            "size": "XLARGE",
            "Frame": "FR",
            "Color": "BLUE",
        }
