"""Tests for the message translator and options lists."""

from datetime import date
from decimal import Decimal

import pytest

from formguard.definition.field import FieldDefinition
from formguard.exceptions import UnknownOptionsError
from formguard.options import DictOptions, resolve_options
from formguard.translation import MessageTranslator
from formguard.types import ErrorToken


# =============================================================================
# Translator
# =============================================================================


class TestMessageTranslator:
    def test_translates_token(self):
        translator = MessageTranslator()
        assert translator.translate(ErrorToken.REQUIRED, {"caption": "Name"}) == "Name is required"

    def test_locale_switch(self):
        translator = MessageTranslator()
        translator.set_locale("de")
        assert translator.get_locale() == "de"
        assert translator.translate(ErrorToken.REQUIRED, {"caption": "Name"}) == (
            "Name muss ausgefüllt werden"
        )

    def test_falls_back_to_fallback_locale(self):
        translator = MessageTranslator(locale="fr")
        assert translator.translate(ErrorToken.REQUIRED, {"caption": "Nom"}) == "Nom is required"

    def test_unknown_token_is_returned_as_text(self):
        translator = MessageTranslator()
        assert translator.translate("Street") == "Street"

    def test_custom_catalog(self):
        translator = MessageTranslator(
            locale="de",
            catalogs={"de": {"Street": "Straße", "form.required": "{caption} fehlt"}},
        )
        assert translator.translate("Street") == "Straße"
        assert translator.translate("form.required", {"caption": "Straße"}) == "Straße fehlt"

    def test_add_messages_merges(self):
        translator = MessageTranslator()
        translator.add_messages("en", {"City": "Town"})
        assert translator.translate("City") == "Town"
        assert translator.translate(ErrorToken.REQUIRED, {"caption": "Town"}) == "Town is required"


class TestInterpolate:
    def test_unknown_placeholder_kept(self):
        translator = MessageTranslator()
        assert translator.interpolate("{caption} vs {other}", {"caption": "A"}) == "A vs {other}"

    @pytest.mark.parametrize("value,expected", [
        (True, "Yes"),
        (None, ""),
        (date(2024, 1, 2), "2024-01-02"),
        (Decimal("1.500"), "1.5"),
        (["a", 1], "a, 1"),
        (7, "7"),
    ])
    def test_param_formatting(self, value, expected):
        assert MessageTranslator().interpolate("{v}", {"v": value}) == expected

    @pytest.mark.parametrize("value,expected", [
        (Decimal("1E+999"), "1E+999"),
        (Decimal("-2.5E-50"), "-2.5E-50"),
        (Decimal("1E+3"), "1000"),
    ])
    def test_extreme_decimals_keep_exponent(self, value, expected):
        assert MessageTranslator().interpolate("{v}", {"v": value}) == expected

    def test_huge_int_is_described_by_size(self):
        text = MessageTranslator().interpolate("{v}", {"v": 10 ** 5000})
        assert text == f"{(10 ** 5000).bit_length()}-bit integer"


# =============================================================================
# Options
# =============================================================================


class TestDictOptions:
    def test_get_returns_copy(self):
        options = DictOptions({"sizes": {"s": "Small"}})
        options.get("sizes")["m"] = "Medium"
        assert options.get("sizes") == {"s": "Small"}

    def test_unknown_list(self):
        with pytest.raises(UnknownOptionsError):
            DictOptions().get("sizes")

    def test_add_and_names(self):
        options = DictOptions()
        options.add("sizes", {"s": "Small"})
        options.add("colors", {"r": "Red"})
        assert options.names() == ["sizes", "colors"]

    def test_labels_translated(self):
        translator = MessageTranslator(locale="de", catalogs={"de": {"Small": "Klein"}})
        options = DictOptions({"sizes": {"s": "Small", "l": "Large"}}, translator)
        assert options.get("sizes") == {"s": "Klein", "l": "Large"}


class TestResolveOptions:
    def test_no_options(self):
        assert resolve_options(FieldDefinition(name="x"), None) is None

    def test_inline_options(self):
        definition = FieldDefinition(name="x", options={"a": "A"})
        assert resolve_options(definition, None) == {"a": "A"}

    def test_referenced_without_provider(self):
        definition = FieldDefinition(name="x", options="sizes")
        with pytest.raises(UnknownOptionsError):
            resolve_options(definition, None)

    def test_referenced_list(self):
        definition = FieldDefinition(name="x", options="sizes")
        options = DictOptions({"sizes": {"s": "Small"}})
        assert resolve_options(definition, options) == {"s": "Small"}
