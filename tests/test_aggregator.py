"""Tests for error aggregation and error views."""

import pytest

from formguard.aggregator import ErrorAggregator
from formguard.definition.registry import DefinitionRegistry
from formguard.exceptions import UnknownFieldError, ValidationNotRunError
from formguard.translation import MessageTranslator
from formguard.types import ErrorToken


# =============================================================================
# Helpers
# =============================================================================


def make_aggregator(locale: str = "en") -> ErrorAggregator:
    registry = DefinitionRegistry({
        "name": {"caption": "Name", "page": 1},
        "email": {"type": "email", "caption": "E-Mail", "page": 1},
        "zip": {"caption": "ZIP", "page": 2},
        "notes": {},
    })
    return ErrorAggregator(registry, MessageTranslator(locale=locale))


# =============================================================================
# Validation state
# =============================================================================


class TestValidationState:
    def test_reads_raise_before_validation(self):
        aggregator = make_aggregator()
        for read in (
            aggregator.is_valid,
            aggregator.get_errors,
            aggregator.get_errors_by_field,
            aggregator.get_errors_by_page,
            aggregator.get_errors_as_text,
        ):
            with pytest.raises(ValidationNotRunError):
                read()

    def test_valid_after_empty_pass(self):
        aggregator = make_aggregator()
        aggregator.mark_validated()
        assert aggregator.is_valid() is True
        assert aggregator.get_errors() == []

    def test_clear_resets_validation(self):
        aggregator = make_aggregator()
        aggregator.add_error("name", ErrorToken.REQUIRED)
        aggregator.mark_validated()
        aggregator.clear_errors()
        assert aggregator.has_errors() is False
        with pytest.raises(ValidationNotRunError):
            aggregator.is_valid()

    def test_first_error_does_not_require_validation(self):
        aggregator = make_aggregator()
        assert aggregator.get_first_error() is None
        aggregator.add_error("zip", ErrorToken.REQUIRED)
        assert aggregator.get_first_error().field == "zip"


# =============================================================================
# Adding errors
# =============================================================================


class TestAddError:
    def test_message_is_translated(self):
        aggregator = make_aggregator()
        error = aggregator.add_error("email", ErrorToken.REQUIRED)
        assert error.message == "E-Mail is required"
        assert error.code == ErrorToken.REQUIRED
        assert error.page == 1

    def test_german_catalog(self):
        aggregator = make_aggregator(locale="de")
        error = aggregator.add_error("email", ErrorToken.REQUIRED)
        assert error.message == "E-Mail muss ausgefüllt werden"

    def test_params_interpolated(self):
        aggregator = make_aggregator()
        error = aggregator.add_error("name", ErrorToken.MIN_LENGTH, {"min": 3})
        assert error.message == "Name must be at least 3 characters long"

    def test_caption_falls_back_to_field_name(self):
        aggregator = make_aggregator()
        error = aggregator.add_error("notes", ErrorToken.REQUIRED)
        assert error.message == "Notes is required"

    def test_custom_message(self):
        aggregator = make_aggregator()
        error = aggregator.add_error("zip", "Unknown postal code {value}", {"value": "00000"})
        assert error.message == "Unknown postal code 00000"

    def test_unknown_field(self):
        with pytest.raises(UnknownFieldError):
            make_aggregator().add_error("missing", ErrorToken.REQUIRED)


# =============================================================================
# Views
# =============================================================================


class TestErrorViews:
    def make_validated(self) -> ErrorAggregator:
        aggregator = make_aggregator()
        aggregator.add_error("zip", ErrorToken.REQUIRED)
        aggregator.add_error("notes", ErrorToken.MAX_LENGTH, {"max": 10})
        aggregator.add_error("name", ErrorToken.REQUIRED)
        aggregator.add_error("name", ErrorToken.PATTERN_MISMATCH)
        aggregator.mark_validated()
        return aggregator

    def test_errors_in_field_order(self):
        aggregator = self.make_validated()
        assert [e.field for e in aggregator.get_errors()] == ["name", "name", "zip", "notes"]
        assert [e.code for e in aggregator.get_errors()][:2] == [
            ErrorToken.REQUIRED,
            ErrorToken.PATTERN_MISMATCH,
        ]

    def test_by_field(self):
        by_field = self.make_validated().get_errors_by_field()
        assert list(by_field) == ["name", "zip", "notes"]
        assert by_field["name"] == ["Name is required", "Name format is invalid"]

    def test_by_page(self):
        by_page = self.make_validated().get_errors_by_page()
        assert list(by_page) == [1, 2, None]
        assert [e.field for e in by_page[1]] == ["name", "name"]
        assert [e.field for e in by_page[None]] == ["notes"]

    def test_first_error(self):
        assert self.make_validated().get_first_error().field == "name"

    def test_as_text(self):
        text = self.make_validated().get_errors_as_text()
        assert text.splitlines() == [
            "Page 1:",
            "  Name (name):",
            "    - Name is required",
            "    - Name format is invalid",
            "Page 2:",
            "  ZIP (zip):",
            "    - ZIP is required",
            "Other:",
            "  Notes (notes):",
            "    - Notes must be at most 10 characters long",
        ]

    def test_to_dict(self):
        error = self.make_validated().get_errors()[0]
        assert error.to_dict() == {
            "field": "name",
            "code": ErrorToken.REQUIRED,
            "message": "Name is required",
            "page": 1,
        }
