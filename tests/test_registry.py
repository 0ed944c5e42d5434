"""Tests for the field definition registry and its structural checks."""

from datetime import date

import pytest

from formguard.definition.registry import DefinitionRegistry
from formguard.definition.schema import check_field_schema
from formguard.exceptions import (
    ConfigurationError,
    DuplicateFieldError,
    InvalidDefinitionError,
    UnknownFieldError,
    UnknownPropertyError,
)


# =============================================================================
# Helpers
# =============================================================================


def make_registry() -> DefinitionRegistry:
    return DefinitionRegistry({
        "email": {"type": "email", "required": True, "caption": "E-Mail"},
        "password": {"type": "string", "min": 8, "max": 64, "required": True},
        "password_again": {"type": "string", "matches": "password"},
    })


# =============================================================================
# Schema
# =============================================================================


class TestFieldSchema:
    def test_valid_definition_has_no_issues(self):
        assert check_field_schema("age", {"type": "int", "min": 0, "max": 120}) == []

    def test_unknown_property_reported(self):
        issues = check_field_schema("age", {"type": "int", "minimum": 0})
        assert len(issues) == 1
        assert "minimum" in issues[0].message

    def test_unknown_type_reported(self):
        issues = check_field_schema("age", {"type": "integer"})
        assert len(issues) == 1

    def test_non_positive_page_reported(self):
        issues = check_field_schema("age", {"type": "int", "page": 0})
        assert issues and issues[0].path == "page"

    def test_temporal_bounds_accepted(self):
        definition = {"type": "date", "min": date(2020, 1, 1)}
        assert check_field_schema("start", definition) == []

    def test_integer_option_keys_accepted(self):
        definition = {"type": "int", "options": {1: "One", 2: "Two"}}
        assert check_field_schema("count", definition) == []

    def test_non_mapping_definition(self):
        issues = check_field_schema("broken", ["type", "int"])
        assert issues[0].message == "Definition must be a mapping"


# =============================================================================
# Mutation
# =============================================================================


class TestSetDefinition:
    def test_keys_keep_insertion_order(self):
        registry = make_registry()
        assert registry.keys() == ["email", "password", "password_again"]

    def test_replaces_whole_registry(self):
        registry = make_registry()
        registry.set_definition({"name": {"type": "string"}})
        assert registry.keys() == ["name"]

    def test_failed_replace_leaves_registry_unchanged(self):
        registry = make_registry()
        with pytest.raises(InvalidDefinitionError):
            registry.set_definition({"name": {"type": "nope"}})
        assert registry.keys() == ["email", "password", "password_again"]

    def test_definitions_are_copied(self):
        definition = {"name": {"type": "string", "tags": ["a"]}}
        registry = DefinitionRegistry(definition)
        definition["name"]["tags"].append("b")
        assert registry.get_definition("name", "tags") == ["a"]


class TestAddDefinition:
    def test_get_returns_exactly_what_was_added(self):
        registry = make_registry()
        definition = {"type": "int", "min": 18, "page": 2, "tags": ["profile"]}
        registry.add_definition("age", definition)
        assert registry.get_definition("age") == definition

    def test_duplicate_key_rejected(self):
        registry = make_registry()
        registry.add_definition("age", {"type": "int"})
        with pytest.raises(DuplicateFieldError):
            registry.add_definition("age", {"type": "int"})

    def test_duplicate_is_configuration_error(self):
        registry = make_registry()
        with pytest.raises(ConfigurationError):
            registry.add_definition("email", {"type": "email"})

    def test_unknown_matches_reference_rejected(self):
        registry = make_registry()
        with pytest.raises(UnknownFieldError) as exc_info:
            registry.add_definition("confirm", {"matches": "missing"})
        assert "missing" in str(exc_info.value)
        assert "confirm" not in registry

    def test_unknown_depends_reference_rejected(self):
        registry = make_registry()
        with pytest.raises(UnknownFieldError):
            registry.add_definition("phone", {"depends": "missing"})

    def test_negated_matches_reference_checked_without_prefix(self):
        registry = make_registry()
        registry.add_definition("new_password", {"matches": "!password"})
        assert registry.get_field("new_password").matches_field == "password"
        assert registry.get_field("new_password").matches_negated is True


class TestChangeDefinition:
    def test_merges_properties(self):
        registry = make_registry()
        registry.change_definition("password", {"min": 12})
        assert registry.get_definition("password") == {
            "type": "string", "min": 12, "max": 64, "required": True,
        }

    def test_none_removes_property(self):
        registry = make_registry()
        registry.change_definition("password", {"max": None})
        with pytest.raises(UnknownPropertyError):
            registry.get_definition("password", "max")

    def test_unknown_field_rejected(self):
        registry = make_registry()
        with pytest.raises(UnknownFieldError):
            registry.change_definition("missing", {"required": True})

    def test_invalid_change_leaves_field_unchanged(self):
        registry = make_registry()
        with pytest.raises(InvalidDefinitionError):
            registry.change_definition("password", {"min": 100})
        assert registry.get_definition("password", "min") == 8


class TestExtendDefinition:
    def test_adds_and_changes_in_one_step(self):
        registry = make_registry()
        registry.extend_definition(
            add={"age": {"type": "int", "min": 18}},
            change={"age": {"min": 21}, "email": {"required": None}},
        )
        assert registry.keys() == ["email", "password", "password_again", "age"]
        assert registry.get_definition("age", "min") == 21
        assert not registry.has_property("email", "required")

    def test_added_fields_may_refer_forward(self):
        registry = make_registry()
        registry.extend_definition(add={
            "b": {"depends": "c"},
            "c": {"type": "switch"},
            "c_again": {"matches": "c"},
        })
        assert registry.get_field("b").depends == "c"

    def test_duplicate_add_leaves_registry_unchanged(self):
        registry = make_registry()
        before = registry.get_hash()
        with pytest.raises(DuplicateFieldError):
            registry.extend_definition(add={"age": {}, "email": {}})
        assert registry.get_hash() == before
        assert "age" not in registry

    def test_invalid_batch_leaves_registry_unchanged(self):
        registry = make_registry()
        with pytest.raises(UnknownFieldError):
            registry.extend_definition(
                add={"age": {"type": "int"}},
                change={"missing": {"required": True}},
            )
        assert "age" not in registry


# =============================================================================
# Semantic checks
# =============================================================================


class TestDefinitionChecks:
    def test_invalid_regex(self):
        with pytest.raises(InvalidDefinitionError, match="regex"):
            DefinitionRegistry({"code": {"regex": "[a-z"}})

    def test_min_greater_than_max(self):
        with pytest.raises(InvalidDefinitionError, match="min"):
            DefinitionRegistry({"age": {"type": "int", "min": 10, "max": 5}})

    def test_bounds_rejected_on_bool(self):
        with pytest.raises(InvalidDefinitionError):
            DefinitionRegistry({"accept": {"type": "bool", "min": 1}})

    def test_invalid_date_bound(self):
        with pytest.raises(InvalidDefinitionError):
            DefinitionRegistry({"start": {"type": "date", "min": "not-a-date"}})

    def test_iso_date_bound_accepted(self):
        registry = DefinitionRegistry({"start": {"type": "date", "min": "2020-01-01"}})
        assert registry.get_field("start").min == "2020-01-01"

    def test_negative_length_bound(self):
        with pytest.raises(InvalidDefinitionError):
            DefinitionRegistry({"name": {"type": "string", "min": -1}})

    def test_depends_condition_requires_depends(self):
        with pytest.raises(InvalidDefinitionError, match="requires 'depends'"):
            DefinitionRegistry({"a": {}, "b": {"depends_value": "x"}})

    def test_multiple_depends_conditions_rejected(self):
        with pytest.raises(InvalidDefinitionError, match="Only one of"):
            DefinitionRegistry({
                "a": {"options": {"x": "X", "y": "Y"}},
                "b": {"depends": "a", "depends_value": "x", "depends_first_option": True},
            })

    def test_false_flag_is_not_a_condition(self):
        registry = DefinitionRegistry({
            "a": {},
            "b": {"depends": "a", "depends_value": "x", "depends_value_empty": False},
        })
        assert registry.get_field("b").depends_value == "x"

    def test_option_dependency_needs_target_options(self):
        with pytest.raises(InvalidDefinitionError, match="options"):
            DefinitionRegistry({"a": {}, "b": {"depends": "a", "depends_last_option": True}})

    def test_invalid_precision(self):
        with pytest.raises(InvalidDefinitionError, match="precision"):
            DefinitionRegistry({"price": {"type": "numeric", "type_params": {"precision": -2}}})

    def test_invalid_ip_version(self):
        with pytest.raises(InvalidDefinitionError, match="version"):
            DefinitionRegistry({"host": {"type": "ip", "type_params": {"version": 5}}})

    def test_list_options_become_mapping(self):
        registry = DefinitionRegistry({"size": {"options": ["s", "m", "l"]}})
        assert registry.get_field("size").options == {"s": "s", "m": "m", "l": "l"}

    def test_default_must_be_plain(self):
        with pytest.raises(InvalidDefinitionError, match="default"):
            DefinitionRegistry({"x": {"default": object()}})

    def test_type_params_must_be_plain(self):
        with pytest.raises(InvalidDefinitionError, match="type_params"):
            DefinitionRegistry({"x": {"type": "string", "type_params": {"extra": {1, 2}}}})


# =============================================================================
# Lookup
# =============================================================================


class TestGetDefinition:
    def test_all_definitions(self):
        registry = make_registry()
        assert list(registry.get_definition()) == ["email", "password", "password_again"]

    def test_single_property(self):
        assert make_registry().get_definition("email", "caption") == "E-Mail"

    def test_unknown_field(self):
        with pytest.raises(UnknownFieldError):
            make_registry().get_definition("missing")

    def test_unknown_property(self):
        with pytest.raises(UnknownPropertyError):
            make_registry().get_definition("email", "regex")

    def test_returned_definition_is_a_copy(self):
        registry = make_registry()
        registry.get_definition("email")["required"] = False
        assert registry.get_definition("email", "required") is True

    def test_contains_and_len(self):
        registry = make_registry()
        assert "email" in registry
        assert "missing" not in registry
        assert len(registry) == 3


# =============================================================================
# Hash
# =============================================================================


class TestHash:
    def test_stable_across_calls(self):
        registry = make_registry()
        assert registry.get_hash() == registry.get_hash()

    def test_equal_definitions_hash_equal(self):
        assert make_registry().get_hash() == make_registry().get_hash()

    def test_property_order_does_not_matter(self):
        a = DefinitionRegistry({"x": {"type": "int", "required": True}})
        b = DefinitionRegistry({"x": {"required": True, "type": "int"}})
        assert a.get_hash() == b.get_hash()

    def test_changes_after_change_definition(self):
        registry = make_registry()
        before = registry.get_hash()
        registry.change_definition("email", {"required": False})
        assert registry.get_hash() != before

    def test_field_order_matters(self):
        a = DefinitionRegistry({"x": {}, "y": {}})
        b = DefinitionRegistry({"y": {}, "x": {}})
        assert a.get_hash() != b.get_hash()

    def test_mixed_option_keys_hashable(self):
        registry = DefinitionRegistry({"x": {"options": {1: "One", "two": "Two"}}})
        assert len(registry.get_hash()) == 64

    def test_temporal_default_hashes_equal(self):
        a = DefinitionRegistry({"x": {"type": "date", "default": date(2024, 1, 2)}})
        b = DefinitionRegistry({"x": {"type": "date", "default": date(2024, 1, 2)}})
        assert a.get_hash() == b.get_hash()

    def test_date_and_iso_string_hash_differently(self):
        a = DefinitionRegistry({"x": {"type": "date", "default": date(2024, 1, 2)}})
        b = DefinitionRegistry({"x": {"type": "date", "default": "2024-01-02"}})
        assert a.get_hash() != b.get_hash()
