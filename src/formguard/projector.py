"""JSON-safe projections of definitions and values.

Used by client-side validation and template rendering: every field is
rendered with its translated caption, constraints, resolved options, current
value and effective requiredness.
"""

from collections.abc import Mapping
from datetime import date, time
from decimal import Decimal
from typing import Any

from formguard.aggregator import ErrorAggregator
from formguard.definition.field import FIELD_PROPERTIES
from formguard.definition.registry import DefinitionRegistry
from formguard.exceptions import GroupsNotSetError, UnknownFieldError
from formguard.options import resolve_options
from formguard.resolver import DependencyResolver
from formguard.types import OptionsProvider, Translator
from formguard.values import ValueStore


class ViewProjector:
    """Renders a form's definitions and values for external consumers."""

    def __init__(
        self,
        registry: DefinitionRegistry,
        values: ValueStore,
        resolver: DependencyResolver,
        aggregator: ErrorAggregator,
        translator: Translator,
        options: OptionsProvider | None = None,
    ):
        self.registry = registry
        self.values = values
        self.resolver = resolver
        self.aggregator = aggregator
        self.translator = translator
        self.options = options
        self._groups: dict[str, list[str]] | None = None

    # -------------------------------------------------------------------------
    # Field arrays
    # -------------------------------------------------------------------------

    def get_field_as_array(self, key: str) -> dict[str, Any]:
        """Render one field.

        Raises:
            UnknownFieldError: If the field is not defined
            CircularDependencyError: If `depends` chains form a cycle
        """
        self.resolver.check_cycles()
        return self._field_array(key, self.values.get_values(), self._errors_by_field())

    def get_as_array(self) -> dict[str, dict[str, Any]]:
        """Render every field, in field order."""
        self.resolver.check_cycles()
        values = self.values.get_values()
        errors = self._errors_by_field()
        return {key: self._field_array(key, values, errors) for key in self.registry.keys()}

    def _field_array(
        self,
        key: str,
        values: Mapping[str, Any],
        errors: Mapping[str, list[str]],
    ) -> dict[str, Any]:
        definition = self.registry.get_field(key)
        raw = self.registry.get_definition(key)

        result: dict[str, Any] = {"name": key}
        for prop in FIELD_PROPERTIES:
            if prop in raw and prop not in ("options", "caption", "default"):
                result[prop] = to_json_safe(raw[prop])

        result["type"] = definition.type
        result["caption"] = self.translator.translate(definition.display_name, {})
        result["default"] = to_json_safe(definition.default)

        options = resolve_options(definition, self.options)
        if options is not None:
            result["options"] = [
                {"value": to_json_safe(value), "label": label}
                for value, label in options.items()
            ]
            if definition.options_list_name is not None:
                result["options_list"] = definition.options_list_name

        result["value"] = to_json_safe(values.get(key))
        result["required"] = self.resolver.is_required(key, values)
        result["errors"] = list(errors.get(key, []))
        return result

    def _errors_by_field(self) -> dict[str, list[str]]:
        if not self.aggregator.validated:
            return {}
        return self.aggregator.get_errors_by_field()

    # -------------------------------------------------------------------------
    # Groups
    # -------------------------------------------------------------------------

    def set_groups(self, groups: Mapping[str, list[str]]) -> None:
        """Configure named, ordered field groups.

        Raises:
            UnknownFieldError: If a group names an undefined field
        """
        checked: dict[str, list[str]] = {}
        for group, keys in groups.items():
            for key in keys:
                if key not in self.registry:
                    raise UnknownFieldError(
                        key, f"Group '{group}' refers to unknown field '{key}'"
                    )
            checked[group] = list(keys)
        self._groups = checked

    def get_groups(self) -> dict[str, list[str]] | None:
        return None if self._groups is None else {g: list(k) for g, k in self._groups.items()}

    def get_as_grouped_array(self) -> dict[str, dict[str, dict[str, Any]]]:
        """Render the configured groups.

        Raises:
            GroupsNotSetError: If set_groups() has not been called
            UnknownFieldError: If a grouped field is no longer defined
        """
        if self._groups is None:
            raise GroupsNotSetError()

        # The definition may have changed since the groups were set
        self.set_groups(self._groups)
        fields = self.get_as_array()
        return {
            group: {key: fields[key] for key in keys}
            for group, keys in self._groups.items()
        }

    # -------------------------------------------------------------------------
    # Value partitions
    # -------------------------------------------------------------------------

    def get_values_by_page(self) -> dict[int | None, dict[str, Any]]:
        """Group current values by page; unpaged fields go under None."""
        values = self.values.get_values()
        result: dict[int | None, dict[str, Any]] = {}
        for definition in self.registry.fields():
            result.setdefault(definition.page, {})[definition.name] = values[definition.name]
        return result

    def get_values_by_tag(self, tag: str) -> dict[str, Any]:
        """Return values of fields carrying a tag, in field order."""
        values = self.values.get_values()
        return {
            definition.name: values[definition.name]
            for definition in self.registry.fields()
            if tag in definition.tags
        }


def to_json_safe(value: Any) -> Any:
    """Convert a value into something json.dumps() accepts."""
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Mapping):
        return {str(k): to_json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_json_safe(v) for v in value]
    return str(value)
