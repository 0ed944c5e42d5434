"""Dependency resolution for conditional requiredness.

A field is effectively required when its own `required` flag is set or its
`depends` condition holds for the current values:

- depends alone: the referenced field is not empty
- depends_value: the referenced field equals the given literal
- depends_value_empty: the referenced field is empty
- depends_first_option / depends_last_option: the referenced field equals
  the first / last key of its own options
"""

import logging
from collections.abc import Mapping
from typing import Any

from formguard.definition.field import FieldDefinition
from formguard.definition.registry import DefinitionRegistry
from formguard.exceptions import CircularDependencyError
from formguard.options import resolve_options
from formguard.types import OptionsProvider
from formguard.validators.types import TRUTH_TYPES, TypeCheckError, check_type
from formguard.values import is_empty, same_value

logger = logging.getLogger(__name__)


class DependencyResolver:
    """Computes effective requiredness against a value snapshot."""

    def __init__(
        self,
        registry: DefinitionRegistry,
        options: OptionsProvider | None = None,
    ):
        self.registry = registry
        self.options = options

    def check_cycles(self) -> None:
        """Reject `depends` chains that lead back to a field.

        Raises:
            CircularDependencyError: Naming the fields of the first cycle found
        """
        done: set[str] = set()

        for start in self.registry.keys():
            if start in done:
                continue

            path: list[str] = []
            current: str | None = start
            while current is not None and current not in done:
                if current in path:
                    cycle = path[path.index(current):] + [current]
                    raise CircularDependencyError(cycle)
                path.append(current)
                current = self.registry.get_field(current).depends

            done.update(path)

    def is_required(self, key: str, values: Mapping[str, Any]) -> bool:
        """Return True if the field must be non-empty for these values."""
        definition = self.registry.get_field(key)
        if definition.required:
            return True
        if definition.depends is None:
            return False
        return self._condition_holds(definition, values)

    def required_fields(self, values: Mapping[str, Any]) -> dict[str, bool]:
        """Return effective requiredness of every field, in field order.

        Raises:
            CircularDependencyError: If `depends` chains form a cycle
        """
        self.check_cycles()
        return {key: self.is_required(key, values) for key in self.registry.keys()}

    def _condition_holds(self, definition: FieldDefinition, values: Mapping[str, Any]) -> bool:
        target = self.registry.get_field(definition.depends)
        value = values.get(target.name)

        if definition.depends_value_empty:
            return is_empty(target, value)

        if is_empty(target, value):
            # An empty target only equals an empty literal
            if self.registry.has_property(definition.name, "depends_value"):
                return is_empty(target, definition.depends_value)
            return False

        if definition.depends_first_option or definition.depends_last_option:
            options = list(resolve_options(target, self.options) or {})
            if not options:
                logger.debug("Field '%s' has no options to depend on", target.name)
                return False
            expected = options[0] if definition.depends_first_option else options[-1]
            return _equals(target, value, expected)

        if self.registry.has_property(definition.name, "depends_value"):
            return _equals(target, value, definition.depends_value)

        return True


def _equals(target: FieldDefinition, value: Any, expected: Any) -> bool:
    """Compare a field value with a configured literal."""
    if target.type in TRUTH_TYPES:
        try:
            return check_type(target.type, value) == check_type(target.type, expected)
        except TypeCheckError:
            return False
    if isinstance(value, (list, tuple)):
        return any(same_value(item, expected) for item in value)
    return same_value(value, expected)
