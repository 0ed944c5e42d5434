"""Field constraint checks.

For each field, given its effective requiredness and current value:
1. Required and empty: "required", nothing else is checked
2. Not required and empty: nothing is checked
3. Type: value must coerce into the field type
4. Bounds: min/max against the type's measure (skipped after a type failure)
5. Options: value (or each list element) must be an option key
6. Regex: string values must match the pattern
7. Matches: value must equal (or differ from) another field's value

All applicable checks run, so a field may collect several violations.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from formguard.definition.field import FieldDefinition
from formguard.definition.registry import DefinitionRegistry
from formguard.options import resolve_options
from formguard.types import ErrorToken, OptionsProvider
from formguard.validators.types import TypeCheckError, check_type, measure, parse_bound
from formguard.values import is_empty, same_value

_MIN_TOKENS = {
    "value": ErrorToken.MIN_VALUE,
    "length": ErrorToken.MIN_LENGTH,
    "count": ErrorToken.MIN_COUNT,
}

_MAX_TOKENS = {
    "value": ErrorToken.MAX_VALUE,
    "length": ErrorToken.MAX_LENGTH,
    "count": ErrorToken.MAX_COUNT,
}


@dataclass
class Violation:
    """One failed check, before translation."""

    code: str
    params: dict[str, Any] = field(default_factory=dict)


@dataclass
class FieldCheck:
    """Outcome of checking one field.

    Attributes:
        violations: Failed checks in check order
        value: The value coerced into the field type (None if empty or invalid)
    """

    violations: list[Violation] = field(default_factory=list)
    value: Any = None

    @property
    def valid(self) -> bool:
        return not self.violations


class ConstraintEvaluator:
    """Checks field values against their definitions."""

    def __init__(
        self,
        registry: DefinitionRegistry,
        options: OptionsProvider | None = None,
    ):
        self.registry = registry
        self.options = options

    def check(
        self,
        definition: FieldDefinition,
        value: Any,
        required: bool,
        values: Mapping[str, Any],
    ) -> FieldCheck:
        """Check one field.

        Args:
            definition: The field's definition
            value: The field's current value
            required: Effective requiredness for this snapshot
            values: All current values (for `matches`)
        """
        result = FieldCheck()

        if is_empty(definition, value):
            if required:
                result.violations.append(Violation(ErrorToken.REQUIRED))
            return result

        try:
            coerced = check_type(definition.type, value, definition.type_params)
        except TypeCheckError:
            result.violations.append(Violation(ErrorToken.INVALID_TYPE, {"value": value}))
        else:
            bound_violation = self._check_bounds(definition, coerced)
            if bound_violation is not None:
                result.violations.append(bound_violation)
            result.value = coerced

        result.violations.extend(self._check_options(definition, value))

        if definition.pattern is not None and isinstance(value, str):
            if not definition.pattern.match(value):
                result.violations.append(Violation(ErrorToken.PATTERN_MISMATCH))

        matches_violation = self._check_matches(definition, value, values)
        if matches_violation is not None:
            result.violations.append(matches_violation)

        if result.violations:
            result.value = None
        return result

    def _check_bounds(self, definition: FieldDefinition, coerced: Any) -> Violation | None:
        """Validate min/max against the type's measure."""
        if definition.min is None and definition.max is None:
            return None

        measured = measure(definition.type, coerced)
        if measured is None:
            return None
        kind, amount = measured

        params = {"min": definition.min, "max": definition.max, "value": coerced}
        try:
            if definition.min is not None:
                bound = parse_bound(definition.type, definition.min, definition.type_params)
                if amount < bound:
                    return Violation(_MIN_TOKENS[kind], params)

            if definition.max is not None:
                bound = parse_bound(definition.type, definition.max, definition.type_params)
                if amount > bound:
                    return Violation(_MAX_TOKENS[kind], params)
        except TypeError:
            # e.g. timezone-aware value against a naive bound
            return Violation(ErrorToken.INVALID_TYPE, {"value": coerced})

        return None

    def _check_options(self, definition: FieldDefinition, value: Any) -> list[Violation]:
        """Validate the value is one of the allowed options."""
        options = resolve_options(definition, self.options)
        if options is None:
            return []

        keys = list(options)
        items = value if isinstance(value, (list, tuple)) else [value]

        return [
            Violation(ErrorToken.INVALID_OPTION, {"value": item})
            for item in items
            if not any(same_value(item, key) for key in keys)
        ]

    def _check_matches(
        self,
        definition: FieldDefinition,
        value: Any,
        values: Mapping[str, Any],
    ) -> Violation | None:
        """Validate equality (or inequality) with another field."""
        other_key = definition.matches_field
        if other_key is None:
            return None

        other = self.registry.get_field(other_key)
        params = {"other": other.display_name, "other_key": other_key}
        equal = same_value(value, values.get(other_key))

        if definition.matches_negated:
            return Violation(ErrorToken.NOT_MATCHES, params) if equal else None
        return None if equal else Violation(ErrorToken.MATCHES, params)
