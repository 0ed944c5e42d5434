"""Field definition registry.

Holds the raw definition mapping for every field, keyed by field name, in
insertion order, together with a parsed FieldDefinition for each. Every
mutation is checked as a whole before it is applied, so a failed call
leaves the registry unchanged.
"""

import copy
import hashlib
import json
import logging
import re
from collections.abc import Iterator, Mapping
from datetime import date, time
from decimal import Decimal
from typing import Any

from formguard.definition.field import (
    DEPENDS_CONDITIONS,
    FieldDefinition,
)
from formguard.definition.schema import check_field_schema
from formguard.exceptions import (
    DuplicateFieldError,
    InvalidDefinitionError,
    UnknownFieldError,
    UnknownPropertyError,
)
from formguard.validators.types import TypeCheckError, parse_bound

logger = logging.getLogger(__name__)


class DefinitionRegistry:
    """Ordered, checked collection of field definitions.

    Example:
        registry = DefinitionRegistry({"email": {"type": "email", "required": True}})
        registry.add_definition("password", {"type": "string", "min": 8})
        registry.get_definition("password", "min")  # -> 8
    """

    def __init__(self, definitions: Mapping[str, Mapping[str, Any]] | None = None):
        self._raw: dict[str, dict[str, Any]] = {}
        self._fields: dict[str, FieldDefinition] = {}
        if definitions:
            self.set_definition(definitions)

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def set_definition(self, definitions: Mapping[str, Mapping[str, Any]]) -> None:
        """Replace the whole registry."""
        raw = {key: copy.deepcopy(dict(d)) for key, d in definitions.items()}
        self._apply(raw)
        logger.debug("Definition replaced (%d fields)", len(raw))

    def add_definition(self, key: str, definition: Mapping[str, Any]) -> None:
        """Insert a single field.

        Raises:
            DuplicateFieldError: If the key already exists
        """
        if key in self._raw:
            raise DuplicateFieldError(key)

        raw = dict(self._raw)
        raw[key] = copy.deepcopy(dict(definition))
        self._apply(raw)
        logger.debug("Field '%s' added", key)

    def change_definition(self, key: str, changes: Mapping[str, Any]) -> None:
        """Merge properties into an existing field.

        A property given as None is removed from the definition.

        Raises:
            UnknownFieldError: If the key does not exist
        """
        if key not in self._raw:
            raise UnknownFieldError(key)

        raw = dict(self._raw)
        raw[key] = _merge(raw[key], changes)
        self._apply(raw)
        logger.debug("Field '%s' changed (%s)", key, ", ".join(changes))

    def extend_definition(
        self,
        add: Mapping[str, Mapping[str, Any]] | None = None,
        change: Mapping[str, Mapping[str, Any]] | None = None,
    ) -> None:
        """Add and change several fields in one checked step.

        Added fields are appended in order, then changes are merged (into
        existing or just-added fields). References are checked against the
        final set, so added fields may refer to each other in any order.

        Raises:
            DuplicateFieldError: If an added key already exists
            UnknownFieldError: If a changed key does not exist
        """
        raw = dict(self._raw)
        for key, definition in (add or {}).items():
            if key in raw:
                raise DuplicateFieldError(key)
            raw[key] = copy.deepcopy(dict(definition))

        for key, changes in (change or {}).items():
            if key not in raw:
                raise UnknownFieldError(key)
            raw[key] = _merge(raw[key], changes)

        self._apply(raw)
        logger.debug(
            "Definition extended (added: %s; changed: %s)",
            ", ".join(add or {}) or "-",
            ", ".join(change or {}) or "-",
        )

    def _apply(self, raw: dict[str, dict[str, Any]]) -> None:
        fields = {key: _check_field(key, definition) for key, definition in raw.items()}
        _check_references(fields)
        self._raw = raw
        self._fields = fields

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def get_definition(self, key: str | None = None, prop: str | None = None) -> Any:
        """Return definitions, one field's definition, or one property.

        Args:
            key: Field name; None returns all definitions
            prop: Property name; requires key

        Raises:
            UnknownFieldError: If the key does not exist
            UnknownPropertyError: If the field does not carry the property
        """
        if key is None:
            return copy.deepcopy(self._raw)

        if key not in self._raw:
            raise UnknownFieldError(key)

        if prop is None:
            return copy.deepcopy(self._raw[key])

        if prop not in self._raw[key]:
            raise UnknownPropertyError(key, prop)

        return copy.deepcopy(self._raw[key][prop])

    def has_property(self, key: str, prop: str) -> bool:
        """Return True if the field definition carries the property."""
        return key in self._raw and prop in self._raw[key]

    def get_field(self, key: str) -> FieldDefinition:
        """Return the parsed definition of a field."""
        try:
            return self._fields[key]
        except KeyError:
            raise UnknownFieldError(key) from None

    def fields(self) -> list[FieldDefinition]:
        """Return parsed definitions in field order."""
        return list(self._fields.values())

    def keys(self) -> list[str]:
        return list(self._raw)

    def __contains__(self, key: object) -> bool:
        return key in self._raw

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._raw))

    def __len__(self) -> int:
        return len(self._raw)

    # -------------------------------------------------------------------------
    # Fingerprint
    # -------------------------------------------------------------------------

    def get_hash(self) -> str:
        """Create SHA-256 hash of the definition structure.

        Field order is significant, property order within a field is not.
        Values are not part of the hash.
        """
        structure = [
            [key, [[prop, _canonical(value)] for prop, value in sorted(definition.items())]]
            for key, definition in self._raw.items()
        ]
        content = json.dumps(structure, separators=(",", ":"))
        return hashlib.sha256(content.encode()).hexdigest()


# =============================================================================
# Checks
# =============================================================================


def _check_field(key: str, raw: dict[str, Any]) -> FieldDefinition:
    """Check one raw definition and return its parsed form."""
    if not isinstance(key, str) or not key:
        raise InvalidDefinitionError(None, f"Invalid field name {key!r}")

    issues = check_field_schema(key, raw)
    if issues:
        raise InvalidDefinitionError(
            key, "; ".join(f"{i.path + ': ' if i.path else ''}{i.message}" for i in issues)
        )

    regex = raw.get("regex")
    if regex is not None:
        try:
            re.compile(regex)
        except re.error as e:
            raise InvalidDefinitionError(key, f"Invalid regex {regex!r}: {e}")

    conditions = [
        name for name in DEPENDS_CONDITIONS
        if (name == "depends_value" and name in raw) or raw.get(name) is True
    ]
    if conditions and "depends" not in raw:
        raise InvalidDefinitionError(key, f"'{conditions[0]}' requires 'depends'")
    if len(conditions) > 1:
        raise InvalidDefinitionError(
            key, "Only one of " + ", ".join(conditions) + " may be set"
        )

    for prop in ("default", "type_params", "options"):
        if prop in raw and not _is_plain(raw[prop]):
            raise InvalidDefinitionError(
                key, f"{prop} must be built from plain values (str, numbers, dates, lists, dicts)"
            )

    definition = FieldDefinition.from_dict(key, raw)
    _check_type_params(definition)
    _check_bounds(definition)
    return definition


def _check_type_params(definition: FieldDefinition) -> None:
    params = definition.type_params
    key = definition.name

    precision = params.get("precision")
    if precision is not None and (
        isinstance(precision, bool) or not isinstance(precision, int) or precision < 0
    ):
        raise InvalidDefinitionError(key, "type_params.precision must be a non-negative integer")

    version = params.get("version")
    if version is not None and version not in (4, 6):
        raise InvalidDefinitionError(key, "type_params.version must be 4 or 6")

    schemes = params.get("schemes")
    if schemes is not None and (
        not isinstance(schemes, (list, tuple))
        or not schemes
        or not all(isinstance(s, str) for s in schemes)
    ):
        raise InvalidDefinitionError(key, "type_params.schemes must be a list of strings")

    fmt = params.get("format")
    if fmt is not None and not isinstance(fmt, str):
        raise InvalidDefinitionError(key, "type_params.format must be a string")


def _check_bounds(definition: FieldDefinition) -> None:
    key = definition.name
    bounds = {}
    for prop in ("min", "max"):
        raw = getattr(definition, prop)
        if raw is None:
            continue
        try:
            bounds[prop] = parse_bound(definition.type, raw, definition.type_params)
        except TypeCheckError as e:
            raise InvalidDefinitionError(key, f"Invalid {prop} {raw!r}: {e}")

    if "min" in bounds and "max" in bounds:
        try:
            inverted = bounds["min"] > bounds["max"]
        except TypeError:
            raise InvalidDefinitionError(key, "min and max are not comparable")
        if inverted:
            raise InvalidDefinitionError(key, "min must not be greater than max")


def _check_references(fields: dict[str, FieldDefinition]) -> None:
    """Check that matches/depends refer to fields of the same registry."""
    for definition in fields.values():
        target = definition.matches_field
        if target is not None and target not in fields:
            raise UnknownFieldError(
                target,
                f"Field '{definition.name}' matches unknown field '{target}'",
            )

        target = definition.depends
        if target is None:
            continue
        if target not in fields:
            raise UnknownFieldError(
                target,
                f"Field '{definition.name}' depends on unknown field '{target}'",
            )
        if (
            definition.depends_first_option or definition.depends_last_option
        ) and not fields[target].options:
            raise InvalidDefinitionError(
                definition.name,
                f"depends on the options of '{target}', which has none",
            )


def _merge(definition: Mapping[str, Any], changes: Mapping[str, Any]) -> dict[str, Any]:
    """Merge property changes; a property given as None is removed."""
    merged = copy.deepcopy(dict(definition))
    for prop, value in changes.items():
        if value is None:
            merged.pop(prop, None)
        else:
            merged[prop] = copy.deepcopy(value)
    return merged


_PLAIN_SCALARS = (str, int, float, bool, Decimal, date, time)


def _is_plain(obj: Any) -> bool:
    """Check that a value has a process-independent canonical form."""
    if obj is None or isinstance(obj, _PLAIN_SCALARS):
        return True
    if isinstance(obj, (list, tuple)):
        return all(_is_plain(item) for item in obj)
    if isinstance(obj, dict):
        return all(
            isinstance(k, (str, int)) and not isinstance(k, bool) and _is_plain(v)
            for k, v in obj.items()
        )
    return False


def _canonical(obj: Any) -> Any:
    """Convert a definition into an order-preserving, JSON-safe structure."""
    if isinstance(obj, dict):
        return [[_canonical(k), _canonical(v)] for k, v in obj.items()]
    if isinstance(obj, (list, tuple)):
        return [_canonical(item) for item in obj]
    if isinstance(obj, (date, time)):
        # Type-tagged so a date never collides with its ISO string
        return [type(obj).__name__, obj.isoformat()]
    if isinstance(obj, Decimal):
        return ["Decimal", str(obj)]
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj
    raise TypeError(f"Cannot canonicalize {type(obj).__name__}")
