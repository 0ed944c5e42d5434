"""Value store and bulk setters.

Values start out as each field's `default`. The bulk setters decide which
keys of an untrusted payload are applied:

- set_all_values: every key must be a known field
- set_defined_values: known keys only; known fields must all be present
- set_writable_values: known keys of writable (not readonly, not hidden) fields
- set_defined_writable_values: both restrictions
- set_writable_values_on_page: both restrictions, limited to one page

Each setter checks the whole payload before applying anything.
"""

import copy
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from formguard.definition.field import FieldDefinition
from formguard.definition.registry import DefinitionRegistry
from formguard.exceptions import MissingFieldError, UnknownFieldError
from formguard.validators.types import TypeCheckError, check_type

logger = logging.getLogger(__name__)


@dataclass
class FormValue:
    """Current value of one field.

    Attributes:
        value: The value, or None if unset
        supplied: True once a setter has written the field
        writable: True if the last write came through a writable setter
    """

    value: Any = None
    supplied: bool = False
    writable: bool = False


class ValueStore:
    """Current values of all fields of a registry, in field order."""

    def __init__(self, registry: DefinitionRegistry):
        self._registry = registry
        self._values: dict[str, FormValue] = {}
        self.sync()

    def sync(self) -> None:
        """Align values with the registry after a definition change.

        New fields get their default; fields that were never supplied
        pick up a changed default; removed fields are dropped.
        """
        values: dict[str, FormValue] = {}
        for definition in self._registry.fields():
            current = self._values.get(definition.name)
            if current is not None and current.supplied:
                values[definition.name] = current
            else:
                values[definition.name] = FormValue(value=copy.deepcopy(definition.default))
        self._values = values

    def reset(self) -> None:
        """Restore every field to its default."""
        self._values = {}
        self.sync()

    # -------------------------------------------------------------------------
    # Single values
    # -------------------------------------------------------------------------

    def get(self, key: str) -> FormValue:
        try:
            return self._values[key]
        except KeyError:
            raise UnknownFieldError(key) from None

    def get_value(self, key: str) -> Any:
        return self.get(key).value

    def is_supplied(self, key: str) -> bool:
        return self.get(key).supplied

    def get_values(self) -> dict[str, Any]:
        """Return all values in field order."""
        return {key: fv.value for key, fv in self._values.items()}

    def set_value(self, key: str, value: Any) -> None:
        """Set one value regardless of readonly/hidden."""
        if key not in self._values:
            raise UnknownFieldError(key)
        self._values[key] = FormValue(value=value, supplied=True)

    # -------------------------------------------------------------------------
    # Bulk setters
    # -------------------------------------------------------------------------

    def set_all_values(self, values: Mapping[str, Any]) -> None:
        """Set values; every key must be a known field.

        Raises:
            UnknownFieldError: On the first unknown key (nothing is applied)
        """
        for key in values:
            if key not in self._values:
                raise UnknownFieldError(key)

        self._write(values, list(values), writable=False)

    def set_defined_values(self, values: Mapping[str, Any]) -> None:
        """Set values of known fields, requiring every non-optional field.

        Raises:
            MissingFieldError: If known, non-optional fields are absent
        """
        self._set_defined(values, self._registry.fields(), writable=False)

    def set_writable_values(self, values: Mapping[str, Any]) -> None:
        """Set values of known, writable fields; other keys are dropped."""
        targets = [d for d in self._registry.fields() if d.writable]
        keys = [d.name for d in targets if d.name in values]
        self._log_dropped(values, keys)
        self._write(values, keys, writable=True)

    def set_defined_writable_values(self, values: Mapping[str, Any]) -> None:
        """Set values of writable fields, requiring every non-optional one.

        Raises:
            MissingFieldError: If writable, non-optional fields are absent
        """
        targets = [d for d in self._registry.fields() if d.writable]
        self._set_defined(values, targets, writable=True)

    def set_writable_values_on_page(self, values: Mapping[str, Any], page: int) -> None:
        """Set values of writable fields on one page.

        Fields on other pages keep their values, so earlier wizard steps do
        not have to be resubmitted.

        Raises:
            MissingFieldError: If writable, non-optional fields of the page are absent
        """
        targets = [d for d in self._registry.fields() if d.writable and d.page == page]
        self._set_defined(values, targets, writable=True)

    def _set_defined(
        self,
        values: Mapping[str, Any],
        targets: list[FieldDefinition],
        writable: bool,
    ) -> None:
        missing = [d.name for d in targets if d.name not in values and not d.optional]
        if missing:
            raise MissingFieldError(missing)

        keys = [d.name for d in targets if d.name in values]
        self._log_dropped(values, keys)
        self._write(values, keys, writable=writable)

    def _write(self, values: Mapping[str, Any], keys: list[str], writable: bool) -> None:
        for key in keys:
            self._values[key] = FormValue(value=values[key], supplied=True, writable=writable)

    def _log_dropped(self, values: Mapping[str, Any], applied: list[str]) -> None:
        dropped = [key for key in values if key not in applied]
        if dropped:
            logger.debug("Ignored keys: %s", ", ".join(str(k) for k in dropped))


def is_empty(definition: FieldDefinition, value: Any) -> bool:
    """Check if a value counts as empty for a field.

    None, blank strings and empty collections are empty. For bool and
    switch fields a false value is empty too, so an unchecked box does not
    satisfy `required`.
    """
    if value is None:
        return True
    if isinstance(value, str) and value.strip() == "":
        return True
    if isinstance(value, (list, tuple, dict, set)) and len(value) == 0:
        return True
    if definition.type in ("bool", "switch"):
        try:
            return not check_type(definition.type, value)
        except TypeCheckError:
            return False
    return False


def same_value(a: Any, b: Any) -> bool:
    """Compare two submitted values.

    Transports deliver strings while definitions may use numbers, so
    scalars are compared by their string form. Booleans only equal booleans.
    """
    if isinstance(a, bool) or isinstance(b, bool):
        return a is b
    if isinstance(a, (list, tuple)) or isinstance(b, (list, tuple)):
        if not (isinstance(a, (list, tuple)) and isinstance(b, (list, tuple))):
            return False
        return len(a) == len(b) and all(same_value(x, y) for x, y in zip(a, b))
    if a == b:
        return True
    if a is None or b is None:
        return False
    return str(a) == str(b)
