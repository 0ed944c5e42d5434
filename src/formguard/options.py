"""Options lists for select-style fields.

A field's `options` is either an inline mapping (value -> label) or the
name of a list served by an OptionsProvider. DictOptions is the in-memory
provider; labels are passed through the translator when one is given.
"""

from collections.abc import Mapping
from typing import Any

from formguard.definition.field import FieldDefinition
from formguard.exceptions import UnknownOptionsError
from formguard.types import OptionsProvider, Translator


class DictOptions:
    """Options provider backed by a mapping of list name -> options.

    Example:
        options = DictOptions({"countries": {"de": "Germany", "fr": "France"}})
        options.get("countries")  # -> {"de": "Germany", "fr": "France"}
    """

    def __init__(
        self,
        lists: Mapping[str, Mapping[Any, str]] | None = None,
        translator: Translator | None = None,
    ):
        self._lists: dict[str, dict[Any, str]] = {
            name: dict(options) for name, options in (lists or {}).items()
        }
        self.translator = translator

    def add(self, name: str, options: Mapping[Any, str]) -> None:
        """Add or replace a list."""
        self._lists[name] = dict(options)

    def get(self, name: str) -> dict[Any, str]:
        """Return a copy of a list, with translated labels.

        Raises:
            UnknownOptionsError: If no list has this name
        """
        if name not in self._lists:
            raise UnknownOptionsError(name)

        options = self._lists[name]
        if self.translator is None:
            return dict(options)
        return {value: self.translator.translate(label, {}) for value, label in options.items()}

    def names(self) -> list[str]:
        return list(self._lists)


def resolve_options(
    definition: FieldDefinition,
    provider: OptionsProvider | None,
) -> dict[Any, str] | None:
    """Return a field's options as an ordered mapping, or None if it has none.

    Raises:
        UnknownOptionsError: If the field references a list the provider
            does not know, or no provider is configured
    """
    if definition.options is None:
        return None

    name = definition.options_list_name
    if name is None:
        return dict(definition.options)

    if provider is None:
        raise UnknownOptionsError(name)
    return dict(provider.get(name))

