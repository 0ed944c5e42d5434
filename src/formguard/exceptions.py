"""Exceptions raised by formguard.

Two families never overlap:

- ConfigurationError and its subclasses signal a programming mistake in the
  form definition or in how the form is driven (unknown field, duplicate key,
  circular dependency, reading errors before validating). They are raised
  immediately and are never translated for end users.
- MissingFieldError signals a payload that omitted a field the form expects
  to be present (possibly empty).

Validation violations (required, wrong type, out of bounds, ...) are not
exceptions; they are collected as ValidationError entries.
"""


class FormError(Exception):
    """Base class for all formguard exceptions."""
    pass


class ConfigurationError(FormError):
    """The form definition or its usage is invalid."""
    pass


class UnknownFieldError(ConfigurationError, KeyError):
    """A field name is not part of the form definition."""

    def __init__(self, key: str, message: str | None = None):
        self.key = key
        super().__init__(message or f"Unknown field '{key}'")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0])


class UnknownPropertyError(ConfigurationError, KeyError):
    """A field definition does not carry the requested property."""

    def __init__(self, key: str, prop: str):
        self.key = key
        self.prop = prop
        super().__init__(f"Field '{key}' has no property '{prop}'")

    def __str__(self) -> str:
        return str(self.args[0])


class DuplicateFieldError(ConfigurationError):
    """A field with the same name is already defined."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Field '{key}' is already defined")


class InvalidDefinitionError(ConfigurationError, ValueError):
    """A field definition is malformed."""

    def __init__(self, key: str | None, message: str):
        self.key = key
        prefix = f"Field '{key}': " if key else ""
        super().__init__(prefix + message)


class CircularDependencyError(ConfigurationError):
    """Fields depend on each other in a cycle."""

    def __init__(self, cycle: list[str]):
        self.cycle = cycle
        super().__init__("Circular dependency: " + " -> ".join(cycle))


class ValidationNotRunError(ConfigurationError):
    """Errors were requested before a validation pass."""

    def __init__(self, message: str = "Form has not been validated yet"):
        super().__init__(message)


class GroupsNotSetError(ConfigurationError):
    """Grouped output was requested before groups were configured."""

    def __init__(self) -> None:
        super().__init__("Groups are not set; call set_groups() first")


class UnknownOptionsError(ConfigurationError):
    """An options list name could not be resolved."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown options list '{name}'")


class UnknownFormError(ConfigurationError):
    """No form is registered under the requested name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Form '{name}' is not registered")


class DuplicateFormError(ConfigurationError):
    """A form with the same name is already registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Form '{name}' is already registered")


class MissingFieldError(FormError):
    """The payload omitted fields the form expects to be present."""

    def __init__(self, keys: list[str]):
        self.keys = keys
        super().__init__("Missing field(s): " + ", ".join(keys))
