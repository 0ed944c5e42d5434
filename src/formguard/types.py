"""Core types for formguard.

This module defines the foundational types shared across the engine:
- FieldType: the closed set of field types
- ErrorToken: translation tokens for validation violations
- ValidationError / ValidationResult: the user-facing outcome of a pass
- Translator / OptionsProvider: the injected collaborator protocols
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol


class FieldType(Enum):
    """Supported field types."""

    INT = "int"
    NUMERIC = "numeric"
    SCALAR = "scalar"
    LIST = "list"
    BOOL = "bool"
    STRING = "string"
    EMAIL = "email"
    IP = "ip"
    URL = "url"
    DATE = "date"
    DATETIME = "datetime"
    TIME = "time"
    SWITCH = "switch"


class ErrorToken:
    """Translation tokens used for validation violations."""

    REQUIRED = "form.required"
    INVALID_TYPE = "form.invalid_type"
    MIN_VALUE = "form.min_value"
    MAX_VALUE = "form.max_value"
    MIN_LENGTH = "form.min_length"
    MAX_LENGTH = "form.max_length"
    MIN_COUNT = "form.min_count"
    MAX_COUNT = "form.max_count"
    INVALID_OPTION = "form.invalid_option"
    PATTERN_MISMATCH = "form.pattern_mismatch"
    MATCHES = "form.matches"
    NOT_MATCHES = "form.not_matches"


@dataclass(frozen=True)
class ValidationError:
    """A single validation violation.

    Attributes:
        field: Field name this error belongs to
        code: Translation token (e.g., "form.required")
        message: Translated, human-readable message
        page: Page of the owning field, or None
        params: Interpolation parameters used for the message
    """

    field: str
    code: str
    message: str
    page: int | None = None
    params: dict[str, Any] = field(default_factory=dict, compare=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "field": self.field,
            "code": self.code,
            "message": self.message,
            "page": self.page,
        }


@dataclass
class ValidationResult:
    """Result of validating a form.

    Attributes:
        valid: True if no errors were found
        errors: Violations in field-definition order
    """

    valid: bool
    errors: list[ValidationError] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": [e.to_dict() for e in self.errors],
        }


class Translator(Protocol):
    """Protocol for the translation backend.

    Used for captions, option labels and error messages.
    """

    def translate(self, token: str, params: Mapping[str, Any] | None = None) -> str:
        """Translate a token, interpolating params.

        Args:
            token: Translation token or pre-translated text
            params: Values for placeholders in the translated text

        Returns:
            The translated string
        """
        ...


class OptionsProvider(Protocol):
    """Protocol for named option lists.

    A field whose `options` property is a string refers to a list served
    by this provider. Lists are fetched lazily, when first needed.
    """

    def get(self, name: str) -> Mapping[Any, str]:
        """Return the ordered value -> label mapping for a list.

        Args:
            name: Options list name

        Returns:
            Ordered mapping of option value to label

        Raises:
            UnknownOptionsError: If no list has this name
        """
        ...
