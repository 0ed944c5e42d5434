"""Error aggregation.

Collects translated ValidationError entries per field. Reading errors is
only meaningful after a validation pass, so the read operations raise
ValidationNotRunError until mark_validated() has been called since the last
clear.
"""

from collections.abc import Mapping
from typing import Any

from formguard.definition.registry import DefinitionRegistry
from formguard.exceptions import UnknownFieldError, ValidationNotRunError
from formguard.types import Translator, ValidationError


class ErrorAggregator:
    """Holds the error set of one form instance."""

    def __init__(self, registry: DefinitionRegistry, translator: Translator):
        self.registry = registry
        self.translator = translator
        self._errors: list[ValidationError] = []
        self._validated = False

    @property
    def validated(self) -> bool:
        return self._validated

    def mark_validated(self) -> None:
        self._validated = True

    def clear_errors(self) -> None:
        """Reset to the state before any validation pass."""
        self._errors = []
        self._validated = False

    def add_error(self, key: str, token: str, params: Mapping[str, Any] | None = None) -> ValidationError:
        """Translate and append one error for a field.

        The translated caption is always available as the `caption` param;
        an `other` param naming another field's caption is translated too.

        Raises:
            UnknownFieldError: If the field is not defined
        """
        if key not in self.registry:
            raise UnknownFieldError(key)

        definition = self.registry.get_field(key)
        message_params = dict(params or {})
        message_params["caption"] = self.translator.translate(definition.display_name, {})
        if isinstance(message_params.get("other"), str):
            message_params["other"] = self.translator.translate(message_params["other"], {})

        error = ValidationError(
            field=key,
            code=token,
            message=self.translator.translate(token, message_params),
            page=definition.page,
            params=message_params,
        )
        self._errors.append(error)
        return error

    def has_errors(self) -> bool:
        return bool(self._errors)

    def is_valid(self) -> bool:
        """Return True if a validation pass found no errors.

        Raises:
            ValidationNotRunError: If no validation pass has run
        """
        self._require_validated()
        return not self._errors

    def get_errors(self) -> list[ValidationError]:
        """Return all errors in field-definition order.

        Raises:
            ValidationNotRunError: If no validation pass has run
        """
        self._require_validated()
        return self._ordered()

    def get_errors_by_field(self) -> dict[str, list[str]]:
        """Return error messages keyed by field.

        Raises:
            ValidationNotRunError: If no validation pass has run
        """
        self._require_validated()
        result: dict[str, list[str]] = {}
        for error in self._ordered():
            result.setdefault(error.field, []).append(error.message)
        return result

    def get_errors_by_page(self) -> dict[int | None, list[ValidationError]]:
        """Return errors grouped by the page of their field.

        Pages appear in the order of their first field; errors of fields
        without a page are grouped under None.

        Raises:
            ValidationNotRunError: If no validation pass has run
        """
        self._require_validated()
        result: dict[int | None, list[ValidationError]] = {}
        for error in self._ordered():
            result.setdefault(error.page, []).append(error)
        return result

    def get_first_error(self) -> ValidationError | None:
        """Return the first error by field-definition order, or None."""
        errors = self._ordered()
        return errors[0] if errors else None

    def get_errors_as_text(self, indent: str = "  ") -> str:
        """Render all errors as an indented listing grouped by page.

        Raises:
            ValidationNotRunError: If no validation pass has run
        """
        lines: list[str] = []
        for page, errors in self.get_errors_by_page().items():
            lines.append(f"Page {page}:" if page is not None else "Other:")
            current_field = None
            for error in errors:
                if error.field != current_field:
                    current_field = error.field
                    lines.append(f"{indent}{error.params.get('caption', error.field)} ({error.field}):")
                lines.append(f"{indent * 2}- {error.message}")
        return "\n".join(lines)

    def _ordered(self) -> list[ValidationError]:
        # Stable sort keeps check order within a field
        position = {key: i for i, key in enumerate(self.registry.keys())}
        return sorted(self._errors, key=lambda e: position.get(e.field, len(position)))

    def _require_validated(self) -> None:
        if not self._validated:
            raise ValidationNotRunError()
