"""The form: one validation subject wired to its collaborators.

Lifecycle:
1. Define fields (set_definition / add_definition / change_definition)
2. Fill values through a bulk setter
3. validate(): resolve requiredness, check every field, aggregate errors
4. Read errors, clean values, or a JSON-safe projection

A form instance holds mutable values and errors and is meant for one
request at a time; use clone() or a FormFactory to get fresh instances.
"""

import logging
from collections.abc import Mapping
from typing import Any

from formguard.aggregator import ErrorAggregator
from formguard.config import FormConfig
from formguard.definition.registry import DefinitionRegistry
from formguard.exceptions import ValidationNotRunError
from formguard.options import resolve_options
from formguard.projector import ViewProjector
from formguard.resolver import DependencyResolver
from formguard.translation import MessageTranslator
from formguard.types import OptionsProvider, Translator, ValidationError, ValidationResult
from formguard.validators.constraints import ConstraintEvaluator
from formguard.values import ValueStore

logger = logging.getLogger(__name__)


class Form:
    """Whitelist validation of one input snapshot against field rules.

    Example:
        form = Form({
            "email": {"type": "email", "required": True},
            "password": {"type": "string", "min": 8, "required": True},
            "password_again": {"type": "string", "matches": "password"},
        })
        form.set_defined_writable_values(request_body)
        if not form.validate().valid:
            return form.get_errors_by_page()
    """

    def __init__(
        self,
        definition: Mapping[str, Mapping[str, Any]] | None = None,
        translator: Translator | None = None,
        options: OptionsProvider | None = None,
        config: FormConfig | None = None,
    ):
        """Initialize the form.

        Args:
            definition: Field definitions keyed by field name
            translator: Translation backend (default: MessageTranslator)
            options: Provider for options referenced by name
            config: Settings for the default translator
        """
        self.config = config or FormConfig.from_env()
        self.translator = translator or MessageTranslator.from_config(self.config)
        self.options = options

        self.registry = DefinitionRegistry()
        self.values = ValueStore(self.registry)
        self.resolver = DependencyResolver(self.registry, options)
        self.evaluator = ConstraintEvaluator(self.registry, options)
        self.aggregator = ErrorAggregator(self.registry, self.translator)
        self.projector = ViewProjector(
            self.registry,
            self.values,
            self.resolver,
            self.aggregator,
            self.translator,
            options,
        )
        self._clean_values: dict[str, Any] | None = None

        if definition:
            self.set_definition(definition)

    # =========================================================================
    # Definition
    # =========================================================================

    def set_definition(self, definition: Mapping[str, Mapping[str, Any]]) -> None:
        self.registry.set_definition(definition)
        self.values.sync()

    def add_definition(self, key: str, definition: Mapping[str, Any]) -> None:
        self.registry.add_definition(key, definition)
        self.values.sync()

    def change_definition(self, key: str, changes: Mapping[str, Any]) -> None:
        self.registry.change_definition(key, changes)
        self.values.sync()

    def extend_definition(
        self,
        add: Mapping[str, Mapping[str, Any]] | None = None,
        change: Mapping[str, Mapping[str, Any]] | None = None,
    ) -> None:
        """Add and change several fields at once; see DefinitionRegistry.extend_definition."""
        self.registry.extend_definition(add, change)
        self.values.sync()

    def get_definition(self, key: str | None = None, prop: str | None = None) -> Any:
        return self.registry.get_definition(key, prop)

    def get_hash(self) -> str:
        return self.registry.get_hash()

    def get_options(self, key: str) -> dict[Any, str] | None:
        """Return a field's resolved options, or None if it has none."""
        return resolve_options(self.registry.get_field(key), self.options)

    def translate(self, token: str, params: Mapping[str, Any] | None = None) -> str:
        return self.translator.translate(token, params or {})

    # =========================================================================
    # Values
    # =========================================================================

    def get_value(self, key: str) -> Any:
        return self.values.get_value(key)

    def get_values(self) -> dict[str, Any]:
        return self.values.get_values()

    def is_supplied(self, key: str) -> bool:
        return self.values.is_supplied(key)

    def set_value(self, key: str, value: Any) -> None:
        self.values.set_value(key, value)

    def set_all_values(self, values: Mapping[str, Any]) -> None:
        self.values.set_all_values(values)

    def set_defined_values(self, values: Mapping[str, Any]) -> None:
        self.values.set_defined_values(values)

    def set_writable_values(self, values: Mapping[str, Any]) -> None:
        self.values.set_writable_values(values)

    def set_defined_writable_values(self, values: Mapping[str, Any]) -> None:
        self.values.set_defined_writable_values(values)

    def set_writable_values_on_page(self, values: Mapping[str, Any], page: int) -> None:
        self.values.set_writable_values_on_page(values, page)

    def get_values_by_page(self) -> dict[int | None, dict[str, Any]]:
        return self.projector.get_values_by_page()

    def get_values_by_tag(self, tag: str) -> dict[str, Any]:
        return self.projector.get_values_by_tag(tag)

    def get_clean_values(self) -> dict[str, Any]:
        """Return values coerced into their field types.

        Reflects the last validation pass. Fields with errors are left
        out; empty fields map to None.

        Raises:
            ValidationNotRunError: If no validation pass has run
        """
        if self._clean_values is None or not self.aggregator.validated:
            raise ValidationNotRunError()
        return dict(self._clean_values)

    def reset(self) -> None:
        """Restore default values and drop all errors."""
        self.values.reset()
        self.clear_errors()

    # =========================================================================
    # Validation
    # =========================================================================

    def validate(self) -> ValidationResult:
        """Check every field against the current values.

        Previous errors are discarded first.

        Raises:
            CircularDependencyError: If `depends` chains form a cycle
        """
        self.clear_errors()

        values = self.values.get_values()
        required = self.resolver.required_fields(values)

        clean: dict[str, Any] = {}
        for definition in self.registry.fields():
            key = definition.name
            check = self.evaluator.check(definition, values[key], required[key], values)
            for violation in check.violations:
                self.aggregator.add_error(key, violation.code, violation.params)
            if check.valid:
                clean[key] = check.value

        self.aggregator.mark_validated()
        self._clean_values = clean

        errors = self.aggregator.get_errors()
        logger.debug(
            "Validated %d fields: %d error(s)", len(self.registry), len(errors)
        )
        return ValidationResult(valid=not errors, errors=errors)

    def add_error(
        self,
        key: str,
        token: str,
        params: Mapping[str, Any] | None = None,
    ) -> ValidationError:
        return self.aggregator.add_error(key, token, params)

    def has_errors(self) -> bool:
        return self.aggregator.has_errors()

    def is_valid(self) -> bool:
        return self.aggregator.is_valid()

    def get_errors(self) -> list[ValidationError]:
        return self.aggregator.get_errors()

    def get_errors_by_field(self) -> dict[str, list[str]]:
        return self.aggregator.get_errors_by_field()

    def get_errors_by_page(self) -> dict[int | None, list[ValidationError]]:
        return self.aggregator.get_errors_by_page()

    def get_first_error(self) -> ValidationError | None:
        return self.aggregator.get_first_error()

    def get_errors_as_text(self) -> str:
        return self.aggregator.get_errors_as_text()

    def clear_errors(self) -> None:
        self.aggregator.clear_errors()
        self._clean_values = None

    # =========================================================================
    # Projection
    # =========================================================================

    def get_as_array(self) -> dict[str, dict[str, Any]]:
        return self.projector.get_as_array()

    def get_field_as_array(self, key: str) -> dict[str, Any]:
        return self.projector.get_field_as_array(key)

    def set_groups(self, groups: Mapping[str, list[str]]) -> None:
        self.projector.set_groups(groups)

    def get_as_grouped_array(self) -> dict[str, dict[str, dict[str, Any]]]:
        return self.projector.get_as_grouped_array()

    # =========================================================================
    # Composition
    # =========================================================================

    def clone(self) -> "Form":
        """Return a fresh form with the same definition and collaborators.

        Values and errors are not copied.
        """
        form = Form(
            definition=self.registry.get_definition(),
            translator=self.translator,
            options=self.options,
            config=self.config,
        )
        groups = self.projector.get_groups()
        if groups is not None:
            form.set_groups(groups)
        return form

    def extend(
        self,
        add: Mapping[str, Mapping[str, Any]] | None = None,
        change: Mapping[str, Mapping[str, Any]] | None = None,
    ) -> "Form":
        """Return a clone with fields added and/or changed.

        Fields in `add` are appended in order before `change` is merged.

        Raises:
            DuplicateFieldError: If an added field already exists
            UnknownFieldError: If a changed field does not exist
        """
        form = self.clone()
        form.extend_definition(add, change)
        return form

    def __repr__(self) -> str:
        return f"<Form fields={len(self.registry)} hash={self.get_hash()[:12]}>"
