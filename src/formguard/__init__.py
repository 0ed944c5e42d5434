"""formguard: whitelist input validation for untrusted key/value input.

A form holds declarative field rules, accepts untrusted values through
bulk setters, resolves conditional requiredness, checks every field and
aggregates translated, page-aware errors.

Usage:
    from formguard import Form

    form = Form({
        "email": {"type": "email", "required": True},
        "newsletter": {"type": "switch"},
        "topics": {"type": "list", "options": "topics", "depends": "newsletter"},
    })
    form.set_defined_writable_values(payload)
    result = form.validate()
"""

from formguard.aggregator import ErrorAggregator
from formguard.config import FormConfig
from formguard.definition import DefinitionRegistry, FieldDefinition
from formguard.exceptions import (
    CircularDependencyError,
    ConfigurationError,
    DuplicateFieldError,
    DuplicateFormError,
    FormError,
    GroupsNotSetError,
    InvalidDefinitionError,
    MissingFieldError,
    UnknownFieldError,
    UnknownFormError,
    UnknownOptionsError,
    UnknownPropertyError,
    ValidationNotRunError,
)
from formguard.factory import FormFactory
from formguard.form import Form
from formguard.options import DictOptions
from formguard.projector import ViewProjector
from formguard.resolver import DependencyResolver
from formguard.translation import MessageTranslator
from formguard.types import (
    ErrorToken,
    FieldType,
    OptionsProvider,
    Translator,
    ValidationError,
    ValidationResult,
)
from formguard.validators.constraints import ConstraintEvaluator
from formguard.values import FormValue, ValueStore

__all__ = [
    # Engine
    "Form",
    "FormFactory",
    "FormConfig",
    # Components
    "DefinitionRegistry",
    "FieldDefinition",
    "ValueStore",
    "FormValue",
    "DependencyResolver",
    "ConstraintEvaluator",
    "ErrorAggregator",
    "ViewProjector",
    # Collaborators
    "MessageTranslator",
    "DictOptions",
    "Translator",
    "OptionsProvider",
    # Types
    "ErrorToken",
    "FieldType",
    "ValidationError",
    "ValidationResult",
    # Exceptions
    "FormError",
    "ConfigurationError",
    "UnknownFieldError",
    "UnknownPropertyError",
    "DuplicateFieldError",
    "InvalidDefinitionError",
    "CircularDependencyError",
    "ValidationNotRunError",
    "GroupsNotSetError",
    "UnknownOptionsError",
    "UnknownFormError",
    "DuplicateFormError",
    "MissingFieldError",
]
