"""Field definitions: parsed model, structural schema and registry."""

from formguard.definition.field import FIELD_PROPERTIES, FieldDefinition
from formguard.definition.registry import DefinitionRegistry
from formguard.definition.schema import SchemaIssue, check_field_schema

__all__ = [
    "FIELD_PROPERTIES",
    "DefinitionRegistry",
    "FieldDefinition",
    "SchemaIssue",
    "check_field_schema",
]
