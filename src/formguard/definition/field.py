"""Parsed view of a raw field definition."""

import re
from dataclasses import dataclass, field
from typing import Any

from formguard.types import FieldType

# Every property a field definition may carry
FIELD_PROPERTIES = (
    "type",
    "type_params",
    "caption",
    "options",
    "min",
    "max",
    "required",
    "optional",
    "readonly",
    "hidden",
    "default",
    "regex",
    "matches",
    "depends",
    "depends_value",
    "depends_value_empty",
    "depends_first_option",
    "depends_last_option",
    "page",
    "tags",
)

# Narrowing conditions for `depends`; at most one per field
DEPENDS_CONDITIONS = (
    "depends_value",
    "depends_value_empty",
    "depends_first_option",
    "depends_last_option",
)

NEGATION_PREFIX = "!"


@dataclass
class FieldDefinition:
    name: str
    type: str = FieldType.STRING.value
    type_params: dict[str, Any] = field(default_factory=dict)
    caption: str | None = None
    options: dict[Any, str] | str | None = None
    min: Any = None
    max: Any = None
    required: bool = False
    optional: bool = False
    readonly: bool = False
    hidden: bool = False
    default: Any = None
    regex: str | None = None
    matches: str | None = None
    depends: str | None = None
    depends_value: Any = None
    depends_value_empty: bool = False
    depends_first_option: bool = False
    depends_last_option: bool = False
    page: int | None = None
    tags: list[str] = field(default_factory=list)
    pattern: re.Pattern | None = field(default=None, repr=False, compare=False)

    @classmethod
    def from_dict(cls, name: str, data: dict[str, Any]) -> "FieldDefinition":
        """Create FieldDefinition from an already-checked raw mapping."""
        options = data.get("options")
        if isinstance(options, (list, tuple)):
            # A plain list of values uses each value as its own label
            options = {value: str(value) for value in options}
        elif isinstance(options, dict):
            options = dict(options)

        regex = data.get("regex")

        return cls(
            name=name,
            type=data.get("type", FieldType.STRING.value),
            type_params=dict(data.get("type_params") or {}),
            caption=data.get("caption"),
            options=options,
            min=data.get("min"),
            max=data.get("max"),
            required=data.get("required", False),
            optional=data.get("optional", False),
            readonly=data.get("readonly", False),
            hidden=data.get("hidden", False),
            default=data.get("default"),
            regex=regex,
            matches=data.get("matches"),
            depends=data.get("depends"),
            depends_value=data.get("depends_value"),
            depends_value_empty=data.get("depends_value_empty", False),
            depends_first_option=data.get("depends_first_option", False),
            depends_last_option=data.get("depends_last_option", False),
            page=data.get("page"),
            tags=list(data.get("tags") or []),
            pattern=re.compile(regex) if regex is not None else None,
        )

    @property
    def matches_field(self) -> str | None:
        """Name of the field referenced by `matches`, without negation."""
        if self.matches is None:
            return None
        return self.matches.removeprefix(NEGATION_PREFIX)

    @property
    def matches_negated(self) -> bool:
        """True if the values must differ rather than be equal."""
        return self.matches is not None and self.matches.startswith(NEGATION_PREFIX)

    @property
    def writable(self) -> bool:
        """True if writable setters may change this field."""
        return not (self.readonly or self.hidden)

    @property
    def options_list_name(self) -> str | None:
        """Name of the external options list, if options is a reference."""
        return self.options if isinstance(self.options, str) else None

    @property
    def display_name(self) -> str:
        """Caption, or a title-cased version of the field name."""
        if self.caption:
            return self.caption
        return self.name.replace("_", " ").title()
