"""In-memory translator for captions and error messages.

Catalogs map translation tokens to message templates with `{name}`
placeholders. A token missing from the active locale is looked up in the
fallback locale; a token missing from both is treated as pre-translated
text and only interpolated.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from datetime import date, time
from decimal import Decimal
from typing import Any

from formguard.config import FormConfig
from formguard.types import ErrorToken

logger = logging.getLogger(__name__)

# Decimals with larger exponents are shown in scientific notation
DECIMAL_PLAIN_DIGITS = 40


DEFAULT_CATALOGS: dict[str, dict[str, str]] = {
    "en": {
        ErrorToken.REQUIRED: "{caption} is required",
        ErrorToken.INVALID_TYPE: "{caption} has an invalid format",
        ErrorToken.MIN_VALUE: "{caption} must be at least {min}",
        ErrorToken.MAX_VALUE: "{caption} must be at most {max}",
        ErrorToken.MIN_LENGTH: "{caption} must be at least {min} characters long",
        ErrorToken.MAX_LENGTH: "{caption} must be at most {max} characters long",
        ErrorToken.MIN_COUNT: "Select at least {min} entries for {caption}",
        ErrorToken.MAX_COUNT: "Select at most {max} entries for {caption}",
        ErrorToken.INVALID_OPTION: "'{value}' is not a valid option for {caption}",
        ErrorToken.PATTERN_MISMATCH: "{caption} format is invalid",
        ErrorToken.MATCHES: "{caption} must match {other}",
        ErrorToken.NOT_MATCHES: "{caption} must be different from {other}",
    },
    "de": {
        ErrorToken.REQUIRED: "{caption} muss ausgefüllt werden",
        ErrorToken.INVALID_TYPE: "{caption} hat ein ungültiges Format",
        ErrorToken.MIN_VALUE: "{caption} muss mindestens {min} sein",
        ErrorToken.MAX_VALUE: "{caption} darf höchstens {max} sein",
        ErrorToken.MIN_LENGTH: "{caption} muss mindestens {min} Zeichen lang sein",
        ErrorToken.MAX_LENGTH: "{caption} darf höchstens {max} Zeichen lang sein",
        ErrorToken.MIN_COUNT: "Bitte mindestens {min} Einträge für {caption} auswählen",
        ErrorToken.MAX_COUNT: "Bitte höchstens {max} Einträge für {caption} auswählen",
        ErrorToken.INVALID_OPTION: "'{value}' ist keine gültige Auswahl für {caption}",
        ErrorToken.PATTERN_MISMATCH: "{caption} hat ein ungültiges Format",
        ErrorToken.MATCHES: "{caption} muss mit {other} übereinstimmen",
        ErrorToken.NOT_MATCHES: "{caption} muss sich von {other} unterscheiden",
    },
}


class MessageTranslator:
    """Translates tokens using per-locale catalogs.

    Example:
        translator = MessageTranslator(locale="de")
        translator.translate("form.required", {"caption": "E-Mail"})
        # -> "E-Mail muss ausgefüllt werden"
    """

    # Pattern: {name}
    PATTERN = re.compile(r"\{(?P<name>\w+)\}")

    def __init__(
        self,
        locale: str = "en",
        fallback_locale: str = "en",
        catalogs: Mapping[str, Mapping[str, str]] | None = None,
    ):
        """Initialize the translator.

        Args:
            locale: Active locale
            fallback_locale: Locale used when a token is missing
            catalogs: Extra catalogs merged over the defaults, keyed by locale
        """
        self.locale = locale
        self.fallback_locale = fallback_locale
        self.catalogs: dict[str, dict[str, str]] = {
            name: dict(messages) for name, messages in DEFAULT_CATALOGS.items()
        }
        for name, messages in (catalogs or {}).items():
            self.add_messages(name, messages)

    @classmethod
    def from_config(cls, config: FormConfig | None = None) -> MessageTranslator:
        config = config or FormConfig.from_env()
        return cls(locale=config.locale, fallback_locale=config.fallback_locale)

    def add_messages(self, locale: str, messages: Mapping[str, str]) -> None:
        """Merge messages into a locale's catalog."""
        self.catalogs.setdefault(locale, {}).update(messages)

    def set_locale(self, locale: str) -> None:
        self.locale = locale

    def get_locale(self) -> str:
        return self.locale

    def translate(self, token: str, params: Mapping[str, Any] | None = None) -> str:
        """Translate a token and interpolate params."""
        template = self.catalogs.get(self.locale, {}).get(token)
        if template is None:
            template = self.catalogs.get(self.fallback_locale, {}).get(token)
            if template is not None:
                logger.debug(
                    "Token '%s' missing for locale '%s', using '%s'",
                    token,
                    self.locale,
                    self.fallback_locale,
                )
            else:
                template = token

        return self.interpolate(template, params or {})

    def interpolate(self, template: str, params: Mapping[str, Any]) -> str:
        """Replace {name} placeholders; unknown placeholders are kept."""

        def replace(match: re.Match) -> str:
            name = match.group("name")
            if name not in params:
                return match.group(0)
            return _format_param(params[name])

        return self.PATTERN.sub(replace, template)


def _format_param(value: Any) -> str:
    """Format a parameter value for display."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return _format_decimal(value)
    if isinstance(value, int):
        try:
            return str(value)
        except ValueError:
            # Beyond the interpreter's int -> str digit limit
            return f"{value.bit_length()}-bit integer"
    if isinstance(value, (list, tuple)):
        return ", ".join(_format_param(v) for v in value)
    return str(value)


def _format_decimal(value: Decimal) -> str:
    """Plain notation without trailing zeros; scientific for extreme exponents."""
    if not value.is_finite() or abs(value.adjusted()) > DECIMAL_PLAIN_DIGITS:
        return str(value)
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
