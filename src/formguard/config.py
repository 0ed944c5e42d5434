"""Runtime configuration for formguard."""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass
class FormConfig:
    """Settings shared by translators and the form factory.

    Attributes:
        locale: Locale used for captions and error messages
        fallback_locale: Locale consulted when a token is missing
    """

    locale: str = "en"
    fallback_locale: str = "en"

    @classmethod
    def from_env(cls) -> FormConfig:
        """Create config from environment variables.

        Resolution order:
        1. FORMGUARD_LOCALE / FORMGUARD_FALLBACK_LOCALE env vars
        2. Default: "en" for both
        """
        locale = os.environ.get("FORMGUARD_LOCALE") or "en"
        fallback = os.environ.get("FORMGUARD_FALLBACK_LOCALE") or "en"
        return cls(locale=locale, fallback_locale=fallback)
