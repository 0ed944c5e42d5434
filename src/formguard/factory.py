"""Form factory.

Forms are registered by name at application startup and built on demand,
each wired with the factory's translator and options provider.

Example:
    factory = FormFactory(translator=translator, options=options)
    factory.register("user", {"email": {"type": "email", "required": True}})
    factory.register_variant(
        "user_signup", "user",
        add={"password": {"type": "string", "min": 8, "required": True}},
    )

    form = factory.get_form("user_signup")
"""

from collections.abc import Callable, Mapping
from typing import Any

from formguard.config import FormConfig
from formguard.exceptions import DuplicateFormError, UnknownFormError
from formguard.form import Form
from formguard.translation import MessageTranslator
from formguard.types import OptionsProvider, Translator

# Builder signature: (form) -> None, populates a fresh, empty form
FormBuilder = Callable[[Form], None]


class FormFactory:
    """Registry of named form builders.

    A builder is either a definition mapping or a callable that receives a
    fresh, wired form and populates it (definitions, groups).
    """

    def __init__(
        self,
        translator: Translator | None = None,
        options: OptionsProvider | None = None,
        config: FormConfig | None = None,
    ):
        self.config = config or FormConfig.from_env()
        self.translator = translator or MessageTranslator.from_config(self.config)
        self.options = options
        self._builders: dict[str, FormBuilder] = {}

    def register(
        self,
        name: str,
        builder: FormBuilder | Mapping[str, Mapping[str, Any]],
    ) -> None:
        """Register a form by name.

        Raises:
            DuplicateFormError: If the name is already registered
        """
        if name in self._builders:
            raise DuplicateFormError(name)

        if isinstance(builder, Mapping):
            definition = dict(builder)

            def build(form: Form) -> None:
                form.set_definition(definition)

            self._builders[name] = build
        else:
            self._builders[name] = builder

    def register_variant(
        self,
        name: str,
        base: str,
        add: Mapping[str, Mapping[str, Any]] | None = None,
        change: Mapping[str, Mapping[str, Any]] | None = None,
    ) -> None:
        """Register a form built from another one with fields added or changed.

        Raises:
            UnknownFormError: If the base form is not registered
            DuplicateFormError: If the name is already registered
        """
        if base not in self._builders:
            raise UnknownFormError(base)
        base_builder = self._builders[base]

        def build(form: Form) -> None:
            base_builder(form)
            form.extend_definition(add, change)

        self.register(name, build)

    def get_form(self, name: str) -> Form:
        """Build a fresh form instance.

        Raises:
            UnknownFormError: If no form is registered under the name
        """
        if name not in self._builders:
            raise UnknownFormError(name)

        form = Form(translator=self.translator, options=self.options, config=self.config)
        self._builders[name](form)
        return form

    def has_form(self, name: str) -> bool:
        return name in self._builders

    def names(self) -> list[str]:
        return sorted(self._builders)
