"""Declarative table of the blueprint modules mounted on the app.

A module is a package exposing a Flask ``Blueprint`` and, optionally, a
``setup_module(app)`` hook that imports its routes. Routes must be attached
before the blueprint is registered, so the hook runs first.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import ModuleType
from typing import List, Optional, Sequence

from flask import Blueprint, Flask
from werkzeug.utils import import_string


@dataclass(frozen=True)
class ModuleDefinition:
    """Where a module lives and where its blueprint is mounted."""

    import_path: str
    attribute: str = "blueprint"
    url_prefix: Optional[str] = None
    version: str = "1.0"

    def import_module(self) -> ModuleType:
        return import_string(self.import_path)

    def load_blueprint(self, app: Optional[Flask] = None) -> Blueprint:
        """Import the module, run its setup hook for ``app`` and return the blueprint."""

        module = self.import_module()
        setup = getattr(module, "setup_module", None)
        if app is not None and callable(setup):
            setup(app)

        blueprint = getattr(module, self.attribute, None)
        if not isinstance(blueprint, Blueprint):
            raise TypeError(
                f"{self.import_path}.{self.attribute} should be a Flask Blueprint, "
                f"found {type(blueprint).__name__}"
            )
        return blueprint


def register_modules(app: Flask, modules: Sequence[ModuleDefinition]) -> List[str]:
    """Mount every module on ``app``; returns the registered blueprint names."""

    mounted = []
    for definition in modules:
        blueprint = definition.load_blueprint(app)
        app.register_blueprint(blueprint, url_prefix=definition.url_prefix)
        mounted.append(blueprint.name)
        app.logger.debug(
            "Mounted %s v%s at %s", blueprint.name, definition.version, definition.url_prefix or "/"
        )
    return mounted


def register_default_modules(app: Flask) -> List[str]:
    return register_modules(app, DEFAULT_MODULES)


DEFAULT_MODULES: Sequence[ModuleDefinition] = (
    ModuleDefinition("quizflow_app.modules.quiz_session", url_prefix="/quiz"),
)
