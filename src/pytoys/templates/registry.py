# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Name based lookup of templates."""

from __future__ import annotations

from collections.abc import Mapping

from ..errors import ToolDefinitionError
from .base import Template
from .builtin import BUILTIN_TEMPLATES


class TemplateRegistry:
    """Resolve template names and instantiate templates."""

    def __init__(self, templates: Mapping[str, type[Template]] | None = None) -> None:
        self._templates: dict[str, type[Template]] = {cls.name: cls for cls in BUILTIN_TEMPLATES}
        if templates:
            self._templates.update(templates)

    def register(self, name: str, template: type[Template]) -> None:
        self._templates[name] = template

    def names(self) -> tuple[str, ...]:
        return tuple(sorted(self._templates))

    def create(self, spec: str | type, *args: object, **kwargs: object) -> Template:
        """Instantiate the template described by ``spec``.

        Raises:
            ToolDefinitionError: If the template is unknown or rejects the arguments.
        """

        if isinstance(spec, str):
            template_cls = self._templates.get(spec)
            if template_cls is None:
                raise ToolDefinitionError(f"Unknown template: {spec!r}")
        else:
            template_cls = spec
        try:
            template = template_cls(*args, **kwargs)
        except TypeError as exc:
            raise ToolDefinitionError(f"Invalid arguments for template {spec!r}: {exc}") from exc
        if not hasattr(template, "directives"):
            raise ToolDefinitionError(f"Template {spec!r} does not provide directives()")
        return template


__all__ = ["TemplateRegistry"]
