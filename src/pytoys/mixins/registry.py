# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Name based lookup of mixins."""

from __future__ import annotations

from collections.abc import Mapping

from ..errors import ToolDefinitionError
from .base import Mixin
from .builtin import ExecMixin, TerminalMixin

BUILTIN_MIXINS: tuple[type[Mixin], ...] = (ExecMixin, TerminalMixin)


class MixinRegistry:
    """Resolve mixin names used in tool definitions."""

    def __init__(self, mixins: Mapping[str, type[Mixin]] | None = None) -> None:
        self._mixins: dict[str, type[Mixin]] = {cls.name: cls for cls in BUILTIN_MIXINS}
        if mixins:
            self._mixins.update(mixins)

    def register(self, name: str, mixin: type[Mixin]) -> None:
        self._mixins[name] = mixin

    def names(self) -> tuple[str, ...]:
        return tuple(sorted(self._mixins))

    def resolve(self, spec: object) -> object:
        """Return the mixin class or instance described by ``spec``.

        Raises:
            ToolDefinitionError: If ``spec`` names an unknown mixin.
        """

        if isinstance(spec, str):
            try:
                return self._mixins[spec]
            except KeyError as exc:
                raise ToolDefinitionError(f"Unknown mixin: {spec!r}") from exc
        return spec


__all__ = ["BUILTIN_MIXINS", "MixinRegistry"]
