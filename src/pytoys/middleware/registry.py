# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Name based lookup of middleware."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping

from ..errors import ToolDefinitionError
from .base import Middleware
from .builtin import BUILTIN_MIDDLEWARE, DEFAULT_STACK

MiddlewareFactory = Callable[[], Middleware]


class MiddlewareRegistry:
    """Resolve middleware specifications into instances."""

    def __init__(self, factories: Mapping[str, MiddlewareFactory] | None = None) -> None:
        self._factories: dict[str, MiddlewareFactory] = {cls.name: cls for cls in BUILTIN_MIDDLEWARE}
        if factories:
            self._factories.update(factories)

    def register(self, name: str, factory: MiddlewareFactory) -> None:
        self._factories[name] = factory

    def names(self) -> tuple[str, ...]:
        return tuple(sorted(self._factories))

    def resolve(self, spec: object) -> Middleware:
        """Return a middleware instance for ``spec``.

        Args:
            spec: Registered name, :class:`Middleware` subclass, or instance.

        Returns:
            Middleware: Resolved instance.

        Raises:
            ToolDefinitionError: If ``spec`` cannot be resolved.
        """

        if isinstance(spec, Middleware):
            return spec
        if isinstance(spec, str):
            factory = self._factories.get(spec)
            if factory is None:
                raise ToolDefinitionError(f"Unknown middleware: {spec!r}")
            return factory()
        if isinstance(spec, type) and issubclass(spec, Middleware):
            return spec()
        raise ToolDefinitionError(f"Not a middleware: {spec!r}")

    def resolve_stack(self, specs: Iterable[object]) -> tuple[Middleware, ...]:
        return tuple(self.resolve(spec) for spec in specs)

    def default_stack(self) -> tuple[Middleware, ...]:
        return self.resolve_stack(DEFAULT_STACK)


__all__ = ["MiddlewareFactory", "MiddlewareRegistry"]
