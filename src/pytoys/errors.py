# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Exceptions raised while loading, defining, and running tools."""

from __future__ import annotations

from collections.abc import Sequence


class ToysError(RuntimeError):
    """Base class for errors raised by the tool framework."""


class ToolDefinitionError(ToysError):
    """Raised when directives describe an invalid or conflicting tool tree."""


class SourceLoadError(ToysError):
    """Raised when a configuration source cannot be read, parsed, or evaluated."""

    def __init__(self, message: str, *, source: str | None = None) -> None:
        """Initialise the error with an optional source description.

        Args:
            message: Human-readable description of the failure.
            source: Display name of the configuration source that failed.
        """

        detail = f"{source}: {message}" if source else message
        super().__init__(detail)
        self.source = source
        self.reason = message


class FetchError(SourceLoadError):
    """Raised when a remote configuration source cannot be materialised."""


class UsageError(ToysError):
    """Raised when command-line arguments do not match a tool's interface."""

    def __init__(self, messages: Sequence[str]) -> None:
        """Record the individual argument problems.

        Args:
            messages: Ordered usage error messages.
        """

        self.messages = tuple(messages)
        super().__init__("; ".join(self.messages) or "usage error")


__all__ = [
    "FetchError",
    "SourceLoadError",
    "ToolDefinitionError",
    "ToysError",
    "UsageError",
]
