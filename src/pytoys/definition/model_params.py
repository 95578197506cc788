# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Flag and positional argument specifications attached to tool definitions."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Final

from ..errors import ToolDefinitionError

_SWITCH_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(?P<dashes>--?)(?P<negate>\[no-\])?(?P<name>[A-Za-z0-9?][\w-]*)(?:(?P<sep>[= ])(?P<value>\S+))?$",
)
_PARAM_SANITIZER: Final[re.Pattern[str]] = re.compile(r"\W")
DEFAULT_VALUE_LABEL: Final[str] = "VALUE"


def canonical_key(key: str) -> str:
    """Return the canonical dashed form of ``key`` used for uniqueness checks."""

    return key.strip().lower().replace("_", "-")


def param_name_for(key: str) -> str:
    """Return a Python identifier derived from ``key`` for click parameters."""

    candidate = _PARAM_SANITIZER.sub("_", key.strip())
    return candidate if not candidate[:1].isdigit() else f"_{candidate}"


@dataclass(frozen=True, slots=True)
class SwitchSyntax:
    """Parsed representation of a single flag switch string.

    Attributes:
        option: Primary option string such as ``--force`` or ``-f``.
        negation: Negated option (``--no-force``) for ``--[no-]force`` syntax.
        value_label: Placeholder for value-taking switches, otherwise ``None``.
    """

    option: str
    negation: str | None = None
    value_label: str | None = None

    @property
    def takes_value(self) -> bool:
        return self.value_label is not None

    @property
    def option_strings(self) -> tuple[str, ...]:
        return (self.option,) if self.negation is None else (self.option, self.negation)


def parse_switch(switch: str) -> SwitchSyntax:
    """Parse ``switch`` into a :class:`SwitchSyntax`.

    Args:
        switch: Switch text such as ``-f``, ``--name=VALUE`` or ``--[no-]color``.

    Returns:
        SwitchSyntax: Parsed switch.

    Raises:
        ToolDefinitionError: If the switch text is malformed.
    """

    match = _SWITCH_PATTERN.match(switch.strip())
    if match is None:
        raise ToolDefinitionError(f"Illegal flag switch: {switch!r}")
    dashes, name = match.group("dashes"), match.group("name")
    option = f"{dashes}{name}"
    negation = None
    if match.group("negate"):
        if dashes != "--" or match.group("value"):
            raise ToolDefinitionError(f"Negatable switches must be long boolean switches: {switch!r}")
        negation = f"--no-{name}"
    return SwitchSyntax(option=option, negation=negation, value_label=match.group("value"))


@dataclass(frozen=True, slots=True)
class FlagSpec:
    """Describe a flag accepted by a tool.

    Attributes:
        key: Key under which the parsed value is stored in the run context.
        switches: Switch strings; a ``--<key>`` boolean switch is derived when empty.
        default: Value used when the flag is absent.
        desc: Short description rendered in help.
        accept: Acceptor name or click parameter type for value flags.
        repeatable: Count occurrences of a boolean flag instead of storing ``True``.
    """

    key: str
    switches: tuple[str, ...] = ()
    default: object = None
    desc: str = ""
    accept: object = None
    repeatable: bool = False
    syntax: tuple[SwitchSyntax, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.key.strip():
            raise ToolDefinitionError("Flag key must not be empty")
        switches = tuple(self.switches)
        if not switches:
            suffix = f"={DEFAULT_VALUE_LABEL}" if self.accept is not None else ""
            switches = (f"--{self.canonical_name}{suffix}",)
        parsed = tuple(parse_switch(switch) for switch in switches)
        if len({entry.takes_value for entry in parsed}) > 1:
            raise ToolDefinitionError(f"Flag {self.key!r} mixes boolean and value switches")
        if self.repeatable and (parsed[0].takes_value or any(entry.negation for entry in parsed)):
            raise ToolDefinitionError(f"Repeatable flag {self.key!r} must use plain boolean switches")
        object.__setattr__(self, "switches", switches)
        object.__setattr__(self, "syntax", parsed)

    @property
    def canonical_name(self) -> str:
        return canonical_key(self.key)

    @property
    def param_name(self) -> str:
        return param_name_for(self.key)

    @property
    def takes_value(self) -> bool:
        return self.syntax[0].takes_value

    @property
    def value_label(self) -> str:
        return next((entry.value_label for entry in self.syntax if entry.value_label), DEFAULT_VALUE_LABEL)

    @property
    def option_strings(self) -> tuple[str, ...]:
        """Return every option string this flag responds to."""

        return tuple(option for entry in self.syntax for option in entry.option_strings)

    @property
    def negatable(self) -> bool:
        return any(entry.negation is not None for entry in self.syntax)


class ArgKind(StrEnum):
    """Enumerate positional argument categories."""

    REQUIRED = "required"
    OPTIONAL = "optional"
    REMAINING = "remaining"


@dataclass(frozen=True, slots=True)
class ArgSpec:
    """Describe a positional argument accepted by a tool."""

    key: str
    kind: ArgKind = ArgKind.REQUIRED
    default: object = None
    desc: str = ""
    accept: object = None
    display_name: str | None = None

    def __post_init__(self) -> None:
        if not self.key.strip():
            raise ToolDefinitionError("Argument key must not be empty")
        object.__setattr__(self, "kind", ArgKind(self.kind))

    @property
    def canonical_name(self) -> str:
        return canonical_key(self.key)

    @property
    def param_name(self) -> str:
        return param_name_for(self.key)

    @property
    def label(self) -> str:
        return self.display_name or self.key.upper().replace("-", "_")


__all__ = [
    "ArgKind",
    "ArgSpec",
    "FlagSpec",
    "SwitchSyntax",
    "canonical_key",
    "param_name_for",
    "parse_switch",
]
