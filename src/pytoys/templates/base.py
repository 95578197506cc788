# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Base class for templates expanding into directive sequences."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from ..loader.directives import Directive


class Template(ABC):
    """Reusable bundle of directives instantiated with arguments.

    Subclasses take their configuration through ``__init__`` and return the
    directives to replay on the tool that expands them.
    """

    name: ClassVar[str] = ""

    @abstractmethod
    def directives(self) -> Sequence[Directive]:
        """Return the directives this template contributes."""


__all__ = ["Template"]
