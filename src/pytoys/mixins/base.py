# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Base class for mixins exposing helpers on the run context."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from ..runtime.context import Context


class Mixin:
    """Helper object instantiated per run and reachable through the context.

    Public attributes of a mixin become attributes of the
    :class:`~pytoys.runtime.context.Context` it is bound to.
    """

    name: ClassVar[str] = ""

    def __init__(self, context: Context) -> None:
        self.context = context


__all__ = ["Mixin"]
