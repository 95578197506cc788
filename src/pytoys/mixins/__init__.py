# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Mixins adding helper methods to the run context."""

from __future__ import annotations

from .base import Mixin
from .builtin import ExecMixin, TerminalMixin
from .registry import MixinRegistry

__all__ = ["ExecMixin", "Mixin", "MixinRegistry", "TerminalMixin"]
