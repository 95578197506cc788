# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Middleware wrapping tool configuration and execution."""

from __future__ import annotations

from .base import Middleware, Proceed
from .builtin import (
    DEFAULT_STACK,
    AddVerbosityFlags,
    HandleUsageErrors,
    SetDefaultDescriptions,
    ShowHelp,
)
from .registry import MiddlewareRegistry

__all__ = [
    "DEFAULT_STACK",
    "AddVerbosityFlags",
    "HandleUsageErrors",
    "Middleware",
    "MiddlewareRegistry",
    "Proceed",
    "SetDefaultDescriptions",
    "ShowHelp",
]
