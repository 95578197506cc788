# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tool definition models: nodes, flags, positional args, and executors."""

from __future__ import annotations

from .executors import CommandExecutor, Executor, ImportedExecutor
from .model_params import ArgKind, ArgSpec, FlagSpec
from .model_tool import ToolDefinition, ToolState

__all__ = [
    "ArgKind",
    "ArgSpec",
    "CommandExecutor",
    "Executor",
    "FlagSpec",
    "ImportedExecutor",
    "ToolDefinition",
    "ToolState",
]
