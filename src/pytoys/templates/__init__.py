# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Templates expanding into reusable tool definitions."""

from __future__ import annotations

from .base import Template
from .builtin import CleanTemplate, PytestTemplate
from .registry import TemplateRegistry

__all__ = ["CleanTemplate", "PytestTemplate", "Template", "TemplateRegistry"]
