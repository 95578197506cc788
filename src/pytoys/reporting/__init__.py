# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Usage and help rendering."""

from __future__ import annotations

from .help import HelpRenderer

__all__ = ["HelpRenderer"]
