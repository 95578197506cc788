# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Settings for the standard pytoys executable."""

from __future__ import annotations

from .settings import ConfigError, ToysSettings, load_settings

__all__ = ["ConfigError", "ToysSettings", "load_settings"]
