# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Core package metadata and the public loader surface."""

from __future__ import annotations

from importlib import metadata

from .errors import FetchError, SourceLoadError, ToolDefinitionError, ToysError, UsageError
from .loader.dsl import ToolDsl
from .loader.loader import Loader, LookupResult

__all__ = [
    "FetchError",
    "Loader",
    "LookupResult",
    "SourceLoadError",
    "ToolDefinitionError",
    "ToolDsl",
    "ToysError",
    "UsageError",
    "__version__",
]

try:
    __version__ = metadata.version("pytoys-cli")
except metadata.PackageNotFoundError:  # pragma: no cover - local development fallback
    __version__ = "0.0.0"
