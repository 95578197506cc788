# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration sources and the conventions used to read them."""

from __future__ import annotations

from .model_source import (
    BlockSource,
    ConfigSource,
    DirectorySource,
    FileSource,
    RemoteRef,
    RemoteSource,
    SourceKind,
)
from .naming import DefaultNaming, NamingConvention, SnakeCaseNaming

__all__ = [
    "BlockSource",
    "ConfigSource",
    "DefaultNaming",
    "DirectorySource",
    "FileSource",
    "NamingConvention",
    "RemoteRef",
    "RemoteSource",
    "SnakeCaseNaming",
    "SourceKind",
]
