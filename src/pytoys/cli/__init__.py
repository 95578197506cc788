# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Standard command-line front end for pytoys."""

from __future__ import annotations

from .shared import CLIError
from .standard import StandardCli

__all__ = ["CLIError", "StandardCli"]
