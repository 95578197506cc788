# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Lazy tool lookup engine: loader, builder, directives, and the fluent DSL."""
