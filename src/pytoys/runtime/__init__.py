# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Runtime services: run context, argument parsing, middleware chain, and subprocesses."""
