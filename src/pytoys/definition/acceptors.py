# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Map acceptor names used in tool definitions onto click parameter types."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Final

import click

from ..errors import ToolDefinitionError

NAMED_ACCEPTORS: Final[Mapping[str, click.ParamType]] = {
    "string": click.STRING,
    "str": click.STRING,
    "integer": click.INT,
    "int": click.INT,
    "float": click.FLOAT,
    "number": click.FLOAT,
    "boolean": click.BOOL,
    "bool": click.BOOL,
    "path": click.Path(path_type=Path),
    "file": click.Path(path_type=Path, exists=True, dir_okay=False),
    "directory": click.Path(path_type=Path, exists=True, file_okay=False),
}
_PYTHON_TYPES: Final[Mapping[type, click.ParamType]] = {
    str: click.STRING,
    int: click.INT,
    float: click.FLOAT,
    bool: click.BOOL,
    Path: click.Path(path_type=Path),
}


def resolve_acceptor(accept: object) -> click.ParamType | None:
    """Return the click parameter type described by ``accept``.

    Args:
        accept: ``None``, an acceptor name, a Python type, a click parameter
            type, or a sequence of allowed string values.

    Returns:
        click.ParamType | None: Matching parameter type, or ``None`` for the
        click default.

    Raises:
        ToolDefinitionError: If ``accept`` cannot be interpreted.
    """

    if accept is None:
        return None
    if isinstance(accept, click.ParamType):
        return accept
    if isinstance(accept, str):
        resolved = NAMED_ACCEPTORS.get(accept.lower())
        if resolved is None:
            raise ToolDefinitionError(f"Unknown acceptor: {accept!r}")
        return resolved
    if isinstance(accept, type) and accept in _PYTHON_TYPES:
        return _PYTHON_TYPES[accept]
    if isinstance(accept, Sequence) and all(isinstance(choice, str) for choice in accept):
        return click.Choice(list(accept))
    raise ToolDefinitionError(f"Unsupported acceptor: {accept!r}")


__all__ = ["NAMED_ACCEPTORS", "resolve_acceptor"]
