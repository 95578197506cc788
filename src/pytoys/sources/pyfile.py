# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Load Python configuration files exposing a ``configure(t)`` function."""

from __future__ import annotations

import hashlib
import importlib.util
from collections.abc import Callable
from pathlib import Path
from types import ModuleType
from typing import Final

from ..errors import SourceLoadError, ToysError

CONFIGURE_FUNCTION: Final[str] = "configure"
MODULE_PREFIX: Final[str] = "_pytoys_config_"


def _module_name(path: Path) -> str:
    digest = hashlib.sha256(str(path.resolve()).encode("utf-8")).hexdigest()[:16]
    return f"{MODULE_PREFIX}{digest}"


def import_config_module(path: Path) -> ModuleType:
    """Execute the Python file at ``path`` as an anonymous module.

    Args:
        path: Python source file.

    Returns:
        ModuleType: The executed module. It is not registered in ``sys.modules``.

    Raises:
        SourceLoadError: If the file cannot be read, compiled, or executed.
    """

    spec = importlib.util.spec_from_file_location(_module_name(path), path)
    if spec is None or spec.loader is None:
        raise SourceLoadError("unable to create an import specification", source=str(path))
    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except ToysError:
        raise
    except OSError as exc:
        raise SourceLoadError(f"unable to read file: {exc.strerror or exc}", source=str(path)) from exc
    except SyntaxError as exc:
        raise SourceLoadError(f"syntax error on line {exc.lineno}: {exc.msg}", source=str(path)) from exc
    except Exception as exc:
        raise SourceLoadError(f"error while executing file: {exc}", source=str(path)) from exc
    return module


def load_python_body(path: Path) -> Callable[..., object]:
    """Return the ``configure`` callable defined by the Python file at ``path``.

    Raises:
        SourceLoadError: If the module does not define a callable ``configure``.
    """

    module = import_config_module(path)
    configure = getattr(module, CONFIGURE_FUNCTION, None)
    if not callable(configure):
        raise SourceLoadError(f"file must define a callable '{CONFIGURE_FUNCTION}(t)'", source=str(path))
    return configure


__all__ = ["CONFIGURE_FUNCTION", "import_config_module", "load_python_body"]
