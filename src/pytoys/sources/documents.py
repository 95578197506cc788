# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Load TOML and JSON tool documents and compile them into directives."""

from __future__ import annotations

import json
import tomllib
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Final, TypeAlias

from jsonschema import Draft202012Validator
from jsonschema import exceptions as jsonschema_exceptions

from ..definition.executors import CommandExecutor, ImportedExecutor
from ..definition.model_params import ArgKind, ArgSpec, FlagSpec
from ..errors import SourceLoadError
from ..loader.directives import (
    AddFlag,
    AddMixin,
    AddOptionalArg,
    AddRequiredArg,
    AliasAs,
    AliasTool,
    DefineSubtool,
    Directive,
    ExpandTemplate,
    Include,
    IncludeTarget,
    SetDescription,
    SetExecutor,
    SetLongDescription,
    SetRemainingArgs,
    UseMiddleware,
)
from .model_source import RemoteRef

JSONValue: TypeAlias = str | int | float | bool | None | Sequence["JSONValue"] | Mapping[str, "JSONValue"]
JSONMapping: TypeAlias = Mapping[str, JSONValue]

DOCUMENT_SUFFIXES: Final[frozenset[str]] = frozenset({".toml", ".json"})
SCHEMA_RESOURCE: Final[str] = "tool_document.schema.json"
DEFAULT_REMAINING_KEY: Final[str] = "args"

_ARG_DIRECTIVES: Final = {
    ArgKind.REQUIRED: AddRequiredArg,
    ArgKind.OPTIONAL: AddOptionalArg,
    ArgKind.REMAINING: SetRemainingArgs,
}


@lru_cache(maxsize=1)
def document_validator() -> Draft202012Validator:
    """Return the cached validator for tool documents."""

    schema_text = resources.files("pytoys.sources").joinpath("schema", SCHEMA_RESOURCE).read_text(encoding="utf-8")
    return Draft202012Validator(json.loads(schema_text))


def read_document(path: Path) -> JSONMapping:
    """Parse the TOML or JSON document at ``path``.

    Args:
        path: Document location; the suffix selects the parser.

    Returns:
        JSONMapping: Parsed top-level table.

    Raises:
        SourceLoadError: If the file cannot be read or parsed, or is not a table.
    """

    try:
        if path.suffix == ".toml":
            with path.open("rb") as handle:
                payload: object = tomllib.load(handle)
        else:
            with path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
    except OSError as exc:
        raise SourceLoadError(f"unable to read document: {exc.strerror or exc}", source=str(path)) from exc
    except (tomllib.TOMLDecodeError, json.JSONDecodeError) as exc:
        raise SourceLoadError(f"failed to parse document: {exc}", source=str(path)) from exc
    if not isinstance(payload, Mapping):
        raise SourceLoadError("document must be a table at the root level", source=str(path))
    return payload


def validate_document(document: JSONMapping, *, source: str) -> None:
    """Validate ``document`` against the packaged schema.

    Raises:
        SourceLoadError: If the document violates the schema.
    """

    try:
        document_validator().validate(document)
    except jsonschema_exceptions.ValidationError as exc:
        location = ".".join(str(part) for part in exc.absolute_path) or "<root>"
        raise SourceLoadError(f"invalid tool document at {location}: {exc.message}", source=source) from exc


def load_document_body(path: Path) -> DocumentBody:
    """Read, validate, and wrap the document at ``path`` for lazy compilation."""

    document = read_document(path)
    validate_document(document, source=str(path))
    if "alias_of" in document:
        raise SourceLoadError("'alias_of' is only valid inside [tool.<name>] tables", source=str(path))
    return DocumentBody(mapping=document, context=str(path))


@dataclass(frozen=True, slots=True, eq=False)
class DocumentBody:
    """Directive provider over one validated tool table.

    Nested ``tool`` tables become subtool directives whose bodies are again
    :class:`DocumentBody` instances, so they are compiled only when reached.
    """

    mapping: JSONMapping
    context: str

    def directives(self) -> tuple[Directive, ...]:
        return compile_tool(self.mapping, context=self.context)


def compile_tool(mapping: JSONMapping, *, context: str) -> tuple[Directive, ...]:
    """Translate one validated tool table into directives.

    Args:
        mapping: Tool table (the document root or a ``tool.<name>`` table).
        context: Human readable location used when nested bodies are built.

    Returns:
        tuple[Directive, ...]: Directives in application order.
    """

    directives: list[Directive] = []
    if "desc" in mapping:
        directives.append(SetDescription(str(mapping["desc"])))
    long_desc = mapping.get("long_desc")
    if long_desc is not None:
        directives.append(SetLongDescription(long_desc if isinstance(long_desc, str) else tuple(long_desc)))
    directives.extend(Include(target) for target in _include_targets(mapping.get("include")))
    directives.extend(AddMixin(str(name)) for name in mapping.get("mixins", ()))
    if "middleware" in mapping:
        directives.append(UseMiddleware(tuple(str(name) for name in mapping["middleware"])))
    for flag in mapping.get("flag", ()):
        directives.append(AddFlag(_flag_spec(flag)))
    args = [_arg_spec(arg) for arg in mapping.get("arg", ())]
    directives.extend(_ARG_DIRECTIVES[spec.kind](spec) for spec in args)
    for template in mapping.get("template", ()):
        directives.append(
            ExpandTemplate(
                str(template["name"]),
                tuple(template.get("args", ())),
                dict(template.get("options", {})),
            ),
        )
    directives.extend(_executor_directives(mapping, args))
    directives.extend(AliasAs(str(word)) for word in mapping.get("alias_as", ()))
    for word, target in mapping.get("alias", {}).items():
        directives.append(AliasTool(word, _name(target)))
    for word, table in mapping.get("tool", {}).items():
        if "alias_of" in table:
            if len(table) > 1:
                raise SourceLoadError(f"tool {word!r} cannot combine 'alias_of' with other keys", source=context)
            directives.append(DefineSubtool(word, alias_of=_name(table["alias_of"])))
        else:
            directives.append(DefineSubtool(word, body=DocumentBody(table, f"{context}:{word}")))
    return tuple(directives)


def _name(value: JSONValue) -> str | tuple[str, ...]:
    return value if isinstance(value, str) else tuple(str(word) for word in value)


def _include_targets(value: JSONValue) -> list[IncludeTarget]:
    if value is None:
        return []
    entries = value if isinstance(value, list) else [value]
    targets: list[IncludeTarget] = []
    for entry in entries:
        if isinstance(entry, Mapping):
            targets.append(
                RemoteRef(
                    remote=str(entry["git"]),
                    commit=str(entry.get("commit", "HEAD")),
                    path=str(entry.get("path", "")),
                ),
            )
        else:
            targets.append(str(entry))
    return targets


def _flag_spec(flag: JSONMapping) -> FlagSpec:
    return FlagSpec(
        str(flag["key"]),
        tuple(str(switch) for switch in flag.get("switches", ())),
        default=flag.get("default"),
        desc=str(flag.get("desc", "")),
        accept=_acceptor(flag.get("accept")),
    )


def _arg_spec(arg: JSONMapping) -> ArgSpec:
    kind = ArgKind(str(arg.get("kind", ArgKind.REQUIRED.value)))
    default = arg.get("default")
    if kind is ArgKind.REMAINING and default is None:
        default = ()
    display = arg.get("display_name")
    return ArgSpec(
        str(arg["key"]),
        kind,
        default=default,
        desc=str(arg.get("desc", "")),
        accept=_acceptor(arg.get("accept")),
        display_name=str(display) if display is not None else None,
    )


def _acceptor(value: JSONValue) -> object:
    if value is None or isinstance(value, str):
        return value
    return tuple(str(choice) for choice in value)


def _executor_directives(mapping: JSONMapping, args: Sequence[ArgSpec]) -> list[Directive]:
    if "run" in mapping:
        return [SetExecutor(ImportedExecutor(str(mapping["run"])))]
    if "exec" not in mapping:
        return []
    argv = tuple(str(part) for part in mapping["exec"])
    remaining = next((spec for spec in args if spec.kind is ArgKind.REMAINING), None)
    directives: list[Directive] = []
    if remaining is None:
        remaining = ArgSpec(DEFAULT_REMAINING_KEY, ArgKind.REMAINING, default=(), desc="Arguments for the command")
        directives.append(SetRemainingArgs(remaining))
    directives.append(SetExecutor(CommandExecutor(argv, pass_args=remaining.key)))
    return directives


__all__ = [
    "DOCUMENT_SUFFIXES",
    "DocumentBody",
    "compile_tool",
    "document_validator",
    "load_document_body",
    "read_document",
    "validate_document",
]
