# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Evaluate directive bodies against tool definitions."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from ..definition.model_tool import ToolDefinition
from ..errors import SourceLoadError, ToolDefinitionError, ToysError
from ..names import ToolName, next_remaining_words
from ..sources.model_source import ConfigSource
from .directives import (
    AddFlag,
    AddMixin,
    AddOptionalArg,
    AddRequiredArg,
    AliasAs,
    AliasTool,
    DefineSubtool,
    Directive,
    DirectiveBody,
    DirectiveProvider,
    ExpandTemplate,
    Include,
    SetDescription,
    SetExecutor,
    SetLongDescription,
    SetRemainingArgs,
    UseMiddleware,
)

if TYPE_CHECKING:
    from .loader import Loader

LOGGER = logging.getLogger(__name__)


class Builder:
    """Apply the directives of one body to one tool definition.

    A builder is bound to the source being evaluated, the tool the body
    describes, the remaining words of the lookup in progress, and the source
    priority. Nested subtool bodies that are not on the remaining path are
    handed back to the loader instead of being evaluated.
    """

    def __init__(
        self,
        loader: Loader,
        source: ConfigSource,
        tool: ToolDefinition,
        remaining: ToolName,
        priority: int,
    ) -> None:
        self.loader = loader
        self.source = source
        self.tool = tool
        self.remaining = remaining
        self.priority = priority
        self.writable = False
        self._closed = False
        self._alias_words: list[str] = []

    @classmethod
    def build(
        cls,
        loader: Loader,
        source: ConfigSource,
        tool: ToolDefinition,
        remaining: ToolName,
        priority: int,
        body: DirectiveBody | None,
    ) -> None:
        """Evaluate ``body`` for ``tool`` and close the definition block.

        Args:
            loader: Loader owning the tool tree.
            source: Source whose body is evaluated.
            tool: Tool the body defines.
            remaining: Remaining words below ``tool`` relevant to the lookup.
            priority: Priority of ``source``.
            body: Directive sequence, provider, or builder closure.

        Raises:
            ToolDefinitionError: If the body describes an invalid tool.
            SourceLoadError: If a builder closure raises a non framework error.
        """

        builder = cls(loader, source, tool, remaining, priority)
        builder.writable = tool.begin_block(priority)
        try:
            builder.run(body)
        except ToysError as exc:
            if builder.writable:
                tool.mark_failed(exc)
            raise
        finally:
            builder._closed = True
            if builder.writable:
                tool.end_block()
        builder._create_pending_aliases()

    def run(self, body: DirectiveBody | None) -> None:
        if body is None:
            return
        if isinstance(body, DirectiveProvider):
            self.apply_all(body.directives())
        elif callable(body):
            self._run_closure(body)
        else:
            self.apply_all(body)

    def _run_closure(self, body: Callable[..., object]) -> None:
        from .dsl import ToolDsl

        try:
            body(ToolDsl(self))
        except ToysError:
            raise
        except Exception as exc:
            message = f"error while defining {self.tool.display_name!r}: {exc}"
            raise SourceLoadError(message, source=self.source.display) from exc

    def apply_all(self, directives: Iterable[Directive]) -> None:
        for directive in directives:
            self.apply(directive)

    def apply(self, directive: Directive) -> None:
        """Apply one directive to the bound tool.

        Raises:
            ToolDefinitionError: If the directive is invalid, or the builder
                block has already finished.
        """

        if self._closed:
            raise ToolDefinitionError(
                f"Tool {self.tool.display_name!r} is finished; its definition block can no longer be used",
            )
        handler = _HANDLERS.get(type(directive))
        if handler is None:
            raise ToolDefinitionError(f"Unknown directive: {directive!r}")
        handler(self, directive)

    # ------------------------------------------------------------------
    # structure

    def _define_subtool(self, directive: DefineSubtool) -> None:
        words = self.loader.split_path(directive.words)
        if not words:
            raise ToolDefinitionError("Subtool name must not be empty")
        base = self.tool.full_name
        for depth in range(len(words)):
            ancestor = self.loader.peek(base + words[:depth])
            if ancestor is not None and not self._may_nest_under(ancestor):
                return
        name = base + words
        child = self.loader.get_or_create(name, self.priority).tool
        if directive.alias_of is not None:
            target = name[:-1] + self.loader.split_path(directive.alias_of)
            self._make_alias(child, target)
            return
        if directive.body is None:
            return
        remaining: ToolName | None = self.remaining
        for word in words:
            remaining = next_remaining_words(remaining, word)
        if remaining is None:
            self.loader.defer_block(directive.body, name, self.priority, parent=self.source)
            return
        Builder.build(self.loader, self.source, child, remaining, self.priority, directive.body)

    def _may_nest_under(self, node: ToolDefinition) -> bool:
        if node.is_group:
            return True
        owner = node.definition_priority
        if owner is not None and owner > self.priority:
            LOGGER.debug("ignoring subtool of %s from lower priority %s", node.display_name, self.source.display)
            return False
        if owner is not None and owner < self.priority:
            return True
        kind = "alias" if node.is_alias else "runnable tool"
        raise ToolDefinitionError(f"Cannot define subtools of {kind} {node.display_name!r}")

    def _alias_tool(self, directive: AliasTool) -> None:
        words = self.loader.split_path(directive.word)
        if not words:
            raise ToolDefinitionError("Alias name must not be empty")
        target = self.tool.full_name + self.loader.split_path(directive.target)
        node = self.loader.get_or_create(self.tool.full_name + words, self.priority).tool
        self._make_alias(node, target)

    def _alias_as(self, directive: AliasAs) -> None:
        if self.tool.is_root:
            raise ToolDefinitionError("The root tool cannot be aliased")
        words = self.loader.split_path(directive.word)
        if len(words) != 1:
            raise ToolDefinitionError(f"Alias name must be a single word: {directive.word!r}")
        self._alias_words.append(words[0])

    def _create_pending_aliases(self) -> None:
        if not self._alias_words:
            return
        if not self.tool.is_runnable:
            raise ToolDefinitionError(f"Group {self.tool.display_name!r} cannot be aliased")
        for word in self._alias_words:
            node = self.loader.get_or_create(self.tool.full_name[:-1] + (word,), self.priority).tool
            self._make_alias(node, self.tool.full_name)

    def _make_alias(self, node: ToolDefinition, target: ToolName) -> None:
        if not target:
            raise ToolDefinitionError(f"Alias {node.display_name!r} cannot target the root tool")
        if target == node.full_name:
            raise ToolDefinitionError(f"Alias {node.display_name!r} cannot target itself")
        if node.child_priority is not None and node.child_priority >= self.priority:
            raise ToolDefinitionError(f"Tool {node.display_name!r} has subtools and cannot become an alias")
        if not node.is_placeholder and not node.is_alias and node.definition_priority == self.priority:
            raise ToolDefinitionError(f"Tool {node.display_name!r} is already defined and cannot become an alias")
        if not node.make_alias(target, self.priority, self.source):
            LOGGER.debug("alias %s shadowed by higher priority definition", node.display_name)

    def _include(self, directive: Include) -> None:
        self.loader.include_path(
            directive.target,
            words=self.tool.full_name,
            remaining=self.remaining,
            priority=self.priority,
            parent=self.source,
        )

    def _expand_template(self, directive: ExpandTemplate) -> None:
        template = self.loader.templates.create(directive.template, *directive.args, **dict(directive.kwargs))
        LOGGER.debug("expanding template %s in %s", type(template).__name__, self.tool.display_name)
        self.apply_all(template.directives())

    # ------------------------------------------------------------------
    # mutators

    def _claim(self) -> bool:
        if not self.writable:
            LOGGER.debug(
                "ignoring definition of %s from %s: defined at higher priority",
                self.tool.display_name,
                self.source.display,
            )
            return False
        self.tool.claim(self.priority, self.source)
        return True

    def _set_desc(self, directive: SetDescription) -> None:
        if self._claim():
            self.tool.set_desc(directive.text)

    def _set_long_desc(self, directive: SetLongDescription) -> None:
        if self._claim():
            self.tool.set_long_desc(directive.text)

    def _add_flag(self, directive: AddFlag) -> None:
        if self._claim():
            self.tool.add_flag(directive.spec)

    def _add_arg(self, directive: AddRequiredArg | AddOptionalArg | SetRemainingArgs) -> None:
        if self._claim():
            self.tool.add_arg(directive.spec)

    def _set_executor(self, directive: SetExecutor) -> None:
        children = self.tool.child_priority
        if children is not None and children > self.priority:
            LOGGER.debug("ignoring executor of %s from lower priority %s", self.tool.display_name, self.source.display)
            return
        if children is not None and children == self.priority:
            raise ToolDefinitionError(f"Tool {self.tool.display_name!r} has subtools and cannot be runnable")
        if self._claim():
            self.tool.set_executor(directive.executor)

    def _add_mixin(self, directive: AddMixin) -> None:
        mixin = self.loader.mixins.resolve(directive.mixin)
        if self._claim():
            self.tool.add_mixin(mixin)

    def _use_middleware(self, directive: UseMiddleware) -> None:
        stack = self.loader.middleware.resolve_stack(directive.stack)
        if self._claim():
            self.tool.set_middleware(stack)


_HANDLERS: dict[type, Callable[[Builder, Directive], None]] = {
    DefineSubtool: Builder._define_subtool,
    AliasTool: Builder._alias_tool,
    AliasAs: Builder._alias_as,
    Include: Builder._include,
    ExpandTemplate: Builder._expand_template,
    SetDescription: Builder._set_desc,
    SetLongDescription: Builder._set_long_desc,
    AddFlag: Builder._add_flag,
    AddRequiredArg: Builder._add_arg,
    AddOptionalArg: Builder._add_arg,
    SetRemainingArgs: Builder._add_arg,
    SetExecutor: Builder._set_executor,
    AddMixin: Builder._add_mixin,
    UseMiddleware: Builder._use_middleware,
}


__all__ = ["Builder"]
