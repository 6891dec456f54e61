from __future__ import annotations

import html
import logging
import threading
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from functools import partial
from typing import Any

from .config import RendererConfig
from .context import MISSING, Context, is_falsey, is_lambda, is_sequence, takes_arguments
from .errors import RecursionLimitExceededError
from .parser import parse
from .types import Delimiter, Token, TokenType

logger = logging.getLogger(__name__)

# A compiled template: (context, depth=0) -> rendered text
Procedure = Callable[..., str]


def escape_html(text: str) -> str:
    """Escape &, <, >, " and '."""
    return html.escape(text, quote=True)


def indent_lines(text: str, indent: str) -> str:
    """Prefix every line of text with indent.

    A trailing newline ends the last line rather than starting a new one,
    so no indented blank line is added after it.
    """
    if not text or not indent:
        return text
    body, newline = (text[:-1], "\n") if text.endswith("\n") else (text, "")
    return "\n".join(indent + line for line in body.split("\n")) + newline


@dataclass
class Renderer:
    """Compiles and renders templates, caching compiled procedures.

    Both caches and the partial mapping belong to the instance and are
    guarded by a lock, so one renderer can be shared between threads.
    """
    config: RendererConfig = field(default_factory=RendererConfig)
    _cache: dict[str, Procedure] = field(default_factory=dict, init=False, repr=False)
    _partial_cache: dict[tuple[str, str], Procedure] = field(default_factory=dict, init=False, repr=False)
    _partials: dict[str, str] = field(default_factory=dict, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def __post_init__(self) -> None:
        self._partials = dict(self.config.partials)

    @property
    def partials(self) -> dict[str, str]:
        return dict(self._partials)

    def set_partials(self, partials: Mapping[str, str]) -> None:
        """Replace the partial mapping; compiled partials are dropped if it changed."""
        replacement = dict(partials)
        with self._lock:
            if replacement == self._partials:
                return
            self._partials = replacement
            if self._partial_cache:
                logger.debug("Partials replaced, dropping %d compiled partials", len(self._partial_cache))
                self._partial_cache.clear()

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()
            self._partial_cache.clear()

    def render(self, template: str | None, view: Any = None, partials: Mapping[str, str] | None = None) -> str:
        """Render template against view.

        When given, partials replaces the stored partial mapping before
        rendering.
        """
        if partials is not None:
            self.set_partials(partials)
        if not template:
            return ""
        return self.compile(template)(Context(view))

    def compile(self, template: str) -> Procedure:
        """Return the cached procedure for template, compiling it on first use."""
        with self._lock:
            procedure = self._cache.get(template)
            if procedure is None:
                procedure = self._compile_source(template)
                self._cache[template] = procedure
                logger.debug("Compiled template of %d characters (%d cached)", len(template), len(self._cache))
        return procedure

    def _compile_source(self, template: str, delimiter: Delimiter | None = None) -> Procedure:
        if delimiter is None:
            delimiter = self.config.delimiters.to_delimiter()
        tokens, final = parse(template, delimiter)
        # Lambda sections re-parse their output with the markers in force at
        # the end of this template
        return self._compile_tokens(tokens, final)

    def _compile_tokens(self, tokens: list[Token], delimiter: Delimiter) -> Procedure:
        parts = [self._compile_token(token, delimiter) for token in tokens]

        def procedure(context: Context, depth: int = 0) -> str:
            return "".join([part(context, depth) for part in parts])

        return procedure

    def _compile_token(self, token: Token, delimiter: Delimiter) -> Procedure:
        kind = token.type
        if kind is TokenType.TEXT:
            text = token.text
            return lambda context, depth: text
        if kind is TokenType.VARIABLE:
            return partial(self._render_variable, token.name, self.config.escape_html)
        if kind is TokenType.UNESCAPED_VARIABLE:
            return partial(self._render_variable, token.name, False)
        if kind is TokenType.SECTION_OPEN:
            children = self._compile_tokens(token.children, delimiter)
            return partial(self._render_section, token, children, delimiter)
        if kind is TokenType.INVERTED_SECTION_OPEN:
            children = self._compile_tokens(token.children, delimiter)
            return partial(self._render_inverted, token.name, children)
        if kind is TokenType.PARTIAL:
            return partial(self._render_partial, token.name, token.indent)
        # Comments and delimiter changes render nothing
        return lambda context, depth: ""

    def _render_variable(self, name: str, escape: bool, context: Context, depth: int) -> str:
        value = context.lookup(name)
        if value is MISSING:
            return ""
        if is_lambda(value):
            if not takes_arguments(value, 0):
                return ""
            result = value()
            # Interpolation lambdas are rendered with the default markers
            value = self._expand("" if result is None else str(result), context, depth)
        if is_falsey(value):
            return ""
        text = str(value)
        return escape_html(text) if escape else text

    def _section_value(self, context: Context, name: str) -> Any:
        """Look name up for a section or inverted section.

        Callables that cannot take the section text are called without
        arguments and their result used as section data. Iterators are
        drained into a list so that emptiness can be tested.
        """
        value = context.lookup(name)
        if is_lambda(value) and not takes_arguments(value, 1):
            value = value() if takes_arguments(value, 0) else MISSING
        if isinstance(value, Iterator):
            value = list(value)
        return value

    def _render_section(
        self, token: Token, children: Procedure, delimiter: Delimiter, context: Context, depth: int
    ) -> str:
        value = self._section_value(context, token.name)
        if is_falsey(value):
            return ""
        if is_lambda(value):
            result = value(token.section_text)
            if not result:
                return ""
            return self._expand(str(result), context, depth, delimiter)
        if is_sequence(value):
            return "".join([children(Context(item, context), depth) for item in value])
        return children(Context(value, context), depth)

    def _render_inverted(self, name: str, children: Procedure, context: Context, depth: int) -> str:
        if is_falsey(self._section_value(context, name)):
            return children(context, depth)
        return ""

    def _render_partial(self, name: str, indent: str, context: Context, depth: int) -> str:
        procedure = self._partial_procedure(name, indent)
        if procedure is None:
            return ""
        self._check_depth(depth)
        return procedure(context, depth + 1)

    def _partial_procedure(self, name: str, indent: str) -> Procedure | None:
        key = (name, indent)
        with self._lock:
            procedure = self._partial_cache.get(key)
            if procedure is None:
                text = self._partials.get(name)
                if text is None:
                    logger.debug("Partial %r not found", name)
                    return None
                procedure = self._compile_source(indent_lines(text, indent))
                self._partial_cache[key] = procedure
        return procedure

    def _expand(self, template: str, context: Context, depth: int, delimiter: Delimiter | None = None) -> str:
        """Compile text produced by a lambda and render it in place."""
        self._check_depth(depth)
        return self._compile_source(template, delimiter)(context, depth + 1)

    def _check_depth(self, depth: int) -> None:
        if depth >= self.config.max_depth:
            raise RecursionLimitExceededError(self.config.max_depth)


# Shared renderer reused across the process
DEFAULT_RENDERER: Renderer = Renderer()


def render(template: str | None, view: Any = None, partials: Mapping[str, str] | None = None) -> str:
    """Render template with the shared renderer.

    Only the partials passed to this call are visible; partials given by
    earlier callers are never reused. Callers that render concurrently with
    different partials should build their own Renderer.
    """
    return DEFAULT_RENDERER.render(template, view, {} if partials is None else partials)
