from __future__ import annotations

import builtins
import inspect
from collections.abc import Iterator, Mapping, Sequence, Set as AbstractSet, Sized
from dataclasses import dataclass
from typing import Any


class _Missing:
    """Result of a lookup that found nothing. Distinct from None."""

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()

_STRINGS = (str, bytes, bytearray)


def get_member(value: Any, key: str) -> Any:
    """Look key up on a single view value, returning MISSING when absent.

    Mappings are searched by key, sequences by a numeric index, and instances
    of user-defined classes by attribute. Built-in scalars have no members.
    """
    if isinstance(value, Mapping):
        # Membership test so that a key bound to None still counts as found
        if key in value:
            return value[key]
        return MISSING
    if isinstance(value, Sequence) and not isinstance(value, _STRINGS):
        if key.isdigit() and int(key) < len(value):
            return value[int(key)]
        return MISSING
    if value is None or type(value).__module__ == builtins.__name__:
        return MISSING
    try:
        return getattr(value, key)
    except AttributeError:
        return MISSING


def is_falsey(value: Any) -> bool:
    """Mustache truthiness: only absence, None, False and empty collections.

    0, 0.0 and the empty string are truthy.
    """
    if value is MISSING or value is None or value is False:
        return True
    if isinstance(value, Sized) and not isinstance(value, _STRINGS):
        return len(value) == 0
    return False


def is_lambda(value: Any) -> bool:
    return callable(value)


def takes_arguments(func: Any, count: int) -> bool:
    """Whether func can be called with exactly count positional arguments.

    Callables without an introspectable signature are assumed to accept them.
    """
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return True
    try:
        signature.bind(*range(count))
    except TypeError:
        return False
    return True


def is_sequence(value: Any) -> bool:
    """Whether a section should iterate over value rather than push it once.

    Only sequences, sets and iterators count; objects that merely define
    __iter__ (pydantic models, for one) are pushed as a single value.
    """
    return isinstance(value, (Sequence, AbstractSet, Iterator)) and not isinstance(value, _STRINGS)


@dataclass(frozen=True)
class Context:
    """One link of the lookup chain built while rendering.

    A section or partial never modifies a context; it wraps the value it
    descends into in a new Context whose parent is the current one.
    """
    value: Any
    parent: Context | None = None

    def lookup(self, name: str) -> Any:
        """Resolve a tag name, returning MISSING when nothing matches.

        The first step of a dotted name is searched up the whole chain; the
        remaining steps are resolved strictly against the previous result.
        """
        if name == ".":
            return self.value
        if "." not in name:
            return self._find(name)

        first, *rest = name.split(".")
        found = self._find(first)
        for step in rest:
            if found is MISSING:
                break
            found = get_member(found, step)
        return found

    def _find(self, key: str) -> Any:
        context: Context | None = self
        while context is not None:
            found = get_member(context.value, key)
            if found is not MISSING:
                return found
            context = context.parent
        return MISSING
