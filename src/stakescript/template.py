"""
Policy template renderer.

Turns literal policy fragments interleaved with typed arguments into one
canonical, whitespace-free policy string:

    render(["and_v(v:pk(", "),older(", "))"], [key, 144])
    -> "and_v(v:pk(<key hex>),older(144))"

Argument kinds (closed set):
- None          -> ""
- bytes         -> lowercase hex
- fragment      -> PolicyExpression / CompiledPolicy policy text
- str           -> verbatim
- int           -> decimal
- list          -> comma-joined, all elements of one of the kinds above
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Sequence

from .errors import UnsupportedArgumentType

_WS_RE = re.compile(r"[ \t\r\n]+")


class PolicyExpression(str):
    """Canonical policy text produced by render()."""


@dataclass(frozen=True)
class CompiledPolicy:
    """A policy expression together with the script it compiled to."""

    policy: PolicyExpression
    script: bytes

    def __str__(self) -> str:
        return str(self.policy)


class ArgKind(Enum):
    ABSENT = "absent"
    BYTES = "bytes"
    FRAGMENT = "fragment"
    TEXT = "text"
    INTEGER = "integer"
    LIST = "list"


def classify(value: Any) -> ArgKind:
    """Return the argument kind of ``value`` or raise UnsupportedArgumentType."""
    if value is None:
        return ArgKind.ABSENT
    if isinstance(value, (bytes, bytearray)):
        return ArgKind.BYTES
    # PolicyExpression is a str subclass: test it before plain text
    if isinstance(value, (PolicyExpression, CompiledPolicy)):
        return ArgKind.FRAGMENT
    if isinstance(value, str):
        return ArgKind.TEXT
    if isinstance(value, bool):
        raise UnsupportedArgumentType(value)
    if isinstance(value, int):
        return ArgKind.INTEGER
    if isinstance(value, (list, tuple)):
        return ArgKind.LIST
    raise UnsupportedArgumentType(value)


def _format_list(values: Sequence[Any]) -> str:
    kinds = {classify(v) for v in values}
    if len(kinds) > 1:
        raise UnsupportedArgumentType(values, "mixed element kinds: " + ", ".join(sorted(k.value for k in kinds)))
    if kinds & {ArgKind.LIST, ArgKind.ABSENT}:
        raise UnsupportedArgumentType(values, "list elements must be bytes, fragments, text or integers")
    return ",".join(format_arg(v) for v in values)


_FORMATTERS: Dict[ArgKind, Callable[[Any], str]] = {
    ArgKind.ABSENT: lambda v: "",
    ArgKind.BYTES: lambda v: bytes(v).hex(),
    ArgKind.FRAGMENT: str,
    ArgKind.TEXT: lambda v: v,
    ArgKind.INTEGER: lambda v: str(int(v)),
    ArgKind.LIST: _format_list,
}


def format_arg(value: Any) -> str:
    return _FORMATTERS[classify(value)](value)


def strip_whitespace(fragment: str) -> str:
    return _WS_RE.sub("", fragment)


def render(fragments: Sequence[str], args: Sequence[Any]) -> PolicyExpression:
    """Render literal ``fragments`` with ``args`` interleaved between them.

    Literal fragments are stripped of whitespace; arguments are formatted
    according to their kind and inserted as-is.

    Raises:
        ValueError: if ``len(args) != len(fragments) - 1``.
        UnsupportedArgumentType: if an argument is outside the supported kinds.
    """
    if len(fragments) != len(args) + 1:
        raise ValueError(
            f"template needs {len(fragments) - 1} argument(s) for {len(fragments)} fragment(s), got {len(args)}"
        )
    parts = [strip_whitespace(fragments[0])]
    for frag, arg in zip(fragments[1:], args):
        parts.append(format_arg(arg))
        parts.append(strip_whitespace(frag))
    return PolicyExpression("".join(parts))


def template(text: str, *args: Any) -> PolicyExpression:
    """Render ``text`` with each ``{}`` placeholder replaced by the next argument."""
    fragments = text.split("{}")
    if len(fragments) - 1 != len(args):
        raise ValueError(f"template has {len(fragments) - 1} placeholder(s), got {len(args)} argument(s)")
    return render(fragments, args)
