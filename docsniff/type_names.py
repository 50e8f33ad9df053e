"""Canonical spelling of documented type names.

Examples
--------
>>> suggest_type("boolean")
'bool'
>>> normalize_union("Integer|int|NULL")
'int|null'
>>> suggest_type_hint("int", scalar_hints=False)
''
"""

from __future__ import annotations

import re
from typing import Final

__all__ = [
    "BUILTIN_TYPES",
    "SCALAR_HINTS",
    "hint_matches",
    "normalize_union",
    "suggest_type",
    "suggest_type_hint",
]

BUILTIN_TYPES: Final[frozenset[str]] = frozenset(
    {
        "array",
        "bool",
        "callable",
        "false",
        "float",
        "int",
        "iterable",
        "mixed",
        "never",
        "null",
        "object",
        "resource",
        "self",
        "static",
        "string",
        "true",
        "void",
    }
)

SCALAR_HINTS: Final[frozenset[str]] = frozenset({"string", "int", "float", "bool"})

_ALIASES: Final[dict[str, str]] = {
    "boolean": "bool",
    "integer": "int",
    "double": "float",
    "real": "float",
    "array()": "array",
}

# Documented types that have no parameter type declaration counterpart.
_NO_HINT: Final[frozenset[str]] = frozenset(
    {"mixed", "resource", "object", "null", "void", "true", "false", "$this", "static", "never"}
)

_ARRAY_SHAPE = re.compile(r"^array\(\s*([^\s=>]*)(?:\s*=>\s*(.*?))?\s*\)$", re.IGNORECASE)


def suggest_type(type_name: str) -> str:
    """Return the preferred spelling of a single type name.

    Parameters
    ----------
    type_name : str
        One alternative of a type expression, e.g. ``"Integer"``,
        ``"string[]"`` or ``"array(int => Boolean)"``.

    Returns
    -------
    str
        ``boolean`` becomes ``bool``, ``integer`` becomes ``int``, ``double``
        and ``real`` become ``float``; other built-in names are lower-cased;
        ``T[]`` and ``array(K => V)`` forms are normalized recursively. Class
        names are returned unchanged.
    """
    if not type_name:
        return ""
    if type_name.startswith("?") and len(type_name) > 1:
        return "?" + suggest_type(type_name[1:])
    if type_name.endswith("[]") and len(type_name) > 2:
        return suggest_type(type_name[:-2]) + "[]"
    lowered = type_name.lower()
    if lowered in _ALIASES:
        return _ALIASES[lowered]
    if lowered in BUILTIN_TYPES:
        return lowered
    if lowered.startswith("array("):
        match = _ARRAY_SHAPE.match(type_name)
        if match is None:
            return "array"
        key_type = suggest_type(match.group(1))
        value_type = suggest_type((match.group(2) or "").strip())
        if value_type:
            return f"array({key_type} => {value_type})"
        return f"array({key_type})"
    return type_name


def normalize_union(type_expr: str) -> str:
    """Normalize every ``|`` alternative and drop duplicates, keeping first occurrences.

    The result is a projection: normalizing it again returns it unchanged.

    Parameters
    ----------
    type_expr : str
        Type expression as written in a tag.

    Returns
    -------
    str
        Normalized type expression.
    """
    seen: list[str] = []
    for alternative in type_expr.split("|"):
        suggested = suggest_type(alternative)
        if suggested not in seen:
            seen.append(suggested)
    return "|".join(seen)


def suggest_type_hint(type_name: str, *, scalar_hints: bool) -> str:
    """Return the parameter type declaration expected for a documented type.

    Parameters
    ----------
    type_name : str
        Normalized single type name.
    scalar_hints : bool
        Whether the configured minimum language version supports scalar type
        declarations (``string``, ``int``, ``float``, ``bool``).

    Returns
    -------
    str
        Suggested declaration, or ``""`` when the type has no declaration
        counterpart.
    """
    lowered = type_name.lower()
    if "callable" in lowered or "callback" in lowered:
        return "callable"
    if lowered == "array" or lowered.endswith("[]") or lowered.startswith("array("):
        return "array"
    if lowered in SCALAR_HINTS:
        return lowered if scalar_hints else ""
    if lowered in _NO_HINT:
        return ""
    return type_name


def hint_matches(actual: str, suggested: str) -> bool:
    """Return ``True`` when a declared hint agrees with the suggested one.

    A leading ``?`` on the declaration is ignored and the declaration may be a
    trailing part of the suggestion, so ``Foo`` satisfies ``\\App\\Foo``.
    """
    hint = actual.removeprefix("?")
    if not hint:
        return False
    return suggested.endswith(hint)
