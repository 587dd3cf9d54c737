"""Naming utilities for code generation."""

from __future__ import annotations

import keyword
import re
from functools import lru_cache

RUST_KEYWORDS: frozenset[str] = frozenset({
    "as",
    "async",
    "await",
    "break",
    "const",
    "continue",
    "crate",
    "dyn",
    "else",
    "enum",
    "extern",
    "false",
    "fn",
    "for",
    "if",
    "impl",
    "in",
    "let",
    "loop",
    "match",
    "mod",
    "move",
    "mut",
    "pub",
    "ref",
    "return",
    "self",
    "Self",
    "static",
    "struct",
    "super",
    "trait",
    "true",
    "type",
    "union",
    "unsafe",
    "use",
    "where",
    "while",
})

# Comparison operators spelled out so they survive as identifier fragments
_OPERATOR_WORDS: tuple[tuple[str, str], ...] = (
    ("=", "Eq"),
    ("!", "Not"),
    ("<", "Lt"),
    (">", "Gt"),
)

_UNDERSCORE_LOWER = re.compile(r"_([a-z])")
_NON_WORD = re.compile(r"\W")


@lru_cache(maxsize=1024)
def to_camel_case(value: str) -> str:
    """Convert a snake_case name to camelCase.

    Comparison operators are replaced with word fragments first.

    Examples:
        >>> to_camel_case("get_column_info")
        'getColumnInfo'
        >>> to_camel_case("not_between")
        'notBetween'
        >>> to_camel_case("<=")
        'LtEq'
    """
    for operator, word in _OPERATOR_WORDS:
        value = value.replace(operator, word)
    return _UNDERSCORE_LOWER.sub(lambda m: m.group(1).upper(), value)


@lru_cache(maxsize=1024)
def to_pascal_case(value: str) -> str:
    """Convert a snake_case name to PascalCase.

    Examples:
        >>> to_pascal_case("ping_reply")
        'PingReply'
        >>> to_pascal_case("!=")
        'NotEq'
    """
    camel = to_camel_case(value)
    if camel[:1].islower():
        return camel[0].upper() + camel[1:]
    return camel


@lru_cache(maxsize=1024)
def to_enum_member(value: str) -> str:
    """Convert an enum wire value to a member identifier legal in every target."""
    member = _NON_WORD.sub("_", to_pascal_case(value))
    if not member or member[0].isdigit():
        member = f"_{member}"
    return member


@lru_cache(maxsize=1024)
def sanitize_module_name(value: str) -> str:
    """Sanitize a comm name for use as a Rust or Python module name."""
    return value.lower().replace("-", "_")


@lru_cache(maxsize=1024)
def sanitize_field_name(value: str) -> str:
    """Sanitize a value for use as a Rust field name."""
    sanitized = value.replace("-", "_")
    if sanitized in RUST_KEYWORDS:
        return f"r#{sanitized}"
    return sanitized


@lru_cache(maxsize=1024)
def sanitize_python_name(value: str) -> str:
    """Sanitize a value for use as a Python attribute or method name."""
    sanitized = value.replace("-", "_")
    if keyword.iskeyword(sanitized):
        return f"{sanitized}_"
    return sanitized
