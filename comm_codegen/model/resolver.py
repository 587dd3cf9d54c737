"""Resolution of ``$ref`` pointers across a comm's contracts."""

from __future__ import annotations

from typing import Any, Sequence

from ..shared.errors import UnresolvedRefError
from ..shared.naming import to_pascal_case
from .contract import Contract

_MISSING = object()


def lookup_pointer(pointer: str, document: dict[str, Any], default: Any = None) -> Any:
    """Walk a ``#/a/b/c`` pointer through a document.

    Returns the target node, or ``default`` as soon as a segment is absent.
    """
    target: Any = document
    for part in pointer.split("/"):
        if part == "#":
            continue
        if not isinstance(target, dict) or part not in target:
            return default
        target = target[part]
    return target


def resolve_ref(pointer: str, contracts: Sequence[Contract]) -> str:
    """Resolve a ``$ref`` to the identifier of the schema it names.

    Contracts are tried in the given order, which callers keep as backend
    before frontend; the first contract holding the target wins.

    Raises:
        UnresolvedRefError: If no contract holds the target.
    """
    for contract in contracts:
        if lookup_pointer(pointer, contract.document, _MISSING) is not _MISSING:
            return to_pascal_case(pointer.split("/")[-1])
    sources = ", ".join(c.source for c in contracts if c.source) or None
    raise UnresolvedRefError(pointer, sources)
