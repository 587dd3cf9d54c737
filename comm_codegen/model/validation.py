"""Whole-comm checks run before any target is rendered."""

from __future__ import annotations

from ..shared.errors import SchemaError
from .contract import Comm
from .resolver import resolve_ref
from .schema import ObjectSchema, RefSchema
from .types import object_identifier
from .visitors import describe_object, iter_contract_nodes


def validate_comm(comm: Comm) -> list[str]:
    """Check a comm so generation can't fail halfway through a file.

    Every reference must resolve and every object must have a description,
    either its own or inherited from its position.

    Returns:
        Warnings about distinct objects that share an identifier. The first
        declaration of such an identifier is the one emitted.

    Raises:
        SchemaError: On the first unresolvable reference or undescribed object.
    """
    contracts = comm.contracts
    declared: dict[str, tuple[str, ObjectSchema]] = {}
    warnings: list[str] = []

    for contract in contracts:
        for context, node in iter_contract_nodes(contract):
            try:
                if isinstance(node, RefSchema):
                    resolve_ref(node.pointer, contracts)
                elif isinstance(node, ObjectSchema):
                    describe_object(context, node)
            except SchemaError as e:
                if e.schema_path is None and contract.source:
                    raise SchemaError(str(e), contract.source) from e
                raise

            if not isinstance(node, ObjectSchema):
                continue
            identifier = object_identifier(context, node)
            first = declared.setdefault(identifier, (contract.source, node))
            if first[1] != node:
                warnings.append(
                    f"Object '{identifier}' in {contract.source or comm.name} differs from "
                    f"the declaration in {first[0] or comm.name}; keeping the first"
                )

    return warnings
