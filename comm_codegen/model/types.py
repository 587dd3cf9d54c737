"""Derivation of target-language type expressions from schemas."""

from __future__ import annotations

from typing import Final, Mapping, Sequence

from ..shared.errors import SchemaValidationError, TypeMappingError
from ..shared.naming import to_pascal_case
from .contract import Contract
from .resolver import resolve_ref
from .schema import ArraySchema, EnumSchema, ObjectSchema, RefSchema, Schema

TypeTable = Mapping[str, str]

ARRAY_BEGIN: Final[str] = "array-begin"
ARRAY_END: Final[str] = "array-end"
# Table key for the target's arbitrary-JSON type
ANY_OBJECT: Final[str] = "object"

TYPE_TABLE_KEYS: Final[frozenset[str]] = frozenset({
    "boolean", "integer", "number", "string", "null", ARRAY_BEGIN, ARRAY_END, ANY_OBJECT
})


def derive_type(
    contracts: Sequence[Contract],
    type_table: TypeTable,
    key: str,
    schema: Schema,
) -> str:
    """Derive a type expression for a schema.

    Args:
        contracts: Contracts used to resolve references, backend first.
        type_table: The target's primitive and array tokens.
        key: Name of the nearest enclosing key, used for unnamed objects.
        schema: The schema to derive a type from.

    Raises:
        UnresolvedRefError: If a reference cannot be resolved.
        TypeMappingError: If the table has no entry for a primitive kind.
    """
    if isinstance(schema, ArraySchema):
        return (
            type_table[ARRAY_BEGIN]
            + derive_type(contracts, type_table, key, schema.items)
            + type_table[ARRAY_END]
        )
    if isinstance(schema, RefSchema):
        return resolve_ref(schema.pointer, contracts)
    if isinstance(schema, ObjectSchema):
        return to_pascal_case(schema.name or key)

    kind = "string" if isinstance(schema, EnumSchema) else schema.kind
    try:
        return type_table[kind]
    except KeyError:
        raise TypeMappingError(kind, f"value '{key}'") from None


def field_type(
    contracts: Sequence[Contract],
    type_table: TypeTable,
    context: Sequence[str],
    schema: Schema,
) -> str:
    """Derive the type of a field, param or result at a naming context.

    Enum-valued nodes map to their generated enum type; everything else
    follows ``derive_type`` with the innermost context entry as key.
    """
    if isinstance(schema, EnumSchema):
        return enum_identifier(context)
    if isinstance(schema, ArraySchema):
        return (
            type_table[ARRAY_BEGIN]
            + field_type(contracts, type_table, items_context(context), schema.items)
            + type_table[ARRAY_END]
        )
    return derive_type(contracts, type_table, context[0], schema)


def object_name(context: Sequence[str], node: ObjectSchema) -> str:
    """The raw (unconverted) name of an object node."""
    if node.name:
        return node.name
    if not context:
        raise SchemaValidationError("object has no name and no enclosing key to name it")
    return context[0]


def object_identifier(context: Sequence[str], node: ObjectSchema) -> str:
    return to_pascal_case(object_name(context, node))


def enum_identifier(context: Sequence[str]) -> str:
    """Owning type name followed by field name, e.g. ``SetModeMode``."""
    if len(context) >= 2:
        return to_pascal_case(context[1]) + to_pascal_case(context[0])
    if context:
        return to_pascal_case(context[0])
    raise SchemaValidationError("enum has no enclosing key to name it")


def params_identifier(method_name: str) -> str:
    return f"{to_pascal_case(method_name)}Params"


def result_context(method_name: str) -> list[str]:
    """Naming context of a method's result schema."""
    return [f"{method_name}_result"]


def items_context(context: Sequence[str]) -> list[str]:
    """Naming context of an array's items.

    Items share the array's context, except directly under a top-level name,
    where they get their own ``<name>_item`` entry so the item type does not
    take the array's own name.
    """
    if len(context) == 1:
        return [f"{context[0]}_item"]
    return list(context)
