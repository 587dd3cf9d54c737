"""
Schema visitors - depth-first traversals of a contract's schema nodes.

Each visitor hands every matching node, together with its naming context
(enclosing names, innermost first), to a caller-supplied callback and yields
the text fragments the callback produces. Traversal order is pre-order, so an
object is visited before the objects nested in its properties, and is also the
emission order.
"""

from __future__ import annotations

from typing import Callable, Iterator, Sequence

from ..shared.errors import SchemaValidationError
from ..shared.naming import to_pascal_case
from .contract import Contract
from .schema import ArraySchema, EnumSchema, ObjectSchema, Schema
from .types import items_context, object_name, result_context

NamingContext = list[str]
ObjectCallback = Callable[[NamingContext, ObjectSchema], Iterator[str]]
EnumCallback = Callable[[NamingContext, Sequence[str]], Iterator[str]]


def iter_schema_nodes(
    context: NamingContext,
    schema: Schema,
) -> Iterator[tuple[NamingContext, Schema]]:
    """Yield a schema node and all of its descendants with their contexts."""
    yield context, schema
    if isinstance(schema, ArraySchema):
        yield from iter_schema_nodes(items_context(context), schema.items)
    elif isinstance(schema, ObjectSchema):
        owner = [schema.name, *context] if schema.name else [object_name(context, schema), *context[1:]]
        for key, prop in schema.properties.items():
            yield from iter_schema_nodes([key, *owner], prop)


def iter_contract_nodes(contract: Contract) -> Iterator[tuple[NamingContext, Schema]]:
    """Yield every schema node of a contract: methods first, then shared schemas."""
    for method in contract.methods:
        for param in method.params:
            yield from iter_schema_nodes([param.name, method.name], param.schema)
        if method.result is not None:
            yield from iter_schema_nodes(result_context(method.name), method.result)
    for key, schema in contract.schemas.items():
        yield from iter_schema_nodes([key], schema)


def visit_objects(contract: Contract, callback: ObjectCallback) -> Iterator[str]:
    """Invoke ``callback(context, node)`` for every object node."""
    for context, node in iter_contract_nodes(contract):
        if isinstance(node, ObjectSchema):
            yield from callback(context, node)


def visit_enums(contract: Contract, callback: EnumCallback) -> Iterator[str]:
    """Invoke ``callback(context, values)`` for every enum node."""
    for context, node in iter_contract_nodes(contract):
        if isinstance(node, EnumSchema):
            yield from callback(context, node.values)


def describe_object(context: Sequence[str], node: ObjectSchema) -> str:
    """The object's own description, or one inherited from where it sits."""
    if node.description:
        return node.description
    if len(context) >= 2:
        return f"{to_pascal_case(context[0])} in {to_pascal_case(context[1])}"
    raise SchemaValidationError(
        "No description; please add a description to the schema",
        field=node.name or (context[0] if context else None),
    )


def describe_enum(context: Sequence[str]) -> str:
    if len(context) >= 2:
        return (
            f"Possible values for {to_pascal_case(context[0])} "
            f"in {to_pascal_case(context[1])}"
        )
    return f"Possible values for {to_pascal_case(context[0])}"
