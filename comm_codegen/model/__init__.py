"""Contract model: schemas, contracts, references, types and visitors."""

from .schema import (
    PRIMITIVE_KINDS,
    ArraySchema,
    EnumSchema,
    ObjectSchema,
    PrimitiveSchema,
    RefSchema,
    Schema,
    parse_schema,
)
from .contract import Comm, Contract, Direction, Method, Param, parse_contract
from .resolver import lookup_pointer, resolve_ref
from .types import (
    TypeTable,
    derive_type,
    enum_identifier,
    field_type,
    items_context,
    object_identifier,
    object_name,
    params_identifier,
    result_context,
)
from .visitors import (
    describe_enum,
    describe_object,
    iter_contract_nodes,
    iter_schema_nodes,
    visit_enums,
    visit_objects,
)
from .validation import validate_comm

__all__ = [
    "PRIMITIVE_KINDS",
    "ArraySchema",
    "EnumSchema",
    "ObjectSchema",
    "PrimitiveSchema",
    "RefSchema",
    "Schema",
    "parse_schema",
    "Comm",
    "Contract",
    "Direction",
    "Method",
    "Param",
    "parse_contract",
    "lookup_pointer",
    "resolve_ref",
    "TypeTable",
    "derive_type",
    "enum_identifier",
    "field_type",
    "items_context",
    "object_identifier",
    "object_name",
    "params_identifier",
    "result_context",
    "describe_enum",
    "describe_object",
    "iter_contract_nodes",
    "iter_schema_nodes",
    "visit_enums",
    "visit_objects",
    "validate_comm",
]
