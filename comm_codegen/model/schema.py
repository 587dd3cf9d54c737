"""
Schema model - the closed set of shapes a contract schema node can take.

Raw JSON schema nodes are classified once, by ``parse_schema``, into one of
five variants. Every later pass pattern-matches on these variants instead of
re-inspecting raw keys.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Final, Union

from ..shared.errors import SchemaValidationError, TypeMappingError

PRIMITIVE_KINDS: Final[frozenset[str]] = frozenset({
    "boolean", "integer", "number", "string", "null"
})


@dataclass(frozen=True, slots=True)
class PrimitiveSchema:
    """A scalar value."""
    kind: str
    description: str | None = None


@dataclass(frozen=True, slots=True)
class ArraySchema:
    """A homogeneous list."""
    items: Schema
    description: str | None = None


@dataclass(frozen=True, slots=True)
class ObjectSchema:
    """A structured value with named properties."""
    name: str | None = None
    description: str | None = None
    properties: dict[str, Schema] = field(default_factory=dict)
    required: frozenset[str] = frozenset()
    additional_properties: bool = False

    @property
    def is_any(self) -> bool:
        """Whether this object stands for an arbitrary JSON value."""
        return not self.properties and self.additional_properties

    def is_required(self, prop: str) -> bool:
        return prop in self.required


@dataclass(frozen=True, slots=True)
class EnumSchema:
    """A string restricted to a fixed set of values."""
    values: tuple[str, ...]
    description: str | None = None


@dataclass(frozen=True, slots=True)
class RefSchema:
    """A pointer to a schema declared elsewhere."""
    pointer: str
    description: str | None = None


Schema = Union[PrimitiveSchema, ArraySchema, ObjectSchema, EnumSchema, RefSchema]


def _description(raw: dict[str, Any]) -> str | None:
    value = raw.get("description")
    if isinstance(value, str) and value.strip():
        return value
    return None


def parse_schema(
    raw: Any,
    location: str,
    schema_path: str | None = None,
) -> Schema:
    """Classify a raw JSON schema node.

    Args:
        raw: The raw schema mapping.
        location: Dotted path of the node, used in error messages.
        schema_path: Source document, used in error messages.

    Returns:
        The classified schema.

    Raises:
        SchemaValidationError: If the node is malformed or an object property
            lacks a description.
        TypeMappingError: If the node names an unknown type.
    """
    if not isinstance(raw, dict):
        raise SchemaValidationError("schema must be a mapping", schema_path, field=location)

    schema_type = raw.get("type")
    description = _description(raw)

    if schema_type == "array":
        if "items" not in raw:
            raise SchemaValidationError("array schema has no 'items'", schema_path, field=location)
        return ArraySchema(
            items=parse_schema(raw["items"], f"{location}[]", schema_path),
            description=description,
        )

    if "$ref" in raw:
        pointer = raw["$ref"]
        if not isinstance(pointer, str) or not pointer:
            raise SchemaValidationError("'$ref' must be a non-empty string", schema_path, field=location)
        return RefSchema(pointer=pointer, description=description)

    if "enum" in raw:
        values = raw["enum"]
        if not isinstance(values, list) or not values:
            raise SchemaValidationError("'enum' must be a non-empty list", schema_path, field=location)
        if not all(isinstance(value, str) for value in values):
            raise SchemaValidationError("only string enums are supported", schema_path, field=location)
        return EnumSchema(values=tuple(values), description=description)

    if schema_type == "object":
        return _parse_object(raw, location, schema_path, description)

    if schema_type is None:
        raise SchemaValidationError(
            "schema has no 'type', '$ref' or 'enum'", schema_path, field=location
        )
    if not isinstance(schema_type, str) or schema_type not in PRIMITIVE_KINDS:
        raise TypeMappingError(str(schema_type), f"schema '{location}'", schema_path)

    return PrimitiveSchema(kind=schema_type, description=description)


def _parse_object(
    raw: dict[str, Any],
    location: str,
    schema_path: str | None,
    description: str | None,
) -> ObjectSchema:
    name = raw.get("name")
    if name is not None and (not isinstance(name, str) or not name):
        raise SchemaValidationError("object 'name' must be a non-empty string", schema_path, field=location)

    raw_props = raw.get("properties") or {}
    if not isinstance(raw_props, dict):
        raise SchemaValidationError("'properties' must be a mapping", schema_path, field=location)

    owner = name or location
    properties: dict[str, Schema] = {}
    for prop_name, prop in raw_props.items():
        if not isinstance(prop, dict) or not _description(prop):
            raise SchemaValidationError(
                "No description for the value; please add a description to the schema",
                schema_path,
                field=f"{owner}.{prop_name}",
            )
        properties[prop_name] = parse_schema(prop, f"{owner}.{prop_name}", schema_path)

    required = raw.get("required") or []
    if not isinstance(required, list):
        raise SchemaValidationError("'required' must be a list", schema_path, field=location)

    additional = raw.get("additionalProperties") is True
    if not properties and not additional:
        raise SchemaValidationError(
            "No properties; please add properties to the schema", schema_path, field=owner
        )

    return ObjectSchema(
        name=name,
        description=description,
        properties=properties,
        required=frozenset(str(item) for item in required),
        additional_properties=additional,
    )
