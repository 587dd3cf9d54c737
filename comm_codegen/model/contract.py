"""Contract model - methods, params and comms parsed from OpenRPC documents."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any

from ..shared.errors import SchemaError, SchemaValidationError
from .schema import PrimitiveSchema, Schema, parse_schema


class Direction(str, enum.Enum):
    """Which side of the comm a contract's methods are sent to."""

    FRONTEND = "frontend"
    BACKEND = "backend"


@dataclass(frozen=True, slots=True)
class Param:
    """A named method parameter."""

    name: str
    description: str
    schema: Schema
    required: bool = True


@dataclass(frozen=True, slots=True)
class Method:
    """An RPC method or event declared by a contract."""

    name: str
    summary: str
    description: str | None = None
    params: tuple[Param, ...] = ()
    result: Schema | None = None

    @property
    def has_result(self) -> bool:
        """Whether the method replies with a value."""
        if self.result is None:
            return False
        return not (isinstance(self.result, PrimitiveSchema) and self.result.kind == "null")


@dataclass(frozen=True, slots=True)
class Contract:
    """One direction of a comm."""

    direction: Direction
    methods: tuple[Method, ...] = ()
    schemas: dict[str, Schema] = field(default_factory=dict)
    document: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)
    source: str = ""


@dataclass(frozen=True, slots=True)
class Comm:
    """A frontend/backend contract pair sharing one name."""

    name: str
    frontend: Contract | None = None
    backend: Contract | None = None

    def __post_init__(self) -> None:
        if self.frontend is None and self.backend is None:
            raise SchemaError(f"Comm '{self.name}' has neither a frontend nor a backend contract")

    @property
    def contracts(self) -> list[Contract]:
        """Loaded contracts in resolution and emission order (backend first)."""
        return [c for c in (self.backend, self.frontend) if c is not None]

    @property
    def sources(self) -> list[str]:
        return [c.source for c in self.contracts if c.source]


def _require_text(raw: dict[str, Any], key: str) -> str | None:
    value = raw.get(key)
    if isinstance(value, str) and value.strip():
        return value
    return None


def _parse_param(raw: Any, method: str, source: str) -> Param:
    if not isinstance(raw, dict):
        raise SchemaValidationError("param must be a mapping", source, field=method)

    name = _require_text(raw, "name")
    if name is None:
        raise SchemaValidationError("param has no name", source, field=method)

    description = _require_text(raw, "description")
    if description is None:
        raise SchemaValidationError(
            f"No description for '{method}' parameter '{name}'; "
            "please add a description to the schema",
            source,
        )

    if "schema" not in raw:
        raise SchemaValidationError(f"No schema for '{method}' parameter '{name}'", source)

    required = raw.get("required", True)
    if not isinstance(required, bool):
        raise SchemaValidationError("'required' must be a boolean", source, field=f"{method}.{name}")

    return Param(
        name=name,
        description=description,
        schema=parse_schema(raw["schema"], f"{method}.{name}", source),
        required=required,
    )


def _parse_method(raw: Any, source: str) -> Method:
    if not isinstance(raw, dict):
        raise SchemaValidationError("method must be a mapping", source)

    name = _require_text(raw, "name")
    if name is None:
        raise SchemaValidationError("method has no name", source)

    summary = _require_text(raw, "summary")
    if summary is None:
        raise SchemaValidationError(
            f"No description for '{name}'; please add a description to the schema",
            source,
        )

    raw_params = raw.get("params") or []
    if not isinstance(raw_params, list):
        raise SchemaValidationError("'params' must be a list", source, field=name)
    params = tuple(_parse_param(p, name, source) for p in raw_params)

    seen: set[str] = set()
    for param in params:
        if param.name in seen:
            raise SchemaValidationError(f"duplicate parameter '{param.name}'", source, field=name)
        seen.add(param.name)

    result: Schema | None = None
    raw_result = raw.get("result")
    if isinstance(raw_result, dict) and "schema" in raw_result:
        result = parse_schema(raw_result["schema"], f"{name}.result", source)

    return Method(
        name=name,
        summary=summary,
        description=_require_text(raw, "description"),
        params=params,
        result=result,
    )


def parse_contract(
    document: dict[str, Any],
    direction: Direction,
    source: str = "",
) -> Contract:
    """Parse a raw OpenRPC document into a Contract.

    Args:
        document: The raw document.
        direction: Which side of the comm the document describes.
        source: Document name for error messages and provenance headers.

    Returns:
        The parsed contract.

    Raises:
        SchemaError: If the document breaks any authoring rule.
    """
    raw_methods = document.get("methods")
    if not isinstance(raw_methods, list):
        raise SchemaValidationError("contract must provide a 'methods' list", source)

    methods = tuple(_parse_method(m, source) for m in raw_methods)

    seen: set[str] = set()
    for method in methods:
        if method.name in seen:
            raise SchemaValidationError(f"duplicate method '{method.name}'", source)
        seen.add(method.name)

    components = document.get("components") or {}
    raw_schemas = components.get("schemas") if isinstance(components, dict) else None
    schemas: dict[str, Schema] = {}
    if raw_schemas is not None:
        if not isinstance(raw_schemas, dict):
            raise SchemaValidationError("'components.schemas' must be a mapping", source)
        for key, raw in raw_schemas.items():
            schemas[key] = parse_schema(raw, key, source)

    return Contract(
        direction=direction,
        methods=methods,
        schemas=schemas,
        document=document,
        source=source,
    )
