"""Python emitter - dataclasses, enums and a handler Protocol for the kernel side."""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Final, Iterator, Sequence

from ..model import (
    ArraySchema,
    EnumSchema,
    Method,
    ObjectSchema,
    PrimitiveSchema,
    RefSchema,
    Schema,
    enum_identifier,
    items_context,
    object_identifier,
    params_identifier,
    result_context,
)
from ..shared.naming import (
    sanitize_module_name,
    sanitize_python_name,
    to_enum_member,
    to_pascal_case,
)
from .base import Emitter, format_comment, format_lines

PYTHON_TYPES: Final[dict[str, str]] = {
    "boolean": "bool",
    "integer": "int",
    "number": "float",
    "string": "str",
    "null": "None",
    "array-begin": "List[",
    "array-end": "]",
    "object": "JsonData",
}

INDENT: Final[str] = "    "


@lru_cache(maxsize=256)
def _quote(value: str) -> str:
    """Quote a string for Python literal embedding."""
    return json.dumps(value)


def _docstring(text: str, indent: str = INDENT) -> str:
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    lines = format_lines(escaped)
    if len(lines) == 1:
        return f'{indent}"""{lines[0]}"""\n'
    body = "".join(f"{indent}{line}".rstrip() + "\n" for line in lines)
    return f'{indent}"""\n{body}{indent}"""\n'


def _is_forward(schema: Schema) -> bool:
    """Whether an alias of this schema names a class declared further down."""
    if isinstance(schema, ArraySchema):
        return _is_forward(schema.items)
    return not isinstance(schema, PrimitiveSchema)


class PythonEmitter(Emitter):
    """Renders ``<name>_comm.py``."""

    target = "python"
    type_table = PYTHON_TYPES
    header_template = "python_header.py.jinja"

    @property
    def comm_identifier(self) -> str:
        return to_pascal_case(self.comm.name)

    def output_name(self) -> str:
        return f"{sanitize_module_name(self.comm.name)}_comm.py"

    def _field(self, name: str, py_type: str, description: str, required: bool) -> str:
        ident = sanitize_python_name(name)
        metadata = f'"description": {_quote(description)}'
        if ident != name:
            metadata += f', "wire_name": {_quote(name)}'
        if required:
            return f"{INDENT}{ident}: {py_type} = field(metadata={{{metadata}}})\n\n"
        return (
            f"{INDENT}{ident}: Optional[{py_type}] = "
            f"field(default=None, metadata={{{metadata}}})\n\n"
        )

    def _component(self, pointer: str) -> Schema | None:
        key = pointer.split("/")[-1]
        for contract in self.contracts:
            if pointer == f"#/components/schemas/{key}" and key in contract.schemas:
                return contract.schemas[key]
        return None

    def _revival(self, context: list[str], schema: Schema, value: str) -> str | None:
        """Expression rebuilding ``value`` into its record or enum type, if it has one."""
        if isinstance(schema, EnumSchema):
            return f"_revive({enum_identifier(context)}, {value})"
        if isinstance(schema, ObjectSchema):
            if schema.is_any:
                return None
            return f"_revive({object_identifier(context, schema)}, {value})"
        if isinstance(schema, ArraySchema):
            inner = self._revival(items_context(context), schema.items, "item")
            if inner is None:
                return None
            return f"[{inner} for item in {value}]"
        if isinstance(schema, RefSchema):
            target = self._component(schema.pointer)
            if target is None:
                return None
            key = schema.pointer.split("/")[-1]
            if isinstance(target, (ObjectSchema, EnumSchema)):
                if isinstance(target, ObjectSchema) and target.is_any:
                    return None
                return f"_revive({self.derive(key, schema)}, {value})"
            return self._revival([key], target, value)
        return None

    def _post_init(self, revivals: Sequence[tuple[str, str, bool]], doc: str) -> Iterator[str]:
        """``__post_init__`` applying ``(attribute, expression, required)`` revivals."""
        if not revivals:
            return
        yield f"{INDENT}def __post_init__(self):\n"
        yield _docstring(doc, INDENT * 2)
        for attribute, expression, required in revivals:
            if required:
                yield f"{INDENT * 2}self.{attribute} = {expression}\n"
            else:
                yield f"{INDENT * 2}if self.{attribute} is not None:\n"
                yield f"{INDENT * 3}self.{attribute} = {expression}\n"
        yield "\n"

    def _field_revival(
        self, name: str, context: list[str], schema: Schema, required: bool
    ) -> tuple[str, str, bool] | None:
        attribute = sanitize_python_name(name)
        expression = self._revival(context, schema, f"self.{attribute}")
        if expression is None:
            return None
        return attribute, expression, required

    def render_alias(self, key: str, schema: Schema) -> Iterator[str]:
        if schema.description:
            yield format_comment("# ", schema.description)
        alias_type = self.type_of([key], schema)
        if _is_forward(schema):
            alias_type = _quote(alias_type)
        yield f"{to_pascal_case(key)} = {alias_type}\n\n\n"

    def render_any_object(self, name: str, description: str) -> Iterator[str]:
        yield format_comment("# ", description)
        yield f"{name} = {self.type_table['object']}\n\n\n"

    def render_object(self, name: str, description: str, node: ObjectSchema) -> Iterator[str]:
        yield "@dataclass(kw_only=True)\n"
        yield f"class {name}:\n"
        yield _docstring(description)
        yield "\n"
        revivals = []
        for prop, schema in node.properties.items():
            required = node.is_required(prop)
            yield self._field(
                prop,
                self.type_of([prop, name], schema),
                schema.description or prop,
                required,
            )
            revival = self._field_revival(prop, [prop, name], schema, required)
            if revival is not None:
                revivals.append(revival)
        yield from self._post_init(revivals, "Revive nested values after initialization")
        yield "\n"

    def render_enum(self, name: str, description: str, values: Sequence[str]) -> Iterator[str]:
        yield "@enum.unique\n"
        yield f"class {name}(str, enum.Enum):\n"
        yield _docstring(description)
        yield "\n"
        for value in values:
            yield f"{INDENT}{to_enum_member(value)} = {_quote(value)}\n\n"
        yield "\n"

    def render_params(self, method: Method) -> Iterator[str]:
        yield "@dataclass(kw_only=True)\n"
        yield f"class {params_identifier(method.name)}:\n"
        yield _docstring(method.summary)
        yield "\n"
        revivals = []
        for param in method.params:
            context = [param.name, method.name]
            yield self._field(
                param.name,
                self.type_of(context, param.schema),
                param.description,
                param.required,
            )
            revival = self._field_revival(param.name, context, param.schema, param.required)
            if revival is not None:
                revivals.append(revival)
        yield from self._post_init(revivals, "Revive nested values after initialization")
        yield "\n"

    def _result_type(self, method: Method) -> str:
        if not method.has_result:
            return "None"
        return self.type_of(result_context(method.name), method.result)

    def _union(self, name: str, members: Sequence[str]) -> str:
        if not members:
            return f"{name} = NoReturn\n\n\n"
        return f"{name} = Union[\n" + "".join(f"{INDENT}{m},\n" for m in members) + "]\n\n\n"

    def emit_backend_unions(self) -> Iterator[str]:
        comm = self.comm_identifier
        tag_enum = f"{comm}Request"

        yield "@enum.unique\n"
        yield f"class {tag_enum}(str, enum.Enum):\n"
        yield _docstring(f"An enumeration of all the possible requests for {self.comm.name}")
        yield "\n"
        for method in self.backend_methods:
            yield format_comment(f"{INDENT}# ", method.summary)
            yield f"{INDENT}{to_pascal_case(method.name)} = {_quote(method.name)}\n\n"
        if not self.backend_methods:
            yield f"{INDENT}pass\n"
        yield "\n"

        requests = []
        for method in self.backend_methods:
            variant = to_pascal_case(method.name)
            requests.append(f"{variant}Request")
            yield "@dataclass(kw_only=True)\n"
            yield f"class {variant}Request:\n"
            yield _docstring(method.summary)
            yield "\n"
            if method.params:
                yield self._field(
                    "params",
                    params_identifier(method.name),
                    f"Parameters to the {variant} method",
                    True,
                )
            wire = _quote(f"The JSON-RPC method name ({method.name})")
            yield (
                f"{INDENT}method: {tag_enum} = field(default={tag_enum}.{variant}, "
                f'metadata={{"description": {wire}}})\n\n'
            )
            yield (
                f'{INDENT}jsonrpc: str = field(default="2.0", '
                'metadata={"description": "The JSON-RPC version specifier"})\n\n'
            )
            if method.params:
                yield from self._post_init(
                    [("params", f"_revive({params_identifier(method.name)}, self.params)", True)],
                    "Revive RPC parameters after initialization",
                )
            yield "\n"

        replies = []
        for method in self.backend_methods:
            if not method.has_result:
                continue
            variant = f"{to_pascal_case(method.name)}Reply"
            replies.append(variant)
            yield "@dataclass(kw_only=True)\n"
            yield f"class {variant}:\n"
            yield _docstring(f"Reply to the {to_pascal_case(method.name)} request")
            yield "\n"
            yield self._field(
                "result",
                self._result_type(method),
                method.result.description or f"Result of the {method.name} method",
                True,
            )
            yield "\n"

        yield self._union(f"{comm}RpcRequest", requests)
        yield self._union(f"{comm}RpcReply", replies)

    def emit_frontend_events(self) -> Iterator[str]:
        yield "@enum.unique\n"
        yield f"class {self.comm_identifier}Event(str, enum.Enum):\n"
        yield _docstring(f"An enumeration of all the possible events for {self.comm.name}")
        yield "\n"
        for method in self.frontend_methods:
            yield format_comment(f"{INDENT}# ", method.summary)
            yield f"{INDENT}{to_pascal_case(method.name)} = {_quote(method.name)}\n\n"
        if not self.frontend_methods:
            yield f"{INDENT}pass\n"
        yield "\n"

    def _handler_signature(self, method: Method) -> str:
        args = "self"
        if method.params:
            args += f", params: {params_identifier(method.name)}"
        return f"def {sanitize_python_name(method.name)}({args}) -> {self._result_type(method)}:"

    def emit_client(self) -> Iterator[str]:
        if self.comm.backend is None:
            return
        comm = self.comm_identifier

        yield f"class {comm}Handler(Protocol):\n"
        yield _docstring(f"Handler for RPC requests sent to the {self.comm.name} comm")
        yield "\n"
        for method in self.backend_methods:
            yield f"{INDENT}{self._handler_signature(method)}\n"
            yield _docstring(method.summary, INDENT * 2)
            yield f"{INDENT * 2}...\n\n"
        yield "\n"

        yield (
            f"def dispatch_{sanitize_module_name(self.comm.name)}_request(\n"
            f"{INDENT}handler: {comm}Handler, request: {comm}RpcRequest\n"
            f") -> Optional[{comm}RpcReply]:\n"
        )
        yield _docstring(
            f"Route a {self.comm.name} request to the handler method named by its "
            "wire method, returning the reply for methods that have a result."
        )
        for method in self.backend_methods:
            variant = to_pascal_case(method.name)
            args = "request.params" if method.params else ""
            call = f"handler.{sanitize_python_name(method.name)}({args})"
            yield f"{INDENT}if isinstance(request, {variant}Request):\n"
            if method.has_result:
                yield f"{INDENT * 2}return {variant}Reply(result={call})\n"
            else:
                yield f"{INDENT * 2}{call}\n"
                yield f"{INDENT * 2}return None\n"
        yield (
            f'{INDENT}raise ValueError(f"Unknown {self.comm.name} request: '
            '{request!r}")\n'
        )

        yield "\n\n"
        yield (
            f"def parse_{sanitize_module_name(self.comm.name)}_request("
            f"data: Dict[str, JsonData]) -> {comm}RpcRequest:\n"
        )
        yield _docstring(
            f"Build the typed request for a JSON-RPC message sent to the {self.comm.name} comm."
        )
        yield f'{INDENT}method = data.get("method")\n'
        for method in self.backend_methods:
            variant = to_pascal_case(method.name)
            args = 'params=data.get("params")' if method.params else ""
            yield f"{INDENT}if method == {comm}Request.{variant}:\n"
            yield f"{INDENT * 2}return {variant}Request({args})\n"
        yield (
            f'{INDENT}raise ValueError(f"Unknown {self.comm.name} request method: '
            '{method!r}")\n'
        )
