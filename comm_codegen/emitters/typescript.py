"""TypeScript emitter - interfaces, enums and the frontend comm client."""

from __future__ import annotations

from typing import Final, Iterator, Sequence

from ..model import Method, ObjectSchema, Param, Schema, params_identifier, result_context
from ..shared.naming import to_camel_case, to_enum_member, to_pascal_case
from .base import Emitter, format_comment

TYPESCRIPT_TYPES: Final[dict[str, str]] = {
    "boolean": "boolean",
    "integer": "number",
    "number": "number",
    "string": "string",
    "null": "null",
    "array-begin": "Array<",
    "array-end": ">",
    "object": "unknown",
}


def _quote(value: str) -> str:
    """Quote a string as a single-quoted TypeScript literal."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def _doc(text: str, indent: str = "") -> str:
    return f"{indent}/**\n" + format_comment(f"{indent} * ", text) + f"{indent} */\n"


class TypescriptEmitter(Emitter):
    """Renders ``positron<Name>Comm.ts``."""

    target = "typescript"
    type_table = TYPESCRIPT_TYPES
    header_template = "typescript_header.ts.jinja"

    @property
    def comm_identifier(self) -> str:
        return to_pascal_case(self.comm.name)

    def output_name(self) -> str:
        return f"positron{self.comm_identifier}Comm.ts"

    def render_alias(self, key: str, schema: Schema) -> Iterator[str]:
        if schema.description:
            yield _doc(schema.description)
        yield f"export type {to_pascal_case(key)} = {self.type_of([key], schema)};\n\n"

    def render_any_object(self, name: str, description: str) -> Iterator[str]:
        yield _doc(description)
        yield f"export type {name} = {self.type_table['object']};\n\n"

    def render_object(self, name: str, description: str, node: ObjectSchema) -> Iterator[str]:
        yield _doc(description)
        yield f"export interface {name} {{\n"
        for prop, schema in node.properties.items():
            yield _doc(schema.description or prop, "\t")
            optional = "" if node.is_required(prop) else "?"
            yield f"\t{prop}{optional}: {self.type_of([prop, name], schema)};\n\n"
        yield "}\n\n"

    def render_enum(self, name: str, description: str, values: Sequence[str]) -> Iterator[str]:
        yield _doc(description)
        yield f"export enum {name} {{\n"
        yield ",\n".join(f"\t{to_enum_member(value)} = {_quote(value)}" for value in values)
        yield "\n}\n\n"

    def _param_fields(self, method: Method) -> Iterator[str]:
        for param in method.params:
            yield _doc(param.description, "\t")
            optional = "" if param.required else "?"
            yield f"\t{param.name}{optional}: {self._param_type(method, param)};\n\n"

    def _param_type(self, method: Method, param: Param) -> str:
        return self.type_of([param.name, method.name], param.schema)

    def render_params(self, method: Method) -> Iterator[str]:
        yield _doc(f"Parameters for the {to_pascal_case(method.name)} method.")
        yield f"export interface {params_identifier(method.name)} {{\n"
        yield from self._param_fields(method)
        yield "}\n\n"

    def _result_type(self, method: Method) -> str:
        if not method.has_result:
            return "void"
        return self.type_of(result_context(method.name), method.result)

    def emit_backend_unions(self) -> Iterator[str]:
        comm = self.comm_identifier

        requests = []
        for method in self.backend_methods:
            if method.params:
                requests.append(
                    f"\t| {{ method: {_quote(method.name)}; "
                    f"params: {params_identifier(method.name)} }}"
                )
            else:
                requests.append(f"\t| {{ method: {_quote(method.name)} }}")

        yield _doc(f"RPC request types for the {self.comm.name} comm")
        yield f"export type {comm}RpcRequest =\n"
        yield "\n".join(requests) if requests else "\tnever"
        yield ";\n\n"

        replies = [
            f"\t| {{ method: {_quote(method.name)}; result: {self._result_type(method)} }}"
            for method in self.backend_methods
            if method.has_result
        ]

        yield _doc(f"RPC reply types for the {self.comm.name} comm")
        yield f"export type {comm}RpcReply =\n"
        yield "\n".join(replies) if replies else "\tnever"
        yield ";\n\n"

    def emit_frontend_events(self) -> Iterator[str]:
        for method in self.frontend_methods:
            yield _doc(f"Event: {method.summary}")
            yield f"export interface {to_pascal_case(method.name)}Event {{\n"
            yield from self._param_fields(method)
            yield "}\n\n"

        yield _doc(f"Front-end events for the {self.comm.name} comm")
        yield f"export enum {self.comm_identifier}Event {{\n"
        yield ",\n".join(
            f"\t{to_pascal_case(method.name)} = {_quote(method.name)}"
            for method in self.frontend_methods
        )
        yield "\n}\n\n"

    def _signature(self, method: Method) -> str:
        # Optional parameters can only be marked `?` when nothing required follows
        last_required = max(
            (i for i, param in enumerate(method.params) if param.required), default=-1
        )
        parts = []
        for i, param in enumerate(method.params):
            name = to_camel_case(param.name)
            ptype = self._param_type(method, param)
            if param.required:
                parts.append(f"{name}: {ptype}")
            elif i > last_required:
                parts.append(f"{name}?: {ptype}")
            else:
                parts.append(f"{name}: {ptype} | undefined")
        return ", ".join(parts)

    def _method_doc(self, method: Method) -> Iterator[str]:
        yield "\t/**\n"
        yield format_comment("\t * ", method.summary)
        if method.description:
            yield "\t *\n"
            yield format_comment("\t * ", method.description)
        if method.params:
            yield "\t *\n"
            for param in method.params:
                yield format_comment(
                    "\t * ", f"@param {to_camel_case(param.name)} {param.description}"
                )
        if method.has_result and method.result.description:
            yield "\t *\n"
            yield format_comment("\t * ", f"@returns {method.result.description}")
        yield "\t */\n"

    def emit_client(self) -> Iterator[str]:
        yield _doc(f"Client for the {self.comm.name} comm")
        yield f"export class Positron{self.comm_identifier}Comm extends PositronBaseComm {{\n"
        yield "\tconstructor(instance: IRuntimeClientInstance<any, any>) {\n"
        yield "\t\tsuper(instance);\n"
        for method in self.frontend_methods:
            names = ", ".join(_quote(param.name) for param in method.params)
            yield (
                f"\t\tthis.onDid{to_pascal_case(method.name)} = "
                f"super.createEventEmitter({_quote(method.name)}, [{names}]);\n"
            )
        yield "\t}\n\n"

        for method in self.backend_methods:
            yield from self._method_doc(method)
            names = ", ".join(_quote(param.name) for param in method.params)
            args = ", ".join(to_camel_case(param.name) for param in method.params)
            yield (
                f"\t{to_camel_case(method.name)}({self._signature(method)}): "
                f"Promise<{self._result_type(method)}> {{\n"
            )
            yield f"\t\treturn super.performRpc({_quote(method.name)}, [{names}], [{args}]);\n"
            yield "\t}\n\n"

        for method in self.frontend_methods:
            yield _doc(method.summary, "\t")
            yield (
                f"\tonDid{to_pascal_case(method.name)}: "
                f"Event<{to_pascal_case(method.name)}Event>;\n\n"
            )

        yield "}\n\n"
