"""Rust emitter - serde types plus a handler trait for the kernel side of a comm."""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Final, Iterator, Sequence

from ..model import Method, ObjectSchema, Schema, params_identifier, result_context
from ..shared.naming import (
    sanitize_field_name,
    sanitize_module_name,
    to_enum_member,
    to_pascal_case,
)
from .base import Emitter, format_comment

RUST_TYPES: Final[dict[str, str]] = {
    "boolean": "bool",
    "integer": "i64",
    "number": "f64",
    "string": "String",
    "null": "()",
    "array-begin": "Vec<",
    "array-end": ">",
    "object": "serde_json::Value",
}

DERIVES: Final[str] = "#[derive(Debug, Clone, Serialize, Deserialize, PartialEq)]\n"


@lru_cache(maxsize=256)
def _quote(value: str) -> str:
    """Quote a string for Rust literal embedding."""
    return json.dumps(value)


class RustEmitter(Emitter):
    """Renders ``<name>_comm.rs``."""

    target = "rust"
    type_table = RUST_TYPES
    header_template = "rust_header.rs.jinja"

    @property
    def comm_identifier(self) -> str:
        return to_pascal_case(self.comm.name)

    def output_name(self) -> str:
        return f"{sanitize_module_name(self.comm.name)}_comm.rs"

    def _field(self, name: str, rust_type: str, required: bool) -> str:
        ident = sanitize_field_name(name)
        # Raw identifiers serialize under their unprefixed name
        rename = ""
        if ident.removeprefix("r#") != name:
            rename = f"\t#[serde(rename = {_quote(name)})]\n"
        if required:
            return f"{rename}\tpub {ident}: {rust_type},\n"
        return (
            rename
            + '\t#[serde(default, skip_serializing_if = "Option::is_none")]\n'
            f"\tpub {ident}: Option<{rust_type}>,\n"
        )

    def render_alias(self, key: str, schema: Schema) -> Iterator[str]:
        if schema.description:
            yield format_comment("/// ", schema.description)
        yield f"pub type {to_pascal_case(key)} = {self.type_of([key], schema)};\n\n"

    def render_any_object(self, name: str, description: str) -> Iterator[str]:
        yield format_comment("/// ", description)
        yield f"pub type {name} = {self.type_table['object']};\n\n"

    def render_object(self, name: str, description: str, node: ObjectSchema) -> Iterator[str]:
        yield format_comment("/// ", description)
        yield DERIVES
        yield f"pub struct {name} {{\n"
        fields = []
        for prop, schema in node.properties.items():
            doc = format_comment("\t/// ", schema.description) if schema.description else ""
            rust_type = self.type_of([prop, name], schema)
            fields.append(doc + self._field(prop, rust_type, node.is_required(prop)))
        yield "\n".join(fields)
        yield "}\n\n"

    def render_enum(self, name: str, description: str, values: Sequence[str]) -> Iterator[str]:
        yield format_comment("/// ", description)
        yield DERIVES
        yield f"pub enum {name} {{\n"
        yield "\n".join(
            f"\t#[serde(rename = {_quote(value)})]\n\t{to_enum_member(value)},\n"
            for value in values
        )
        yield "}\n\n"

    def render_params(self, method: Method) -> Iterator[str]:
        yield format_comment("/// ", f"Parameters for the {to_pascal_case(method.name)} method.")
        yield DERIVES
        yield f"pub struct {params_identifier(method.name)} {{\n"
        fields = []
        for param in method.params:
            rust_type = self.type_of([param.name, method.name], param.schema)
            fields.append(
                format_comment("\t/// ", param.description)
                + self._field(param.name, rust_type, param.required)
            )
        yield "\n".join(fields)
        yield "}\n\n"

    def _result_type(self, method: Method) -> str:
        return self.type_of(result_context(method.name), method.result)

    def _method_doc(self, method: Method, indent: str = "\t") -> Iterator[str]:
        yield format_comment(f"{indent}/// ", method.summary)
        if method.description:
            yield f"{indent}///\n"
            yield format_comment(f"{indent}/// ", method.description)

    def _variant(self, method: Method) -> str:
        """A `method`-tagged variant carrying the method's params, if any."""
        variant = to_pascal_case(method.name)
        if method.params:
            variant += f"({params_identifier(method.name)})"
        return f"\t#[serde(rename = {_quote(method.name)})]\n\t{variant},\n"

    def emit_backend_unions(self) -> Iterator[str]:
        comm = self.comm_identifier

        yield "/**\n"
        yield f" * RPC request types for the {self.comm.name} comm\n"
        yield " */\n"
        yield DERIVES
        yield '#[serde(tag = "method", content = "params")]\n'
        yield f"pub enum {comm}RpcRequest {{\n"
        for method in self.backend_methods:
            yield from self._method_doc(method)
            yield self._variant(method)
            yield "\n"
        yield "}\n\n"

        yield "/**\n"
        yield f" * RPC reply types for the {self.comm.name} comm\n"
        yield " */\n"
        yield DERIVES
        yield '#[serde(tag = "method", content = "result")]\n'
        yield f"pub enum {comm}RpcReply {{\n"
        for method in self.backend_methods:
            if not method.has_result:
                continue
            if method.result.description:
                yield format_comment("\t/// ", method.result.description)
            yield f"\t{to_pascal_case(method.name)}Reply({self._result_type(method)}),\n\n"
        yield "}\n\n"

    def emit_frontend_events(self) -> Iterator[str]:
        comm = self.comm_identifier

        yield "/**\n"
        yield f" * Front-end events for the {self.comm.name} comm\n"
        yield " */\n"
        yield DERIVES
        yield '#[serde(tag = "method", content = "params")]\n'
        yield f"pub enum {comm}Event {{\n"
        for method in self.frontend_methods:
            yield from self._method_doc(method)
            yield self._variant(method)
            yield "\n"
        yield "}\n\n"

        yield f"impl {comm}Event {{\n"
        yield "\t/// The wire method name of the event.\n"
        yield "\tpub fn method(&self) -> &'static str {\n"
        yield "\t\tmatch self {\n"
        for method in self.frontend_methods:
            pattern = to_pascal_case(method.name)
            if method.params:
                pattern += "(_)"
            yield f"\t\t\t{comm}Event::{pattern} => {_quote(method.name)},\n"
        yield "\t\t}\n"
        yield "\t}\n"
        yield "}\n\n"

    def _handler_signature(self, method: Method) -> str:
        args = "&mut self"
        if method.params:
            args += f", params: {params_identifier(method.name)}"
        result = self._result_type(method) if method.has_result else "()"
        return f"fn {method.name}({args}) -> Result<{result}, Self::Error>"

    def emit_client(self) -> Iterator[str]:
        if self.comm.backend is None:
            return
        comm = self.comm_identifier

        yield format_comment("/// ", f"Handler for RPC requests sent to the {self.comm.name} comm")
        yield f"pub trait {comm}Handler {{\n"
        yield "\ttype Error;\n\n"
        for method in self.backend_methods:
            yield from self._method_doc(method)
            yield f"\t{self._handler_signature(method)};\n\n"
        yield "}\n\n"

        handler_fn = f"dispatch_{sanitize_module_name(self.comm.name)}_request"
        yield format_comment(
            "/// ",
            f"Routes a {self.comm.name} request to the handler method named by its "
            "wire method, returning the reply for methods that have a result.",
        )
        yield f"pub fn {handler_fn}<H: {comm}Handler>(\n"
        yield "\thandler: &mut H,\n"
        yield f"\trequest: {comm}RpcRequest,\n"
        yield f") -> Result<Option<{comm}RpcReply>, H::Error> {{\n"
        yield "\tmatch request {\n"
        for method in self.backend_methods:
            variant = to_pascal_case(method.name)
            if method.params:
                pattern = f"{comm}RpcRequest::{variant}(params)"
                call = f"handler.{method.name}(params)?"
            else:
                pattern = f"{comm}RpcRequest::{variant}"
                call = f"handler.{method.name}()?"
            if method.has_result:
                yield f"\t\t{pattern} => Ok(Some({comm}RpcReply::{variant}Reply({call}))),\n"
            else:
                yield f"\t\t{pattern} => {{\n"
                yield f"\t\t\t{call};\n"
                yield "\t\t\tOk(None)\n"
                yield "\t\t},\n"
        yield "\t}\n"
        yield "}\n\n"
