"""
Emitter skeleton shared by all target languages.

An emitter turns one comm into the source text of one target file. The
section order is fixed here so generated files line up across targets:

1. provenance header
2. aliases for shared non-object schemas
3. object declarations
4. enum declarations
5. per-method parameter records
6. backend request/reply unions
7. frontend events
8. client surface
"""

from __future__ import annotations

import textwrap
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, ClassVar, Final, Iterator, Sequence

from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template

from ..model import (
    Comm,
    EnumSchema,
    Method,
    ObjectSchema,
    Schema,
    TypeTable,
    derive_type,
    describe_enum,
    describe_object,
    enum_identifier,
    field_type,
    object_identifier,
    visit_enums,
    visit_objects,
)
from ..model.types import TYPE_TABLE_KEYS

TEMPLATE_DIR: Final[Path] = Path(__file__).parent / "templates"

COMMENT_WIDTH: Final[int] = 70


@dataclass
class GeneratorContext:
    """Context for code generation with cached resources."""

    template_env: Environment = field(init=False)
    _headers: dict[str, Template] = field(init=False, default_factory=dict)

    def __post_init__(self) -> None:
        self.template_env = Environment(
            loader=FileSystemLoader(TEMPLATE_DIR),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
            auto_reload=False,  # Disable auto-reload for performance
        )

    def header_template(self, name: str) -> Template:
        """Get a header template, compiling it on first use."""
        template = self._headers.get(name)
        if template is None:
            template = self.template_env.get_template(name)
            self._headers[name] = template
        return template


def format_lines(text: str, width: int = COMMENT_WIDTH) -> list[str]:
    """Break text into lines no longer than ``width`` characters."""
    lines = textwrap.wrap(text, width=width, break_long_words=False, break_on_hyphens=False)
    return lines or [""]


def format_comment(leader: str, text: str) -> str:
    """Wrap a comment and prefix each line with ``leader``."""
    return "".join(f"{leader}{line}".rstrip() + "\n" for line in format_lines(text))


class Emitter(ABC):
    """Renders one comm for one target language."""

    target: ClassVar[str]
    type_table: ClassVar[TypeTable]
    header_template: ClassVar[str]

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        missing = TYPE_TABLE_KEYS - set(cls.type_table)
        if missing:
            raise TypeError(f"{cls.__name__} type table is missing {sorted(missing)}")

    def __init__(self, ctx: GeneratorContext, comm: Comm) -> None:
        self.ctx = ctx
        self.comm = comm

    @property
    def contracts(self):
        return self.comm.contracts

    @property
    def backend_methods(self) -> tuple[Method, ...]:
        return self.comm.backend.methods if self.comm.backend else ()

    @property
    def frontend_methods(self) -> tuple[Method, ...]:
        return self.comm.frontend.methods if self.comm.frontend else ()

    @abstractmethod
    def output_name(self) -> str:
        """File name of the generated source."""

    def render(self) -> str:
        return "".join(self.emit())

    def emit(self) -> Iterator[str]:
        """Yield the fragments of the generated file in section order."""
        yield self.render_header()
        yield from self.emit_aliases()
        yield from self.emit_objects()
        yield from self.emit_enums()
        yield from self.emit_param_records()
        if self.comm.backend is not None:
            yield from self.emit_backend_unions()
        if self.comm.frontend is not None:
            yield from self.emit_frontend_events()
        yield from self.emit_client()

    def render_header(self) -> str:
        return self.ctx.header_template(self.header_template).render(
            name=self.comm.name,
            sources=self.comm.sources or [self.comm.name],
            has_backend=self.comm.backend is not None,
            has_frontend=self.comm.frontend is not None,
        )

    # Type helpers

    def derive(self, key: str, schema: Schema) -> str:
        return derive_type(self.contracts, self.type_table, key, schema)

    def type_of(self, context: Sequence[str], schema: Schema) -> str:
        return field_type(self.contracts, self.type_table, context, schema)

    # Section drivers

    def emit_aliases(self) -> Iterator[str]:
        for contract in self.contracts:
            for key, schema in contract.schemas.items():
                if isinstance(schema, (ObjectSchema, EnumSchema)):
                    continue
                yield from self.render_alias(key, schema)

    def emit_objects(self) -> Iterator[str]:
        seen: set[str] = set()

        def declare(context: list[str], node: ObjectSchema) -> Iterator[str]:
            name = object_identifier(context, node)
            if name in seen:
                return
            seen.add(name)
            description = describe_object(context, node)
            if node.is_any:
                yield from self.render_any_object(name, description)
            else:
                yield from self.render_object(name, description, node)

        for contract in self.contracts:
            yield from visit_objects(contract, declare)

    def emit_enums(self) -> Iterator[str]:
        seen: set[str] = set()

        def declare(context: list[str], values: Sequence[str]) -> Iterator[str]:
            name = enum_identifier(context)
            if name in seen:
                return
            seen.add(name)
            yield from self.render_enum(name, describe_enum(context), values)

        for contract in self.contracts:
            yield from visit_enums(contract, declare)

    def emit_param_records(self) -> Iterator[str]:
        for method in (*self.backend_methods, *self.frontend_methods):
            if method.params:
                yield from self.render_params(method)

    # Target-specific rendering

    @abstractmethod
    def render_alias(self, key: str, schema: Schema) -> Iterator[str]:
        ...

    @abstractmethod
    def render_any_object(self, name: str, description: str) -> Iterator[str]:
        ...

    @abstractmethod
    def render_object(self, name: str, description: str, node: ObjectSchema) -> Iterator[str]:
        ...

    @abstractmethod
    def render_enum(self, name: str, description: str, values: Sequence[str]) -> Iterator[str]:
        ...

    @abstractmethod
    def render_params(self, method: Method) -> Iterator[str]:
        ...

    @abstractmethod
    def emit_backend_unions(self) -> Iterator[str]:
        ...

    @abstractmethod
    def emit_frontend_events(self) -> Iterator[str]:
        ...

    @abstractmethod
    def emit_client(self) -> Iterator[str]:
        ...
