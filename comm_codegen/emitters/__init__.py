"""Per-target emitters."""

from .base import COMMENT_WIDTH, Emitter, GeneratorContext, format_comment, format_lines
from .python import PYTHON_TYPES, PythonEmitter
from .rust import RUST_TYPES, RustEmitter
from .typescript import TYPESCRIPT_TYPES, TypescriptEmitter

# Rendering order for every comm
EMITTERS: tuple[type[Emitter], ...] = (TypescriptEmitter, RustEmitter, PythonEmitter)

__all__ = [
    "COMMENT_WIDTH",
    "EMITTERS",
    "Emitter",
    "GeneratorContext",
    "format_comment",
    "format_lines",
    "PYTHON_TYPES",
    "PythonEmitter",
    "RUST_TYPES",
    "RustEmitter",
    "TYPESCRIPT_TYPES",
    "TypescriptEmitter",
]
