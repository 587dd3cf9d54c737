"""Shared utilities for the comm code generator."""

from .contract_loader import (
    CommDocuments,
    collect_comm_documents,
    load_contract_document,
)
from .naming import (
    to_camel_case,
    to_pascal_case,
    to_enum_member,
    sanitize_module_name,
    sanitize_field_name,
    sanitize_python_name,
    RUST_KEYWORDS,
)
from .errors import (
    SchemaError,
    SchemaValidationError,
    TypeMappingError,
    UnresolvedRefError,
    PreconditionError,
    FormatterError,
)

__all__ = [
    # Contract loading
    "CommDocuments",
    "collect_comm_documents",
    "load_contract_document",
    # Naming utilities
    "to_camel_case",
    "to_pascal_case",
    "to_enum_member",
    "sanitize_module_name",
    "sanitize_field_name",
    "sanitize_python_name",
    "RUST_KEYWORDS",
    # Errors
    "SchemaError",
    "SchemaValidationError",
    "TypeMappingError",
    "UnresolvedRefError",
    "PreconditionError",
    "FormatterError",
]
