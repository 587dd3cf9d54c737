"""Custom exceptions for the comm code generator."""

from __future__ import annotations


class SchemaError(Exception):
    """Base exception for contract and schema errors."""

    def __init__(self, message: str, schema_path: str | None = None) -> None:
        self.schema_path = schema_path
        full_message = f"{message}" if not schema_path else f"[{schema_path}] {message}"
        super().__init__(full_message)


class SchemaValidationError(SchemaError):
    """Raised when a contract breaks an authoring rule."""

    def __init__(
        self,
        message: str,
        schema_path: str | None = None,
        field: str | None = None,
    ) -> None:
        self.field = field
        if field:
            message = f"Field '{field}': {message}"
        super().__init__(message, schema_path)


class TypeMappingError(SchemaError):
    """Raised when a schema type has no mapping."""

    def __init__(
        self,
        type_name: str,
        context: str,
        schema_path: str | None = None,
    ) -> None:
        self.type_name = type_name
        super().__init__(f"No type mapping for '{type_name}' ({context})", schema_path)


class UnresolvedRefError(SchemaError):
    """Raised when a $ref pointer is not found in any loaded contract."""

    def __init__(self, pointer: str, schema_path: str | None = None) -> None:
        self.pointer = pointer
        super().__init__(f"Could not find ref: {pointer}", schema_path)


class PreconditionError(Exception):
    """Raised when the environment is not ready for generation."""


class FormatterError(Exception):
    """Raised when the external formatter rejects generated output."""

    def __init__(self, path: str, returncode: int, stderr: str = "") -> None:
        self.path = path
        self.returncode = returncode
        self.stderr = stderr
        detail = f": {stderr.strip()}" if stderr.strip() else ""
        super().__init__(f"Formatter failed on {path} (exit {returncode}){detail}")
