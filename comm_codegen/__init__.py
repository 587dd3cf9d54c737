"""Comm code generator: OpenRPC comm contracts to TypeScript, Rust and Python bindings."""

__version__ = "0.1.0"
