"""Contract document loading and comm discovery."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .errors import SchemaError

CONTRACT_SUFFIXES: frozenset[str] = frozenset({".json", ".yaml", ".yml"})

_CONTRACT_FILE = re.compile(
    r"^(?P<name>.+)-(?P<direction>frontend|backend)-openrpc\.(?:json|ya?ml)$"
)


@dataclass(frozen=True, slots=True)
class CommDocuments:
    """The contract documents found for one comm."""

    name: str
    frontend: Path | None = None
    backend: Path | None = None


def load_contract_document(path: Path) -> dict[str, Any]:
    """Load a contract document from a JSON or YAML file.

    Args:
        path: Path to the contract document.

    Returns:
        The parsed document.

    Raises:
        SchemaError: If the file cannot be read or parsed.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SchemaError(f"Failed to read contract file: {e}", str(path)) from e

    try:
        if path.suffix.lower() in {".yaml", ".yml"}:
            data = yaml.safe_load(content)
        else:
            data = json.loads(content)
    except yaml.YAMLError as e:
        raise SchemaError(f"Invalid YAML: {e}", str(path)) from e
    except json.JSONDecodeError as e:
        raise SchemaError(f"Invalid JSON: {e}", str(path)) from e

    if not isinstance(data, dict):
        raise SchemaError("Contract root must be a mapping", str(path))

    return data


def collect_comm_documents(comms_dir: Path) -> list[CommDocuments]:
    """Group the contract documents in a directory by comm name.

    Args:
        comms_dir: Directory holding ``<name>-frontend-openrpc.json`` and
            ``<name>-backend-openrpc.json`` documents.

    Returns:
        One entry per comm with at least one document, sorted by name.

    Raises:
        FileNotFoundError: If the directory doesn't exist.
        SchemaError: If a comm has two documents for the same direction.
    """
    if not comms_dir.is_dir():
        raise FileNotFoundError(f"Comms directory '{comms_dir}' does not exist")

    found: dict[str, dict[str, Path]] = {}
    for path in sorted(comms_dir.iterdir()):
        if not path.is_file() or path.suffix.lower() not in CONTRACT_SUFFIXES:
            continue
        match = _CONTRACT_FILE.match(path.name)
        if match is None:
            continue
        documents = found.setdefault(match["name"], {})
        direction = match["direction"]
        if direction in documents:
            raise SchemaError(
                f"Duplicate {direction} contract (also {documents[direction].name})",
                str(path),
            )
        documents[direction] = path

    return [
        CommDocuments(
            name=name,
            frontend=documents.get("frontend"),
            backend=documents.get("backend"),
        )
        for name, documents in sorted(found.items())
    ]
