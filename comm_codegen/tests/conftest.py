import json
from pathlib import Path

import pytest

from comm_codegen.emitters import GeneratorContext
from comm_codegen.model import Comm, Direction, parse_contract


def ping_backend() -> dict:
    return {
        "openrpc": "1.3.0",
        "info": {"title": "Ping Backend", "version": "1.0.0"},
        "methods": [
            {
                "name": "do_ping",
                "summary": "Ping the kernel",
                "params": [
                    {
                        "name": "value",
                        "description": "The value to echo",
                        "schema": {"type": "string"},
                    }
                ],
                "result": {"schema": {"$ref": "#/components/schemas/ping_reply"}},
            }
        ],
        "components": {
            "schemas": {
                "ping_reply": {
                    "type": "object",
                    "description": "Reply to a ping",
                    "properties": {
                        "message": {"type": "string", "description": "The echoed message"},
                    },
                    "required": ["message"],
                }
            }
        },
    }


def mode_backend() -> dict:
    return {
        "openrpc": "1.3.0",
        "info": {"title": "Mode Backend", "version": "1.0.0"},
        "methods": [
            {
                "name": "set_mode",
                "summary": "Set the mode",
                "params": [
                    {
                        "name": "mode",
                        "description": "The new mode",
                        "schema": {"type": "string", "enum": ["a", "b"]},
                    }
                ],
                "result": {"schema": {"type": "null"}},
            }
        ],
    }


def ui_backend() -> dict:
    return {
        "openrpc": "1.3.0",
        "info": {"title": "UI Backend", "version": "1.0.0"},
        "methods": [
            {
                "name": "get_state",
                "summary": "Get the state",
                "description": "Returns the full state of the UI.",
                "params": [],
                "result": {
                    "schema": {
                        "type": "object",
                        "description": "The current state",
                        "properties": {
                            "items": {
                                "type": "array",
                                "description": "The items",
                                "items": {"$ref": "#/components/schemas/item"},
                            },
                            "status": {
                                "type": "string",
                                "description": "Current status",
                                "enum": ["idle", "busy"],
                            },
                        },
                        "required": ["items"],
                    }
                },
            },
            {
                "name": "render",
                "summary": "Render the view",
                "params": [
                    {
                        "name": "width",
                        "description": "Width in pixels",
                        "schema": {"type": "integer"},
                    },
                    {
                        "name": "height",
                        "description": "Height in pixels",
                        "required": False,
                        "schema": {"type": "integer"},
                    },
                    {
                        "name": "format",
                        "description": "The image format",
                        "schema": {"$ref": "#/components/schemas/render_format"},
                    },
                ],
            },
        ],
        "components": {
            "schemas": {
                "item": {
                    "type": "object",
                    "description": "An item in the view",
                    "properties": {
                        "id": {"type": "integer", "description": "Item identifier"},
                        "label": {"type": "string", "description": "Display label"},
                        "type": {"type": "string", "description": "Item kind"},
                        "metadata": {
                            "type": "object",
                            "description": "Extra data attached to the item",
                            "additionalProperties": True,
                        },
                    },
                    "required": ["id", "label"],
                },
                "render_format": {
                    "type": "string",
                    "description": "Image format",
                    "enum": ["png", "svg"],
                },
                "item_ids": {
                    "type": "array",
                    "description": "A list of item identifiers",
                    "items": {"type": "integer"},
                },
            }
        },
    }


def ui_frontend() -> dict:
    return {
        "openrpc": "1.3.0",
        "info": {"title": "UI Frontend", "version": "1.0.0"},
        "methods": [
            {
                "name": "state_changed",
                "summary": "The state of an item changed",
                "params": [
                    {
                        "name": "item",
                        "description": "The changed item",
                        "schema": {"$ref": "#/components/schemas/item"},
                    }
                ],
            },
            {
                "name": "busy",
                "summary": "The UI became busy",
                "params": [],
            },
        ],
    }


def make_comm(name: str, backend: dict | None = None, frontend: dict | None = None) -> Comm:
    return Comm(
        name=name,
        backend=(
            parse_contract(backend, Direction.BACKEND, f"{name}-backend-openrpc.json")
            if backend is not None
            else None
        ),
        frontend=(
            parse_contract(frontend, Direction.FRONTEND, f"{name}-frontend-openrpc.json")
            if frontend is not None
            else None
        ),
    )


def write_comm(comms_dir: Path, name: str, backend: dict | None = None, frontend: dict | None = None) -> None:
    comms_dir.mkdir(parents=True, exist_ok=True)
    if backend is not None:
        (comms_dir / f"{name}-backend-openrpc.json").write_text(json.dumps(backend, indent=2))
    if frontend is not None:
        (comms_dir / f"{name}-frontend-openrpc.json").write_text(json.dumps(frontend, indent=2))


@pytest.fixture
def ctx():
    return GeneratorContext()


@pytest.fixture
def ping_comm():
    return make_comm("ping", backend=ping_backend())


@pytest.fixture
def mode_comm():
    return make_comm("mode", backend=mode_backend())


@pytest.fixture
def ui_comm():
    return make_comm("ui", backend=ui_backend(), frontend=ui_frontend())
