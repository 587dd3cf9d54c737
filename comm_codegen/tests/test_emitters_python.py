import sys
import types

import pytest

from conftest import make_comm

from comm_codegen.emitters.python import PythonEmitter, _docstring, _is_forward
from comm_codegen.model.schema import ArraySchema, PrimitiveSchema, RefSchema


def render(ctx, comm):
    return PythonEmitter(ctx, comm).render()


def load_module(source, monkeypatch, name="generated_comm"):
    """Execute generated source as a registered module."""
    module = types.ModuleType(name)
    monkeypatch.setitem(sys.modules, name, module)
    exec(compile(source, f"{name}.py", "exec"), module.__dict__)
    return module


class TestDocstring:
    def test_single_line(self):
        assert _docstring("Reply to a ping") == '    """Reply to a ping"""\n'

    def test_escapes_quotes(self):
        assert _docstring('Say "hi"') == '    """Say \\"hi\\""""\n'

    def test_wraps_long_text(self):
        text = "word " * 30
        docstring = _docstring(text.strip())
        assert docstring.startswith('    """\n')
        assert docstring.endswith('    """\n')
        assert all(len(line) <= 74 for line in docstring.splitlines())


class TestIsForward:
    def test_primitive(self):
        assert not _is_forward(PrimitiveSchema(kind="string"))

    def test_array_of_primitive(self):
        assert not _is_forward(ArraySchema(items=PrimitiveSchema(kind="integer")))

    def test_array_of_ref(self):
        assert _is_forward(ArraySchema(items=RefSchema(pointer="#/components/schemas/item")))


class TestPythonPing:
    def test_output_name(self, ctx, ping_comm):
        assert PythonEmitter(ctx, ping_comm).output_name() == "ping_comm.py"

    def test_header(self, ctx, ping_comm):
        output = render(ctx, ping_comm)
        assert output.startswith(
            "#\n# AUTO-GENERATED from ping-backend-openrpc.json; do not edit.\n#\n"
        )
        assert "from __future__ import annotations\n" in output
        assert "from typing import Protocol\n" in output

    def test_object(self, ctx, ping_comm):
        output = render(ctx, ping_comm)
        assert (
            "@dataclass(kw_only=True)\n"
            "class PingReply:\n"
            '    """Reply to a ping"""\n'
            "\n"
            '    message: str = field(metadata={"description": "The echoed message"})\n'
        ) in output

    def test_params(self, ctx, ping_comm):
        output = render(ctx, ping_comm)
        assert (
            "class DoPingParams:\n"
            '    """Ping the kernel"""\n'
            "\n"
            '    value: str = field(metadata={"description": "The value to echo"})\n'
        ) in output

    def test_request_and_reply(self, ctx, ping_comm):
        output = render(ctx, ping_comm)
        assert "class PingRequest(str, enum.Enum):\n" in output
        assert '    DoPing = "do_ping"\n' in output
        assert "class DoPingRequest:\n" in output
        assert "    params: DoPingParams = field(" in output
        assert "    method: PingRequest = field(default=PingRequest.DoPing, " in output
        assert "class DoPingReply:\n" in output
        assert "    result: PingReply = field(" in output
        assert "PingRpcRequest = Union[\n    DoPingRequest,\n]\n" in output
        assert "PingRpcReply = Union[\n    DoPingReply,\n]\n" in output

    def test_no_event_surface(self, ctx, ping_comm):
        assert "PingEvent" not in render(ctx, ping_comm)

    def test_handler(self, ctx, ping_comm):
        output = render(ctx, ping_comm)
        assert "class PingHandler(Protocol):\n" in output
        assert "    def do_ping(self, params: DoPingParams) -> PingReply:\n" in output
        assert "def dispatch_ping_request(\n" in output

    def test_dispatch_round_trip(self, ctx, ping_comm, monkeypatch):
        module = load_module(render(ctx, ping_comm), monkeypatch)

        class Handler:
            def do_ping(self, params):
                return module.PingReply(message=params.value.upper())

        request = module.DoPingRequest(params=module.DoPingParams(value="hello"))
        assert request.method == "do_ping"
        assert request.jsonrpc == "2.0"

        reply = module.dispatch_ping_request(Handler(), request)
        assert isinstance(reply, module.DoPingReply)
        assert reply.result.message == "HELLO"

    def test_required_field_has_no_default(self, ctx, ping_comm, monkeypatch):
        module = load_module(render(ctx, ping_comm), monkeypatch)
        with pytest.raises(TypeError):
            module.PingReply()


class TestPythonEnums:
    def test_param_enum(self, ctx, mode_comm):
        output = render(ctx, mode_comm)
        assert (
            "@enum.unique\n"
            "class SetModeMode(str, enum.Enum):\n"
            '    """Possible values for Mode in SetMode"""\n'
            "\n"
            '    A = "a"\n'
            "\n"
            '    B = "b"\n'
        ) in output
        assert "    mode: SetModeMode = field(" in output

    def test_enum_values_preserved(self, ctx, mode_comm, monkeypatch):
        module = load_module(render(ctx, mode_comm), monkeypatch)
        assert [member.value for member in module.SetModeMode] == ["a", "b"]
        assert module.SetModeMode("b") is module.SetModeMode.B

    def test_no_replies(self, ctx, mode_comm):
        output = render(ctx, mode_comm)
        assert "ModeRpcReply = NoReturn\n" in output
        assert "    def set_mode(self, params: SetModeParams) -> None:\n" in output


class TestPythonUi:
    def test_optional_fields(self, ctx, ui_comm):
        output = render(ctx, ui_comm)
        assert "    id: int = field(" in output
        assert "    type: Optional[str] = field(default=None, " in output
        assert "    metadata: Optional[Metadata] = field(default=None, " in output
        assert "    status: Optional[GetStateResultStatus] = field(default=None, " in output

    def test_aliases(self, ctx, ui_comm):
        output = render(ctx, ui_comm)
        assert "# A list of item identifiers\nItemIds = List[int]\n" in output
        assert "# Extra data attached to the item\nMetadata = JsonData\n" in output

    def test_forward_alias_is_quoted(self, ctx):
        comm = make_comm(
            "ui",
            backend={
                "methods": [],
                "components": {
                    "schemas": {
                        "point": {
                            "type": "object",
                            "description": "A point",
                            "properties": {"x": {"type": "number", "description": "X"}},
                        },
                        "points": {
                            "type": "array",
                            "description": "Some points",
                            "items": {"$ref": "#/components/schemas/point"},
                        },
                    }
                },
            },
        )
        assert 'Points = "List[Point]"\n' in render(ctx, comm)

    def test_events(self, ctx, ui_comm):
        output = render(ctx, ui_comm)
        assert "class UiEvent(str, enum.Enum):\n" in output
        assert '    StateChanged = "state_changed"\n' in output
        assert '    Busy = "busy"\n' in output

    def test_module_executes(self, ctx, ui_comm, monkeypatch):
        module = load_module(render(ctx, ui_comm), monkeypatch)

        class Handler:
            def __init__(self):
                self.rendered = []

            def get_state(self):
                return module.GetStateResult(items=[module.Item(id=1, label="one")])

            def render(self, params):
                self.rendered.append(params)

        handler = Handler()
        reply = module.dispatch_ui_request(handler, module.GetStateRequest())
        assert isinstance(reply, module.GetStateReply)
        assert reply.result.items[0].label == "one"
        assert reply.result.status is None

        request = module.RenderRequest(
            params=module.RenderParams(width=10, format=module.RenderFormat.Svg)
        )
        assert module.dispatch_ui_request(handler, request) is None
        assert handler.rendered[0].height is None
        assert handler.rendered[0].format == "svg"

    def test_dispatch_rejects_unknown(self, ctx, ui_comm, monkeypatch):
        module = load_module(render(ctx, ui_comm), monkeypatch)
        with pytest.raises(ValueError, match="Unknown ui request"):
            module.dispatch_ui_request(object(), object())

    def test_keyword_field(self, ctx):
        comm = make_comm(
            "range",
            backend={
                "methods": [
                    {
                        "name": "select",
                        "summary": "Select a range",
                        "params": [
                            {"name": "from", "description": "Start", "schema": {"type": "integer"}},
                        ],
                    }
                ]
            },
        )
        output = render(ctx, comm)
        assert "    from_: int = field(" in output
        compile(output, "range_comm.py", "exec")

    def test_frontend_only(self, ctx, monkeypatch):
        comm = make_comm(
            "view",
            frontend={"methods": [{"name": "refresh", "summary": "Refresh the view"}]},
        )
        output = render(ctx, comm)
        assert "from typing import Protocol" not in output
        assert "Handler" not in output
        module = load_module(output, monkeypatch)
        assert module.ViewEvent.Refresh == "refresh"


class TestPythonWireRevival:
    def test_request_revives_params(self, ctx, ping_comm):
        output = render(ctx, ping_comm)
        assert (
            "    def __post_init__(self):\n"
            '        """Revive RPC parameters after initialization"""\n'
            "        self.params = _revive(DoPingParams, self.params)\n"
        ) in output

    def test_plain_records_have_no_post_init(self, ctx, ping_comm):
        output = render(ctx, ping_comm)
        start = output.index("class PingReply:")
        end = output.index("class DoPingParams:")
        assert "__post_init__" not in output[start:end]

    def test_params_from_wire_dict(self, ctx, ui_comm, monkeypatch):
        module = load_module(render(ctx, ui_comm), monkeypatch)
        request = module.RenderRequest(params={"width": 10, "format": "svg"})
        assert isinstance(request.params, module.RenderParams)
        assert request.params.format is module.RenderFormat.Svg
        assert request.params.height is None

    def test_nested_records_from_wire(self, ctx, ui_comm, monkeypatch):
        module = load_module(render(ctx, ui_comm), monkeypatch)
        result = module.GetStateResult(
            items=[{"id": 1, "label": "one", "metadata": {"k": [1]}}], status="busy"
        )
        assert isinstance(result.items[0], module.Item)
        assert result.items[0].metadata == {"k": [1]}
        assert result.status is module.GetStateResultStatus.Busy

    def test_frontend_params_from_wire(self, ctx, ui_comm, monkeypatch):
        module = load_module(render(ctx, ui_comm), monkeypatch)
        params = module.StateChangedParams(item={"id": 2, "label": "two"})
        assert isinstance(params.item, module.Item)

    def test_parse_and_dispatch(self, ctx, ui_comm, monkeypatch):
        module = load_module(render(ctx, ui_comm), monkeypatch)

        class Handler:
            def get_state(self):
                return module.GetStateResult(items=[])

            def render(self, params):
                self.params = params

        handler = Handler()
        message = {"jsonrpc": "2.0", "method": "render", "params": {"width": 4, "format": "png"}}
        request = module.parse_ui_request(message)
        assert isinstance(request, module.RenderRequest)
        assert module.dispatch_ui_request(handler, request) is None
        assert handler.params.width == 4
        assert handler.params.format is module.RenderFormat.Png

        reply = module.dispatch_ui_request(handler, module.parse_ui_request({"method": "get_state"}))
        assert isinstance(reply, module.GetStateReply)

    def test_parse_rejects_unknown_method(self, ctx, ui_comm, monkeypatch):
        module = load_module(render(ctx, ui_comm), monkeypatch)
        with pytest.raises(ValueError, match="Unknown ui request method: 'nope'"):
            module.parse_ui_request({"method": "nope"})

    def test_keyword_field_keeps_wire_name(self, ctx, monkeypatch):
        comm = make_comm(
            "range",
            backend={
                "methods": [
                    {
                        "name": "select",
                        "summary": "Select a range",
                        "params": [
                            {"name": "from", "description": "Start", "schema": {"type": "integer"}},
                            {"name": "end-row", "description": "End", "schema": {"type": "integer"}},
                        ],
                    }
                ]
            },
        )
        output = render(ctx, comm)
        assert '"wire_name": "from"' in output
        assert '"wire_name": "end-row"' in output

        module = load_module(output, monkeypatch)
        request = module.parse_range_request(
            {"method": "select", "params": {"from": 3, "end-row": 7}}
        )
        assert request.params.from_ == 3
        assert request.params.end_row == 7
