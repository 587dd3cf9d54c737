import pytest

from conftest import make_comm, ping_backend, ui_backend, ui_frontend

from comm_codegen.model.contract import Comm, Direction, Method, parse_contract
from comm_codegen.model.schema import EnumSchema, ObjectSchema, PrimitiveSchema, RefSchema
from comm_codegen.shared.errors import SchemaError, SchemaValidationError


class TestParseContract:
    def test_ping(self):
        contract = parse_contract(ping_backend(), Direction.BACKEND, "ping-backend-openrpc.json")

        assert contract.direction is Direction.BACKEND
        assert contract.source == "ping-backend-openrpc.json"
        [method] = contract.methods
        assert method.name == "do_ping"
        assert method.summary == "Ping the kernel"
        [param] = method.params
        assert param.name == "value"
        assert param.required
        assert param.schema == PrimitiveSchema(kind="string")
        assert method.result == RefSchema(pointer="#/components/schemas/ping_reply")
        assert isinstance(contract.schemas["ping_reply"], ObjectSchema)

    def test_methods_in_document_order(self):
        contract = parse_contract(ui_backend(), Direction.BACKEND)
        assert [m.name for m in contract.methods] == ["get_state", "render"]

    def test_optional_param(self):
        contract = parse_contract(ui_backend(), Direction.BACKEND)
        render = contract.methods[1]
        assert [p.required for p in render.params] == [True, False, True]

    def test_description_kept(self):
        contract = parse_contract(ui_backend(), Direction.BACKEND)
        assert contract.methods[0].description == "Returns the full state of the UI."
        assert contract.methods[1].description is None

    def test_components_parsed(self):
        contract = parse_contract(ui_backend(), Direction.BACKEND)
        assert list(contract.schemas) == ["item", "render_format", "item_ids"]
        assert contract.schemas["render_format"] == EnumSchema(
            values=("png", "svg"), description="Image format"
        )

    def test_missing_summary(self):
        document = ping_backend()
        del document["methods"][0]["summary"]
        with pytest.raises(SchemaValidationError, match="No description for 'do_ping'"):
            parse_contract(document, Direction.BACKEND, "ping.json")

    def test_missing_param_description(self):
        document = ping_backend()
        del document["methods"][0]["params"][0]["description"]
        with pytest.raises(
            SchemaValidationError, match="No description for 'do_ping' parameter 'value'"
        ):
            parse_contract(document, Direction.BACKEND)

    def test_missing_param_schema(self):
        document = ping_backend()
        del document["methods"][0]["params"][0]["schema"]
        with pytest.raises(SchemaValidationError, match="No schema for 'do_ping' parameter 'value'"):
            parse_contract(document, Direction.BACKEND)

    def test_required_must_be_bool(self):
        document = ping_backend()
        document["methods"][0]["params"][0]["required"] = "yes"
        with pytest.raises(SchemaValidationError, match="must be a boolean"):
            parse_contract(document, Direction.BACKEND)

    def test_duplicate_method(self):
        document = ping_backend()
        document["methods"].append(document["methods"][0])
        with pytest.raises(SchemaValidationError, match="duplicate method 'do_ping'"):
            parse_contract(document, Direction.BACKEND)

    def test_duplicate_param(self):
        document = ping_backend()
        params = document["methods"][0]["params"]
        params.append(dict(params[0]))
        with pytest.raises(SchemaValidationError, match="duplicate parameter 'value'"):
            parse_contract(document, Direction.BACKEND)

    def test_methods_required(self):
        with pytest.raises(SchemaValidationError, match="'methods' list"):
            parse_contract({"openrpc": "1.3.0"}, Direction.FRONTEND)


class TestMethodHasResult:
    def test_no_result(self):
        assert not Method(name="busy", summary="Busy").has_result

    def test_null_result(self):
        method = Method(name="render", summary="Render", result=PrimitiveSchema(kind="null"))
        assert not method.has_result

    def test_value_result(self):
        method = Method(name="count", summary="Count", result=PrimitiveSchema(kind="integer"))
        assert method.has_result


class TestComm:
    def test_contracts_backend_first(self):
        comm = make_comm("ui", backend=ui_backend(), frontend=ui_frontend())
        assert [c.direction for c in comm.contracts] == [Direction.BACKEND, Direction.FRONTEND]

    def test_sources(self):
        comm = make_comm("ui", backend=ui_backend(), frontend=ui_frontend())
        assert comm.sources == ["ui-backend-openrpc.json", "ui-frontend-openrpc.json"]

    def test_single_contract(self, ping_comm):
        assert ping_comm.frontend is None
        assert len(ping_comm.contracts) == 1

    def test_needs_a_contract(self):
        with pytest.raises(SchemaError, match="neither a frontend nor a backend"):
            Comm(name="empty")
