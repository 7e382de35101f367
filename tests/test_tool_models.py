import pytest
from pydantic import ValidationError as PydanticValidationError

from src.models import ServiceKind
from tools.gateway_tool import get_gateway_tool_schema
from tools.tool_models import ToolInvocation, ToolParameter, ToolParameterType, ToolSchema


@pytest.mark.parametrize("param_type, value", [
    (ToolParameterType.STRING, 3),
    (ToolParameterType.INTEGER, True),
    (ToolParameterType.INTEGER, 1.5),
    (ToolParameterType.FLOAT, "0.5"),
    (ToolParameterType.BOOLEAN, 1),
    (ToolParameterType.ARRAY, "abc"),
    (ToolParameterType.OBJECT, []),
])
def test_type_mismatches_are_reported(param_type, value):
    param = ToolParameter(name="p", type=param_type, description="test")

    assert param.validate_value(value) is not None


def test_bounds_and_allowed_values():
    param = ToolParameter(name="n", type=ToolParameterType.INTEGER, description="n", min_value=1, max_value=5)
    choice = ToolParameter(name="c", type=ToolParameterType.STRING, description="c", allowed_values=["a", "b"])

    assert param.validate_value(3) is None
    assert "minimum" in param.validate_value(0)
    assert "maximum" in param.validate_value(6)
    assert choice.validate_value("c") is not None


def test_schema_validation_and_json_schema():
    schema = get_gateway_tool_schema()

    assert schema.validate_parameters({"prompt": "hi"}) == {}
    assert "prompt|messages" in schema.validate_parameters({})
    assert "temperature" in schema.validate_parameters({"prompt": "hi", "temperature": 3})

    json_schema = schema.get_parameter_schema()
    assert json_schema["properties"]["temperature"]["type"] == "number"
    assert json_schema["allOf"] == [{"oneOf": [{"required": ["prompt"]}, {"required": ["messages"]}]}]


def test_each_exclusive_group_gets_its_own_one_of():
    schema = ToolSchema(
        tool_name="lookup",
        display_name="Lookup",
        description="Two independent exclusive groups",
        target_service=ServiceKind.VECTOR_STORE,
        parameters=[
            ToolParameter(name=name, type=ToolParameterType.STRING, description=name, required=False)
            for name in ("query", "query_id", "collection", "collection_alias")
        ],
        required_one_of=[["query", "query_id"], ["collection", "collection_alias"]],
    )

    json_schema = schema.get_parameter_schema()

    assert json_schema["allOf"] == [
        {"oneOf": [{"required": ["query"]}, {"required": ["query_id"]}]},
        {"oneOf": [{"required": ["collection"]}, {"required": ["collection_alias"]}]},
    ]
    assert "oneOf" not in json_schema
    assert schema.validate_parameters({"query": "a", "collection": "b"}) == {}
    assert "collection|collection_alias" in schema.validate_parameters({"query": "a"})


def test_invocation_is_frozen_and_checks_timeout():
    invocation = ToolInvocation(target_service=ServiceKind.GATEWAY, request_payload={"prompt": "x"})

    assert invocation.invocation_id
    with pytest.raises(PydanticValidationError):
        invocation.timeout = 3
    with pytest.raises(PydanticValidationError):
        ToolInvocation(target_service=ServiceKind.GATEWAY, timeout=0)
