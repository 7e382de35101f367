import argparse
import json

import pytest

from src.app.tool_cli import main, parse_param


def test_parse_param_decodes_json_values():
    assert parse_param("prompt=hello world") == ("prompt", "hello world")
    assert parse_param("temperature=0.2") == ("temperature", 0.2)
    assert parse_param('context=["a","b"]') == ("context", ["a", "b"])
    with pytest.raises(argparse.ArgumentTypeError):
        parse_param("no-separator")


def test_list_prints_tools(mocked_registry, capsys):
    assert main(["list"], registry=mocked_registry) == 0

    out = capsys.readouterr().out
    assert "gateway_tool" in out
    assert "evaluator_tool" in out


def test_invoke_prints_result_json(mocked_registry, capsys):
    code = main(["invoke", "gateway_tool", "-p", "prompt=Capital of France?", "-p", "max_tokens=16"],
                registry=mocked_registry)

    assert code == 0
    result = json.loads(capsys.readouterr().out)
    assert result["status"] == "ok"
    assert result["payload"]["completion"] == "Paris is the capital of France."


def test_invoke_error_result_exit_code(mocked_registry, capsys):
    assert main(["invoke", "evaluator_tool", "-p", "evaluator=judge"], registry=mocked_registry) == 1
    assert json.loads(capsys.readouterr().out)["error_kind"] == "validation"


def test_invoke_unknown_tool(mocked_registry, capsys):
    assert main(["invoke", "nope"], registry=mocked_registry) == 2
    assert "not found" in capsys.readouterr().err
