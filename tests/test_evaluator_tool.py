import httpx
import pytest

from agents.agent_models import ToolResultStatus
from src.errors import ServiceError
from src.models import ToolErrorKind
from tests.conftest import RecordingTransport, evaluation_body, json_handler
from tools.evaluator_tool import EvaluatorTool, normalize_evaluation


def test_evaluation_request_and_verdict(evaluator_config, evaluator_transport):
    tool = EvaluatorTool(evaluator_config, transport=evaluator_transport)

    result = tool.invoke({
        "evaluator": "lynx",
        "criteria": ["patronus:hallucination"],
        "input": "What was revenue in Q3?",
        "output": "Revenue in Q3 was $4.2M.",
        "context": ["Q3 revenue totalled $4.2 million."],
        "tags": {"run": "nightly"},
    })

    assert result.status == ToolResultStatus.OK
    assert result.payload.score == pytest.approx(0.92)
    assert result.payload.pass_ is True
    assert result.payload.threshold == 0.5
    assert result.payload.explanation == "Grounded in context."
    assert len(result.payload.results) == 1

    request = evaluator_transport.requests[0]
    assert request.url == "https://evaluator.test/v1/evaluate"
    assert request.headers["X-API-KEY"] == "ev-test"

    body = evaluator_transport.last_json()
    assert body["evaluators"] == [
        {"evaluator": "lynx", "criteria": "patronus:hallucination", "explain_strategy": "always"}
    ]
    assert body["evaluated_model_output"] == "Revenue in Q3 was $4.2M."
    assert body["evaluated_model_input"] == "What was revenue in Q3?"
    assert body["evaluated_model_retrieved_context"] == ["Q3 revenue totalled $4.2 million."]
    assert body["tags"] == {"run": "nightly"}
    assert body["capture"] == "all"


def test_without_criteria_sends_single_evaluator(evaluator_config, evaluator_transport):
    tool = EvaluatorTool(evaluator_config, transport=evaluator_transport)

    result = tool.invoke({"evaluator": "judge", "output": "Some answer"})

    assert result.ok
    assert evaluator_transport.last_json()["evaluators"] == [{"evaluator": "judge", "explain_strategy": "always"}]


def test_threshold_parameter_decides_pass(evaluator_config):
    transport = RecordingTransport(json_handler(evaluation_body({"score_raw": 0.75, "pass": True})))
    tool = EvaluatorTool(evaluator_config, transport=transport)

    result = tool.invoke({"evaluator": "judge", "output": "answer", "threshold": 0.8})

    assert result.ok
    assert result.payload.score == pytest.approx(0.75)
    assert result.payload.pass_ is False
    assert result.payload.threshold == 0.8
    assert result.payload.results[0].service_pass is True


def test_aggregate_is_lowest_criterion(evaluator_config):
    body = evaluation_body(
        {"criteria": "patronus:hallucination", "score_raw": 0.95, "explanation": "No hallucination."},
        {"criteria": "patronus:answer-relevance", "score_raw": 0.3, "pass": False, "explanation": "Off topic."},
    )
    tool = EvaluatorTool(evaluator_config, transport=RecordingTransport(json_handler(body)))

    result = tool.invoke({
        "evaluator": "judge",
        "criteria": ["patronus:hallucination", "patronus:answer-relevance"],
        "output": "answer",
    })

    assert result.payload.score == pytest.approx(0.3)
    assert result.payload.pass_ is False
    assert [r.pass_ for r in result.payload.results] == [True, False]
    assert result.payload.explanation == "No hallucination.\nOff topic."


@pytest.mark.parametrize("score_raw, service_pass, expected", [
    (1.7, True, 1.0),
    (-0.2, False, 0.0),
    (None, True, 1.0),
    (None, False, 0.0),
    (0.4, True, 0.4),
])
def test_scores_are_normalized_to_unit_interval(score_raw, service_pass, expected):
    output = normalize_evaluation(
        evaluation_body({"score_raw": score_raw, "pass": service_pass}), "judge", 0.5
    )

    assert 0.0 <= output.score <= 1.0
    assert output.score == pytest.approx(expected)
    assert output.pass_ is (output.score >= 0.5)


def test_failed_criterion_run_raises_service_error():
    body = evaluation_body({"status": "failed", "error_message": "evaluator not found"})

    with pytest.raises(ServiceError, match="evaluator not found"):
        normalize_evaluation(body, "judge", 0.5)


def test_empty_results_are_service_error(evaluator_config):
    tool = EvaluatorTool(evaluator_config, transport=RecordingTransport(json_handler({"results": []})))

    result = tool.invoke({"evaluator": "judge", "output": "answer"})

    assert result.error_kind == ToolErrorKind.SERVICE


def test_missing_output_is_validation_error(evaluator_config, evaluator_transport):
    tool = EvaluatorTool(evaluator_config, transport=evaluator_transport)

    result = tool.invoke({"evaluator": "judge"})

    assert result.error_kind == ToolErrorKind.VALIDATION
    assert "output" in result.error_message
    assert evaluator_transport.requests == []


def test_threshold_out_of_range_is_validation_error(evaluator_config, evaluator_transport):
    tool = EvaluatorTool(evaluator_config, transport=evaluator_transport)

    result = tool.invoke({"evaluator": "judge", "output": "answer", "threshold": 1.5})

    assert result.error_kind == ToolErrorKind.VALIDATION
    assert evaluator_transport.requests == []


def test_forbidden_is_authentication_error(evaluator_config):
    transport = RecordingTransport(json_handler({"message": "forbidden"}, 403))
    tool = EvaluatorTool(evaluator_config, transport=transport)

    result = tool.invoke({"evaluator": "judge", "output": "answer"})

    assert result.status == ToolResultStatus.ERROR
    assert result.error_kind == ToolErrorKind.AUTHENTICATION


def test_timeout_is_transport_error(evaluator_config):
    def _slow(request):
        raise httpx.ReadTimeout("read timed out", request=request)

    transport = RecordingTransport(_slow)
    tool = EvaluatorTool(evaluator_config, transport=transport)

    result = tool.invoke({"evaluator": "judge", "output": "answer"}, timeout=1.5)

    assert result.error_kind == ToolErrorKind.TRANSPORT
    assert "evaluation platform timed out after 1.5s" in result.error_message
    assert transport.requests[0].url.path == "/v1/evaluate"
    assert transport.requests[0].headers["X-API-KEY"] == "ev-test"


@pytest.mark.parametrize("entry", [
    {"status": "success", "evaluation_result": "oops"},
    {"status": "success", "evaluation_result": {"score_raw": 0.8, "explanation": {"text": "nested"}}},
    {"status": "success", "criteria": ["a", "b"], "evaluation_result": {"score_raw": 0.8}},
])
def test_malformed_results_are_service_errors(evaluator_config, entry):
    tool = EvaluatorTool(evaluator_config, transport=RecordingTransport(json_handler({"results": [entry]})))

    result = tool.invoke({"evaluator": "judge", "output": "answer"})

    assert result.status == ToolResultStatus.ERROR
    assert result.error_kind == ToolErrorKind.SERVICE
