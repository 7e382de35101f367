"""
Evaluator Tool for Scoring Agent Outputs

Submits an agent's output to an AI evaluation platform (Patronus-style
``/v1/evaluate`` API) and reduces the verdicts to a normalized score,
a pass/fail flag and an explanation. Agents use it to check their own work
for hallucination, relevance or custom criteria before handing results on.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx
from pydantic import ValidationError as PydanticValidationError

from src.config import EvaluatorConfig
from src.errors import ServiceError
from src.models import CriterionEvaluation, ServiceKind
from src.utils.http_client import ServiceHTTPClient
from tools.base_adapter import ServiceAdapter
from tools.tool_models import (
    EvaluatorToolOutput,
    ToolParameter,
    ToolParameterType,
    ToolSchema,
)

logger = logging.getLogger(__name__)


def get_evaluator_tool_schema() -> ToolSchema:
    """
    Get the schema definition for the evaluator tool.

    Returns:
        ToolSchema with parameter definitions and documentation
    """
    return ToolSchema(
        tool_name="evaluator_tool",
        display_name="Output Evaluator",
        description="Scores a model or agent output with a hosted evaluator (e.g. hallucination, answer relevance, custom judges). Returns a score in [0, 1], a pass/fail verdict and the evaluator's explanation.",
        version="1.0.0",
        category="evaluation",
        target_service=ServiceKind.EVALUATOR,
        parameters=[
            ToolParameter(
                name="evaluator",
                type=ToolParameterType.STRING,
                description="Evaluator name, e.g. 'lynx' or 'judge'",
                required=True,
                min_length=1
            ),
            ToolParameter(
                name="criteria",
                type=ToolParameterType.ARRAY,
                description="Criteria names to evaluate against, e.g. ['patronus:hallucination']",
                required=False
            ),
            ToolParameter(
                name="output",
                type=ToolParameterType.STRING,
                description="The text to evaluate",
                required=True,
                min_length=1
            ),
            ToolParameter(
                name="input",
                type=ToolParameterType.STRING,
                description="The prompt or question that produced the output",
                required=False
            ),
            ToolParameter(
                name="context",
                type=ToolParameterType.ARRAY,
                description="Retrieved context passages the output should be grounded in",
                required=False
            ),
            ToolParameter(
                name="gold_answer",
                type=ToolParameterType.STRING,
                description="Reference answer, if one exists",
                required=False
            ),
            ToolParameter(
                name="threshold",
                type=ToolParameterType.FLOAT,
                description="Minimum score counted as a pass; defaults to the configured threshold",
                required=False,
                min_value=0.0,
                max_value=1.0
            ),
            ToolParameter(
                name="tags",
                type=ToolParameterType.OBJECT,
                description="Key/value tags stored with the evaluation",
                required=False
            )
        ],
        output_schema={
            "type": "object",
            "properties": {
                "score": {"type": "number", "description": "Lowest normalized score across criteria (0.0-1.0)"},
                "pass_": {"type": "boolean", "description": "Whether every criterion met the threshold"},
                "explanation": {"type": "string", "description": "Evaluator explanations"},
                "threshold": {"type": "number", "description": "Threshold that was applied"},
                "results": {"type": "array", "description": "Per-criterion results"}
            },
            "required": ["score", "pass_", "threshold"]
        },
        examples=[
            {
                "description": "Check an answer for hallucination against retrieved context",
                "input": {
                    "evaluator": "lynx",
                    "criteria": ["patronus:hallucination"],
                    "input": "What was revenue in Q3?",
                    "output": "Revenue in Q3 was $4.2M.",
                    "context": ["Q3 revenue totalled $4.2 million."]
                },
                "output": {
                    "score": 0.94,
                    "pass_": True,
                    "threshold": 0.5
                }
            }
        ],
        tags=["evaluation", "scoring", "hallucination", "quality", "guardrails"]
    )


class EvaluatorTool(ServiceAdapter):
    """Tool adapter for the evaluation platform."""

    tool_name = "evaluator_tool"
    target_service = ServiceKind.EVALUATOR

    def __init__(
        self,
        config: Optional[EvaluatorConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
        **overrides: Any,
    ):
        super().__init__(config or EvaluatorConfig.resolve(**overrides), transport)
        self._schema = get_evaluator_tool_schema()
        self._client = ServiceHTTPClient(
            self.config.base_url,
            headers={"X-API-KEY": self.config.api_key, "Accept": "application/json"},
            transport=transport,
            service_name="evaluation platform",
        )

    @property
    def schema(self) -> ToolSchema:
        return self._schema

    def _execute(self, parameters: Dict[str, Any], timeout: float) -> Tuple[EvaluatorToolOutput, Dict[str, Any]]:
        evaluator = parameters["evaluator"]
        criteria: List[Optional[str]] = [str(c) for c in parameters.get("criteria") or []] or [None]
        threshold = parameters.get("threshold")
        if threshold is None:
            threshold = self.config.pass_threshold

        body: Dict[str, Any] = {
            "evaluators": [_evaluator_entry(evaluator, criterion) for criterion in criteria],
            "evaluated_model_output": parameters["output"],
            "capture": self.config.capture,
        }
        if parameters.get("input") is not None:
            body["evaluated_model_input"] = parameters["input"]
        if parameters.get("context") is not None:
            body["evaluated_model_retrieved_context"] = [str(c) for c in parameters["context"]]
        if parameters.get("gold_answer") is not None:
            body["evaluated_model_gold_answer"] = parameters["gold_answer"]
        if parameters.get("tags"):
            body["tags"] = parameters["tags"]

        logger.info(f"Evaluating output with '{evaluator}' against {len(criteria)} criteria (threshold {threshold})")
        data, response = self._client.post_json("v1/evaluate", body, timeout)

        output = normalize_evaluation(data, evaluator, threshold)
        logger.info(f"Evaluation finished: score={output.score:.3f}, pass={output.pass_}")

        return output, {
            "http_status": response.status_code,
            "evaluator": evaluator,
            "criteria_count": len(output.results),
        }


def _evaluator_entry(evaluator: str, criterion: Optional[str]) -> Dict[str, Any]:
    entry: Dict[str, Any] = {"evaluator": evaluator, "explain_strategy": "always"}
    if criterion:
        entry["criteria"] = criterion
    return entry


def normalize_evaluation(data: Dict[str, Any], evaluator: str, threshold: float) -> EvaluatorToolOutput:
    """
    Reduce an evaluation response to per-criterion and aggregate verdicts.

    Scores are clamped to [0, 1]. A result without a raw score scores 1.0
    when the platform passed it and 0.0 otherwise. ``pass_`` is always
    ``score >= threshold``; the aggregate takes the lowest score so the
    aggregate pass flag means every criterion passed.

    Raises:
        ServiceError: If the body has no results, or a result is malformed or failed to run
    """
    raw_results = data.get("results")
    if not isinstance(raw_results, list) or not raw_results:
        raise ServiceError("Evaluation platform response contained no results")

    results: List[CriterionEvaluation] = []
    for raw in raw_results:
        if not isinstance(raw, dict):
            raise ServiceError("Evaluation platform returned a malformed result entry")

        status = raw.get("status", "success")
        if status != "success":
            message = raw.get("error_message") or status
            raise ServiceError(f"Evaluation with '{raw.get('criteria') or evaluator}' failed: {message}")

        verdict = raw.get("evaluation_result") or {}
        if not isinstance(verdict, dict):
            raise ServiceError("Evaluation platform returned a malformed evaluation_result")
        service_pass = verdict.get("pass")
        score = _normalize_score(verdict.get("score_raw"), service_pass)

        try:
            results.append(CriterionEvaluation(
                evaluator=raw.get("evaluator_id") or verdict.get("evaluator_id") or evaluator,
                criteria=raw.get("criteria") or verdict.get("criteria"),
                score=score,
                pass_=score >= threshold,
                explanation=verdict.get("explanation"),
                service_pass=service_pass if isinstance(service_pass, bool) else None,
            ))
        except PydanticValidationError as e:
            raise ServiceError(f"Evaluation platform returned a malformed result: {e}") from e

    aggregate = min(r.score for r in results)
    explanations = [r.explanation for r in results if r.explanation]

    return EvaluatorToolOutput(
        score=aggregate,
        pass_=aggregate >= threshold,
        explanation="\n".join(explanations) if explanations else None,
        threshold=threshold,
        results=results,
    )


def _normalize_score(score_raw: Any, service_pass: Any) -> float:
    if isinstance(score_raw, bool) or not isinstance(score_raw, (int, float)):
        return 1.0 if service_pass is True else 0.0
    return min(1.0, max(0.0, float(score_raw)))
