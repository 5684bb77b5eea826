"""Workflow analyzer tests with a stubbed model."""

from __future__ import annotations

import json

import pytest

from workflow_analyzer.analyzer import (
    GENERIC_FAILURE_MESSAGE,
    WorkflowAnalyzer,
    describe_failure,
    strip_code_fence,
)
from workflow_analyzer.gemini_client import GeminiError
from workflow_analyzer.models import AnalyzerError
from workflow_analyzer.prompt_builder import ANALYSIS_SCHEMA, build_analysis_prompt


def test_strip_code_fence() -> None:
    assert strip_code_fence('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fence('```\n{"a": 1}```') == '{"a": 1}'
    assert strip_code_fence('  {"a": 1}  ') == '{"a": 1}'
    assert strip_code_fence("") == ""


def test_analyze_parses_fenced_reply(analysis_payload) -> None:
    prompts: list[str] = []

    def fake_llm(prompt: str) -> str:
        prompts.append(prompt)
        return "```json\n" + json.dumps(analysis_payload) + "\n```"

    analyzer = WorkflowAnalyzer(llm_callable=fake_llm)
    result = analyzer.analyze('{"nodes": []}')
    assert [issue.id for issue in result.errors] == ["err-channel", "err-connections", "err-token"]
    assert '{"nodes": []}' in prompts[0]
    assert "requiresUserInput" in prompts[0]


def test_unparseable_reply_is_analyzer_error() -> None:
    analyzer = WorkflowAnalyzer(llm_callable=lambda _prompt: "Sorry, I cannot help.")
    with pytest.raises(AnalyzerError, match="Error analyzing workflow with Gemini"):
        analyzer.analyze("{}")


def test_gemini_error_message_is_wrapped() -> None:
    def failing(_prompt: str) -> str:
        raise GeminiError("Requested entity was not found.", status="NOT_FOUND", code=404)

    analyzer = WorkflowAnalyzer(llm_callable=failing)
    with pytest.raises(AnalyzerError) as excinfo:
        analyzer.analyze("{}")
    assert str(excinfo.value) == "Error analyzing workflow with Gemini: Requested entity was not found."


def test_describe_failure_variants() -> None:
    assert describe_failure(GeminiError("", status="UNAVAILABLE", code=503)) == (
        "Error analyzing workflow with Gemini: UNAVAILABLE (Code: 503)"
    )
    assert describe_failure(GeminiError("", status="UNAVAILABLE")) == (
        "Error analyzing workflow with Gemini: UNAVAILABLE (Code: N/A)"
    )
    assert describe_failure(RuntimeError()) == GENERIC_FAILURE_MESSAGE


def test_analyzer_requires_backend() -> None:
    with pytest.raises(ValueError):
        WorkflowAnalyzer()


def test_analyzer_uses_client_with_schema(analysis_payload) -> None:
    calls: list[dict] = []

    class FakeClient:
        def generate_content(self, prompt, *, model=None, response_schema=None):
            calls.append({"model": model, "schema": response_schema})
            return json.dumps(analysis_payload)

    analyzer = WorkflowAnalyzer(FakeClient(), model="gemini-test")
    analyzer.analyze("{}")
    assert calls == [{"model": "gemini-test", "schema": ANALYSIS_SCHEMA}]


def test_schema_keeps_fixed_top_level_keys() -> None:
    assert set(ANALYSIS_SCHEMA["properties"]) == {
        "isValid",
        "summary",
        "textFlow",
        "nodeBreakdowns",
        "errors",
    }
    modification = ANALYSIS_SCHEMA["properties"]["errors"]["items"]["properties"]["jsonModification"]
    assert modification["properties"]["newValue"] == {"type": "STRING"}


def test_prompt_embeds_workflow_in_fence() -> None:
    prompt = build_analysis_prompt('  {"x": 1}\n')
    assert prompt.endswith('```json\n{"x": 1}\n```')


def test_analyzer_without_backend_reports_error() -> None:
    analyzer = WorkflowAnalyzer(llm_callable=lambda _p: "{}")
    analyzer.llm_callable = None
    with pytest.raises(AnalyzerError, match="No Gemini client is configured"):
        analyzer.analyze("{}")
