"""Analysis payload post-processing tests."""

from __future__ import annotations

import pytest

from workflow_analyzer.models import AnalysisResult, AnalyzerError, Severity, reparse_value


def test_empty_node_id_becomes_none(analysis_result) -> None:
    issue = analysis_result.issue("err-connections")
    assert issue is not None
    assert issue.node_id is None
    assert analysis_result.issue("err-channel").node_id == "2"


def test_new_value_is_reparsed_as_json(analysis_result) -> None:
    issue = analysis_result.issue("err-connections")
    assert issue.patch.new_value == {
        "main": [[{"node": "Send Slack", "type": "main", "index": 0}]]
    }


def test_new_value_falls_back_to_raw_string(analysis_result) -> None:
    assert analysis_result.issue("err-channel").patch.new_value == "#orders"
    assert analysis_result.issue("err-token").patch.requires_user_input is True


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("5", 5), ("true", True), ("null", None), ('"quoted"', "quoted"), ("plain text", "plain text"), (7, 7)],
)
def test_reparse_value(raw, expected) -> None:
    assert reparse_value(raw) == expected


def test_summary_and_breakdowns_are_mapped(analysis_result) -> None:
    assert analysis_result.summary.final_outcome == "A Slack message."
    assert analysis_result.text_flow == "Webhook -> Send Slack"
    node = analysis_result.node_breakdowns[0]
    assert node.node_name == "Webhook"
    assert node.visual_metaphor == "A mailbox"


def test_unknown_severity_is_info() -> None:
    result = AnalysisResult.from_payload(
        {"errors": [{"id": "x", "severity": "Catastrophic", "jsonModification": {"path": "a"}}]}
    )
    assert result.errors[0].severity is Severity.INFO
    assert Severity.parse("WARNING") is Severity.WARNING


def test_missing_fields_get_defaults() -> None:
    result = AnalysisResult.from_payload({"errors": [{"description": "no id"}]})
    issue = result.errors[0]
    assert issue.id == "issue-1"
    assert issue.patch.path == ""
    assert issue.patch.requires_user_input is False
    assert result.summary.accomplishment == ""
    assert result.node_breakdowns == ()


def test_non_object_payload_is_rejected() -> None:
    with pytest.raises(AnalyzerError):
        AnalysisResult.from_payload(["not", "an", "object"])
    with pytest.raises(AnalyzerError):
        AnalysisResult.from_payload({"errors": "nope"})


def test_to_payload_round_trips_wire_keys(analysis_result) -> None:
    payload = analysis_result.to_payload()
    assert set(payload) == {"isValid", "summary", "textFlow", "nodeBreakdowns", "errors"}
    assert payload["errors"][0]["jsonModification"]["path"] == "nodes[1].parameters.channel"
