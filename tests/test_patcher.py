"""Document patcher tests."""

from __future__ import annotations

import copy
import json

from workflow_analyzer.export import serialize_document
from workflow_analyzer.models import IssueRecord, Patch, Severity
from workflow_analyzer.patcher import apply_patches, parse_path, set_path


def _issue(issue_id: str, path: str, value, requires_input: bool = False) -> IssueRecord:
    return IssueRecord(
        id=issue_id,
        severity=Severity.WARNING,
        description="",
        impact="",
        recommendation="",
        patch=Patch(path=path, new_value=value, requires_user_input=requires_input),
    )


def test_parse_path_handles_dots_brackets_and_quotes() -> None:
    assert parse_path("a.b") == ["a", "b"]
    assert parse_path("nodes[0].parameters.url") == ["nodes", 0, "parameters", "url"]
    assert parse_path("a['odd.key'].c") == ["a", "odd.key", "c"]
    assert parse_path('a["x"][2]') == ["a", "x", 2]
    assert parse_path("a.0") == ["a", 0]
    assert parse_path("a[-1]") == ["a", "-1"]
    assert parse_path("") == []


def test_apply_replaces_existing_value() -> None:
    result = apply_patches({"a": {"b": 1}}, [_issue("1", "a.b", 2)], {"1"})
    assert result == {"a": {"b": 2}}


def test_apply_creates_missing_objects() -> None:
    result = apply_patches({}, [_issue("1", "x.y", "z")], {"1"})
    assert result == {"x": {"y": "z"}}


def test_set_path_creates_lists_for_index_segments() -> None:
    document: dict = {}
    set_path(document, "items[2].name", "third")
    assert document == {"items": [None, None, {"name": "third"}]}


def test_set_path_replaces_primitive_on_the_way() -> None:
    document = {"a": 5}
    set_path(document, "a.b", True)
    assert document == {"a": {"b": True}}


def test_set_path_skips_name_segment_on_list() -> None:
    document = {"nodes": [{"id": "1"}]}
    set_path(document, "nodes.first", 1)
    assert document == {"nodes": [{"id": "1"}]}


def test_apply_does_not_mutate_original(workflow_document, analysis_result) -> None:
    before = copy.deepcopy(workflow_document)
    approved = {issue.id for issue in analysis_result.errors}
    corrected = apply_patches(workflow_document, analysis_result.errors, approved)
    assert workflow_document == before
    assert corrected != before
    assert corrected["nodes"][1]["parameters"]["channel"] == "#orders"
    assert corrected["connections"]["Webhook"]["main"][0][0]["node"] == "Send Slack"


def test_apply_only_uses_approved_ids(workflow_document, analysis_result) -> None:
    corrected = apply_patches(workflow_document, analysis_result.errors, {"err-channel"})
    assert corrected["nodes"][1]["parameters"]["channel"] == "#orders"
    assert corrected["connections"] == {}


def test_apply_last_write_wins() -> None:
    issues = [_issue("1", "a", "first"), _issue("2", "a", "second")]
    assert apply_patches({}, issues, {"1", "2"}) == {"a": "second"}
    assert apply_patches({}, issues, {"1"}) == {"a": "first"}


def test_apply_is_deterministic(workflow_document, analysis_result) -> None:
    approved = {"err-channel", "err-connections"}
    first = serialize_document(apply_patches(workflow_document, analysis_result.errors, approved))
    second = serialize_document(apply_patches(workflow_document, analysis_result.errors, approved))
    assert first == second


def test_apply_result_does_not_alias_patch_values() -> None:
    issue = _issue("1", "config", {"retries": 3})
    corrected = apply_patches({}, [issue], {"1"})
    corrected["config"]["retries"] = 99
    assert issue.patch.new_value == {"retries": 3}


def test_apply_returns_none_without_document_or_result() -> None:
    assert apply_patches(None, [_issue("1", "a", 1)], {"1"}) is None
    assert apply_patches({"a": 1}, None, {"1"}) is None


def test_apply_without_approvals_returns_equal_copy(workflow_document, analysis_result) -> None:
    corrected = apply_patches(workflow_document, analysis_result.errors, set())
    assert corrected == workflow_document
    assert corrected is not workflow_document
    assert json.loads(serialize_document(corrected)) == workflow_document
