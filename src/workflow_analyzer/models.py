from __future__ import annotations
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple, Union
JsonValue = Union[None, bool, int, float, str, List["JsonValue"], Dict[str, "JsonValue"]]
class AnalyzerError(Exception):
    """Raised when the workflow could not be analyzed."""
class Severity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"
    @classmethod
    def parse(cls, value: Any) -> "Severity":
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return cls.INFO
def _text(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)
def reparse_value(value: Any) -> JsonValue:
    """Decode a stringified JSON value, keeping the raw string when it is not JSON."""
    if not isinstance(value, str):
        return value
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value
@dataclass(frozen=True)
class Patch:
    path: str
    new_value: JsonValue = None
    requires_user_input: bool = False
    @classmethod
    def from_payload(cls, data: Any) -> "Patch":
        if not isinstance(data, dict):
            return cls(path="")
        return cls(
            path=_text(data, "path"),
            new_value=reparse_value(data.get("newValue")),
            requires_user_input=bool(data.get("requiresUserInput", False)),
        )
    def to_payload(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "newValue": self.new_value,
            "requiresUserInput": self.requires_user_input,
        }
@dataclass(frozen=True)
class IssueRecord:
    id: str
    severity: Severity
    description: str
    impact: str
    recommendation: str
    patch: Patch
    node_id: Optional[str] = None
    @property
    def auto_fixable(self) -> bool:
        return not self.patch.requires_user_input
    @classmethod
    def from_payload(cls, data: Dict[str, Any], position: int) -> "IssueRecord":
        issue_id = _text(data, "id").strip() or f"issue-{position}"
        node_id = _text(data, "nodeId") or None
        return cls(
            id=issue_id,
            severity=Severity.parse(data.get("severity")),
            description=_text(data, "description"),
            impact=_text(data, "impact"),
            recommendation=_text(data, "recommendation"),
            patch=Patch.from_payload(data.get("jsonModification")),
            node_id=node_id,
        )
    def to_payload(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "severity": self.severity.value,
            "description": self.description,
            "impact": self.impact,
            "nodeId": self.node_id,
            "recommendation": self.recommendation,
            "jsonModification": self.patch.to_payload(),
        }
@dataclass(frozen=True)
class NodeBreakdown:
    node_id: str
    node_name: str
    purpose: str = ""
    required_inputs: str = ""
    configuration_needs: str = ""
    output: str = ""
    visual_metaphor: str = ""
    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "NodeBreakdown":
        return cls(
            node_id=_text(data, "nodeId"),
            node_name=_text(data, "nodeName"),
            purpose=_text(data, "purpose"),
            required_inputs=_text(data, "requiredInputs"),
            configuration_needs=_text(data, "configurationNeeds"),
            output=_text(data, "output"),
            visual_metaphor=_text(data, "visualMetaphor"),
        )
    def to_payload(self) -> Dict[str, Any]:
        return {
            "nodeId": self.node_id,
            "nodeName": self.node_name,
            "purpose": self.purpose,
            "requiredInputs": self.required_inputs,
            "configurationNeeds": self.configuration_needs,
            "output": self.output,
            "visualMetaphor": self.visual_metaphor,
        }
@dataclass(frozen=True)
class Summary:
    accomplishment: str = ""
    trigger: str = ""
    final_outcome: str = ""
    analogy: str = ""
    @classmethod
    def from_payload(cls, data: Any) -> "Summary":
        if not isinstance(data, dict):
            return cls()
        return cls(
            accomplishment=_text(data, "accomplishment"),
            trigger=_text(data, "trigger"),
            final_outcome=_text(data, "finalOutcome"),
            analogy=_text(data, "analogy"),
        )
@dataclass(frozen=True)
class AnalysisResult:
    is_valid: bool = False
    summary: Summary = field(default_factory=Summary)
    text_flow: str = ""
    node_breakdowns: Tuple[NodeBreakdown, ...] = ()
    errors: Tuple[IssueRecord, ...] = ()
    @classmethod
    def from_payload(cls, payload: Any) -> "AnalysisResult":
        if not isinstance(payload, dict):
            raise AnalyzerError("Analysis response must be a JSON object.")
        raw_errors = payload.get("errors") or []
        raw_nodes = payload.get("nodeBreakdowns") or []
        if not isinstance(raw_errors, list) or not isinstance(raw_nodes, list):
            raise AnalyzerError("Analysis response has malformed 'errors' or 'nodeBreakdowns'.")
        errors = tuple(
            IssueRecord.from_payload(item, idx)
            for idx, item in enumerate(raw_errors, start=1)
            if isinstance(item, dict)
        )
        nodes = tuple(NodeBreakdown.from_payload(item) for item in raw_nodes if isinstance(item, dict))
        return cls(
            is_valid=bool(payload.get("isValid", False)),
            summary=Summary.from_payload(payload.get("summary")),
            text_flow=_text(payload, "textFlow"),
            node_breakdowns=nodes,
            errors=errors,
        )
    def issue(self, issue_id: str) -> Optional[IssueRecord]:
        return next((item for item in self.errors if item.id == issue_id), None)
    def auto_fixable_ids(self) -> FrozenSet[str]:
        return frozenset(item.id for item in self.errors if item.auto_fixable)
    def to_payload(self) -> Dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "summary": {
                "accomplishment": self.summary.accomplishment,
                "trigger": self.summary.trigger,
                "finalOutcome": self.summary.final_outcome,
                "analogy": self.summary.analogy,
            },
            "textFlow": self.text_flow,
            "nodeBreakdowns": [node.to_payload() for node in self.node_breakdowns],
            "errors": [issue.to_payload() for issue in self.errors],
        }
