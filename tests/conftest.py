"""Shared fixtures for workflow analyzer tests."""

from __future__ import annotations

import json
from typing import Any, Dict

import pytest

from workflow_analyzer.models import AnalysisResult


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep telemetry and API keys from leaking between tests and the host."""
    monkeypatch.setenv("TELEMETRY_DIR", str(tmp_path / "telemetry"))
    for name in ("GEMINI_API_KEY", "API_KEY", "GEMINI_MODEL", "GEMINI_BASE_URL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def workflow_document() -> Dict[str, Any]:
    return {
        "meta": {"instanceId": "abc"},
        "nodes": [
            {
                "id": "1",
                "name": "Webhook",
                "type": "n8n-nodes-base.webhook",
                "parameters": {"path": "orders"},
            },
            {
                "id": "2",
                "name": "Send Slack",
                "type": "n8n-nodes-base.slack",
                "parameters": {"channel": ""},
            },
        ],
        "connections": {},
    }


@pytest.fixture
def analysis_payload() -> Dict[str, Any]:
    return {
        "isValid": False,
        "summary": {
            "accomplishment": "Posts new orders to Slack.",
            "trigger": "A webhook call.",
            "finalOutcome": "A Slack message.",
            "analogy": "A doorbell that rings a bell in another room.",
        },
        "textFlow": "Webhook -> Send Slack",
        "nodeBreakdowns": [
            {
                "nodeId": "1",
                "nodeName": "Webhook",
                "purpose": "Listens for orders.",
                "requiredInputs": "HTTP POST",
                "configurationNeeds": "A path",
                "output": "Order data",
                "visualMetaphor": "A mailbox",
            }
        ],
        "errors": [
            {
                "id": "err-channel",
                "severity": "critical",
                "description": "The Slack channel is empty.",
                "impact": "Messages go nowhere.",
                "nodeId": "2",
                "recommendation": "Set the channel.",
                "jsonModification": {
                    "path": "nodes[1].parameters.channel",
                    "newValue": "#orders",
                    "requiresUserInput": False,
                },
            },
            {
                "id": "err-connections",
                "severity": "warning",
                "description": "The nodes are not connected.",
                "impact": "Slack never runs.",
                "nodeId": "",
                "recommendation": "Connect Webhook to Send Slack.",
                "jsonModification": {
                    "path": "connections.Webhook",
                    "newValue": json.dumps(
                        {"main": [[{"node": "Send Slack", "type": "main", "index": 0}]]}
                    ),
                    "requiresUserInput": False,
                },
            },
            {
                "id": "err-token",
                "severity": "info",
                "description": "Slack needs a token.",
                "impact": "Authentication fails.",
                "nodeId": "2",
                "recommendation": "Paste your token.",
                "jsonModification": {
                    "path": "nodes[1].credentials.slackApi.token",
                    "newValue": "<PASTE_YOUR_SECRET_API_KEY_HERE>",
                    "requiresUserInput": True,
                },
            },
        ],
    }


@pytest.fixture
def analysis_result(analysis_payload) -> AnalysisResult:
    return AnalysisResult.from_payload(analysis_payload)
