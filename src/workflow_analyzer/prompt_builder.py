from __future__ import annotations
from typing import Any, Dict
def _string() -> Dict[str, Any]:
    return {"type": "STRING"}
ANALYSIS_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "isValid": {"type": "BOOLEAN"},
        "summary": {
            "type": "OBJECT",
            "properties": {
                "accomplishment": _string(),
                "trigger": _string(),
                "finalOutcome": _string(),
                "analogy": _string(),
            },
        },
        "textFlow": _string(),
        "nodeBreakdowns": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "nodeId": _string(),
                    "nodeName": _string(),
                    "purpose": _string(),
                    "requiredInputs": _string(),
                    "configurationNeeds": _string(),
                    "output": _string(),
                    "visualMetaphor": _string(),
                },
            },
        },
        "errors": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "id": _string(),
                    "severity": _string(),
                    "description": _string(),
                    "impact": _string(),
                    "nodeId": _string(),
                    "recommendation": _string(),
                    "jsonModification": {
                        "type": "OBJECT",
                        "properties": {
                            "path": _string(),
                            # The wire contract only allows strings here; the
                            # value is decoded again after the response arrives.
                            "newValue": _string(),
                            "requiresUserInput": {"type": "BOOLEAN"},
                        },
                    },
                },
            },
        },
    },
}
ANALYST_RULES = [
    "You are an expert N8N workflow analyst and a friendly teacher. Your goal is to analyze "
    "the following N8N workflow and explain everything so a 12-year-old can understand it. "
    "Imagine you're explaining a cool machine, a video game level, or a recipe.",
    "**Your Main Rules:**",
    "1. **Explain Simply:** Use simple words, short sentences, and fun analogies for EVERYTHING "
    "(the overall summary, each node's purpose, and every error description and recommendation). "
    "Avoid jargon.",
    "2. **Analyze the Workflow:** Check if the JSON is correct, see how the steps connect, find any "
    "mistakes, and identify orphaned or unreachable nodes.",
    "3. **Find & Fix Problems:** For every problem you find, explain what's wrong, why it's a problem, "
    "and how to fix it, all in simple terms. Give each problem a unique ID. If the error is not "
    "specific to a node, return an empty string \"\" for the 'nodeId' field.",
    "4. **Smart Fixes (This is SUPER important!):**\n"
    "   * **Automatic Fixes:** For most technical problems, like a missing setting, a typo, or a "
    "logical error that can be inferred, you should figure out the correct value yourself and "
    "suggest the fix. For these, set 'requiresUserInput' to 'false'.\n"
    "   * **Manual Fixes (Only for Secrets!):** If a fix requires a secret password, API key, "
    "credential, or a special ID that only the user would know, you MUST set 'requiresUserInput' "
    "to 'true'. For the fix, use a clear placeholder in 'newValue' like "
    "\"<PASTE_YOUR_SECRET_API_KEY_HERE>\". Do not ask for manual input for anything else.",
    "5. **Stringify 'newValue':** The 'newValue' for your fix must ALWAYS be a string. If the fix is "
    "a number like 5, make it the string \"5\". If it's an object like {\"name\": \"Bot\"}, make it "
    "the string \"{\\\"name\\\": \\\"Bot\\\"}\". This is a strict rule and is not optional.",
    "6. **Give a Summary:** Explain what the whole workflow does, what kicks it off, and what "
    "happens at the end.",
    "7. **Show the Flow:** Create a simple text map of the workflow steps using arrows (->).",
    "8. **Paths:** 'path' must locate the value to change inside the workflow JSON using dots for "
    "keys and [n] for list positions, e.g. nodes[2].parameters.url.",
]
def build_analysis_prompt(workflow_json: str) -> str:
    prompt_sections = list(ANALYST_RULES)
    prompt_sections.append("**Input Workflow JSON:**\n```json\n" + workflow_json.strip() + "\n```")
    return "\n\n".join(prompt_sections)
