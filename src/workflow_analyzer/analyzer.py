from __future__ import annotations
import json
import logging
import re
from typing import Callable, Optional
from .gemini_client import GeminiClient, GeminiError
from .models import AnalysisResult, AnalyzerError
from .prompt_builder import ANALYSIS_SCHEMA, build_analysis_prompt
logger = logging.getLogger(__name__)
LLMCallable = Callable[[str], str]
GENERIC_FAILURE_MESSAGE = "An unexpected error occurred while analyzing the workflow."
FAILURE_PREFIX = "Error analyzing workflow with Gemini"
_FENCE_START = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_END = re.compile(r"\s*```$")
def strip_code_fence(reply: str) -> str:
    if not reply:
        return ""
    s = reply.strip()
    s = _FENCE_START.sub("", s)
    s = _FENCE_END.sub("", s)
    return s.strip()
def describe_failure(exc: BaseException) -> str:
    message = getattr(exc, "message", None)
    if not isinstance(message, str) or not message:
        message = str(exc)
    if message:
        return f"{FAILURE_PREFIX}: {message}"
    status = getattr(exc, "status", None)
    if status:
        code = getattr(exc, "code", None)
        return f"{FAILURE_PREFIX}: {status} (Code: {code if code is not None else 'N/A'})"
    return GENERIC_FAILURE_MESSAGE
class WorkflowAnalyzer:
    """Sends a workflow to Gemini and turns the reply into an AnalysisResult.

    Pass ``llm_callable`` to bypass the HTTP client (the callable gets the
    full prompt and returns the raw model text).
    """
    def __init__(
        self,
        client: Optional[GeminiClient] = None,
        *,
        llm_callable: Optional[LLMCallable] = None,
        model: Optional[str] = None,
    ) -> None:
        if client is None and llm_callable is None:
            raise ValueError("WorkflowAnalyzer needs a GeminiClient or an llm_callable.")
        self.client = client
        self.llm_callable = llm_callable
        self.model = model
    def _complete(self, prompt: str) -> str:
        if self.llm_callable is not None:
            return self.llm_callable(prompt)
        if self.client is None:
            raise AnalyzerError("No Gemini client is configured.")
        return self.client.generate_content(
            prompt, model=self.model, response_schema=ANALYSIS_SCHEMA
        )
    def analyze(self, workflow_json: str) -> AnalysisResult:
        prompt = build_analysis_prompt(workflow_json)
        try:
            reply = self._complete(prompt)
            payload = json.loads(strip_code_fence(reply))
            return AnalysisResult.from_payload(payload)
        except (GeminiError, AnalyzerError, json.JSONDecodeError) as exc:
            logger.error("Error analyzing workflow with Gemini: %s", exc)
            raise AnalyzerError(describe_failure(exc)) from exc
