from __future__ import annotations
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib import error, parse, request
logger = logging.getLogger(__name__)
class GeminiError(Exception):
    """Raised when the Gemini service cannot return a completion."""
    def __init__(
        self,
        message: str = "",
        *,
        status: Optional[str] = None,
        code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code
@dataclass
class GeminiClient:
    api_key: str
    base_url: str = "https://generativelanguage.googleapis.com"
    api_version: str = "v1beta"
    model: str = "gemini-2.5-flash"
    timeout: float = 120.0
    def generate_content(
        self,
        prompt: str,
        *,
        model: Optional[str] = None,
        response_schema: Optional[Dict[str, Any]] = None,
    ) -> str:
        if not self.api_key:
            raise GeminiError(
                "API key is not configured. Please select an API key or set GEMINI_API_KEY."
            )
        if not prompt or not prompt.strip():
            raise GeminiError("Prompt is empty; supply a workflow to analyze.")
        model_name = model or self.model
        url = (
            f"{self.base_url.rstrip('/')}/{self.api_version}/models/"
            f"{parse.quote(model_name, safe='')}:generateContent"
        )
        generation_config: Dict[str, Any] = {"responseMimeType": "application/json"}
        if response_schema is not None:
            generation_config["responseSchema"] = response_schema
        payload_body = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": generation_config,
        }
        headers = {
            "Content-Type": "application/json",
            "x-goog-api-key": self.api_key,
        }
        logger.debug("Gemini request: url=%s model=%s", url, model_name)
        req = request.Request(
            url,
            data=json.dumps(payload_body).encode("utf-8"),
            headers=headers,
            method="POST",
        )
        try:
            with request.urlopen(req, timeout=self.timeout) as resp:  # nosec: B310
                body = resp.read().decode("utf-8")
        except error.HTTPError as exc:
            raise self._error_from_http(exc) from exc
        except error.URLError as exc:  # pragma: no cover - network
            raise GeminiError(f"Gemini connection error: {exc.reason}") from exc
        except TimeoutError as exc:  # pragma: no cover - network
            raise GeminiError(f"Gemini request timed out after {self.timeout:g}s.") from exc
        logger.debug("Gemini response body: %s", body)
        return self._extract_text(body)
    @staticmethod
    def _extract_text(body: str) -> str:
        try:
            data = json.loads(body)
        except json.JSONDecodeError as exc:
            raise GeminiError("Unexpected Gemini response format.") from exc
        candidates = data.get("candidates") if isinstance(data, dict) else None
        if isinstance(candidates, list) and candidates:
            first = candidates[0]
            content = first.get("content") if isinstance(first, dict) else None
            parts = content.get("parts") if isinstance(content, dict) else None
            if isinstance(parts, list):
                text = "".join(
                    part["text"]
                    for part in parts
                    if isinstance(part, dict) and isinstance(part.get("text"), str)
                )
                if text.strip():
                    return text
        feedback = data.get("promptFeedback") if isinstance(data, dict) else None
        if isinstance(feedback, dict) and feedback.get("blockReason"):
            raise GeminiError(f"Prompt was blocked by Gemini: {feedback['blockReason']}")
        raise GeminiError("Unexpected Gemini response format.")
    @staticmethod
    def _error_from_http(exc: error.HTTPError) -> GeminiError:
        raw = ""
        try:
            raw = (exc.read() or b"").decode("utf-8", errors="ignore").strip()
        except Exception:
            raw = ""
        details: Dict[str, Any] = {}
        if raw:
            try:
                parsed = json.loads(raw)
            except json.JSONDecodeError:
                parsed = None
            if isinstance(parsed, dict):
                nested = parsed.get("error", parsed)
                if isinstance(nested, dict):
                    details = nested
        message = details.get("message") if isinstance(details.get("message"), str) else ""
        status = details.get("status") or None
        code = details.get("code", exc.code)
        if not message and not status:
            message = f"Gemini request failed ({exc.code}): {exc.reason}"
            if raw:
                message += f" Response body: {raw[:500]}"
        return GeminiError(message, status=status, code=code)
