from __future__ import annotations
import json
import logging
import threading
from enum import Enum
from typing import Optional, Set
from .export import serialize_document
from .fix_selection import FixSelection
from .models import AnalysisResult, JsonValue
from .patcher import apply_patches
logger = logging.getLogger(__name__)
EMPTY_INPUT_MESSAGE = "JSON input cannot be empty."
INVALID_JSON_MESSAGE = "Invalid JSON format. Please check your input."
REVOKED_KEY_MARKER = "Requested entity was not found"
REVOKED_KEY_MESSAGE = (
    "The selected API key is invalid or has been revoked. Please select a different key."
)
UNKNOWN_ERROR_MESSAGE = "An unknown error occurred."
class InputError(ValueError):
    """Raised when submitted text is not a usable workflow document."""
class SessionStateError(RuntimeError):
    """Raised when an action is not allowed in the current stage."""
class Stage(str, Enum):
    INPUT = "input"
    ANALYZING = "analyzing"
    RESULTS = "results"
def parse_workflow_text(text: Optional[str]) -> JsonValue:
    if not text or not text.strip():
        raise InputError(EMPTY_INPUT_MESSAGE)
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise InputError(INVALID_JSON_MESSAGE) from exc
class AnalysisSession:
    """State of one browser session: input text, document, analysis and fixes.

    ``submit`` hands out a generation number for the analysis it starts.
    ``complete`` and ``fail`` only take effect for the latest generation
    while the session is still analyzing, so a late response can never
    overwrite a newer interaction.
    """
    def __init__(self, *, has_credential: bool = False) -> None:
        self._lock = threading.RLock()
        self.stage = Stage.INPUT
        self.raw_text = ""
        self.document: JsonValue = None
        self.result: Optional[AnalysisResult] = None
        self.error: Optional[str] = None
        self.fixes = FixSelection()
        self.open_sections: Set[str] = set()
        self.has_credential = has_credential
        self.generation = 0
    def submit(self, text: str) -> Optional[int]:
        with self._lock:
            if not self.has_credential:
                raise SessionStateError("An API key must be selected before analyzing.")
            if self.stage is not Stage.INPUT:
                raise SessionStateError(f"Cannot start an analysis while in the {self.stage.value} stage.")
            self.raw_text = text or ""
            try:
                document = parse_workflow_text(text)
            except InputError as exc:
                self.error = str(exc)
                return None
            self.document = document
            self.result = None
            self.error = None
            self.fixes.reset()
            self.open_sections.clear()
            self.generation += 1
            self.stage = Stage.ANALYZING
            logger.info("Analysis %d started (%d chars)", self.generation, len(self.raw_text))
            return self.generation
    def _is_current(self, generation: int) -> bool:
        if generation != self.generation or self.stage is not Stage.ANALYZING:
            logger.warning(
                "Discarding stale analysis %d (current=%d, stage=%s)",
                generation,
                self.generation,
                self.stage.value,
            )
            return False
        return True
    def complete(self, generation: int, result: AnalysisResult) -> bool:
        with self._lock:
            if not self._is_current(generation):
                return False
            self.result = result
            self.error = None
            self.fixes.reset()
            self.stage = Stage.RESULTS
            logger.info("Analysis %d finished with %d issue(s)", generation, len(result.errors))
            return True
    def fail(self, generation: int, message: Optional[str]) -> bool:
        with self._lock:
            if not self._is_current(generation):
                return False
            message = message or UNKNOWN_ERROR_MESSAGE
            if REVOKED_KEY_MARKER in message:
                self.error = REVOKED_KEY_MESSAGE
                self.has_credential = False
            else:
                self.error = message
            self.stage = Stage.INPUT
            logger.info("Analysis %d failed: %s", generation, message)
            return True
    def start_over(self) -> None:
        with self._lock:
            if self.stage is Stage.ANALYZING:
                # bump so the pending response is discarded when it lands
                self.generation += 1
            self.document = None
            self.result = None
            self.fixes.reset()
            self.open_sections.clear()
            self.stage = Stage.INPUT
    def report_error(self, message: str, *, raw_text: Optional[str] = None) -> None:
        """Show ``message`` on the input screen, optionally keeping the rejected text."""
        with self._lock:
            if raw_text is not None and self.stage is Stage.INPUT:
                self.raw_text = raw_text
            self.error = message
    def credential_selected(self) -> None:
        with self._lock:
            self.has_credential = True
            self.error = None
    def credential_rejected(self) -> None:
        with self._lock:
            self.has_credential = False
    def toggle_fix(self, issue_id: str) -> bool:
        with self._lock:
            return self.fixes.toggle(issue_id)
    def approve_all_fixes(self) -> None:
        with self._lock:
            if self.result is None:
                return
            self.fixes.approve_all(self.result.errors)
    def toggle_section(self, section_id: str) -> bool:
        with self._lock:
            if section_id in self.open_sections:
                self.open_sections.discard(section_id)
                return False
            self.open_sections.add(section_id)
            return True
    def corrected_document(self) -> Optional[JsonValue]:
        with self._lock:
            if self.result is None:
                return None
            return apply_patches(self.document, self.result.errors, self.fixes.ids)
    def corrected_json(self) -> Optional[str]:
        document = self.corrected_document()
        if document is None:
            return None
        return serialize_document(document)
