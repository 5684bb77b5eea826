from .analyzer import WorkflowAnalyzer, describe_failure, strip_code_fence
from .export import DEFAULT_EXPORT_NAME, export_bytes, serialize_document, write_export
from .fix_selection import FixSelection
from .gemini_client import GeminiClient, GeminiError
from .models import (
    AnalysisResult,
    AnalyzerError,
    IssueRecord,
    JsonValue,
    NodeBreakdown,
    Patch,
    Severity,
    Summary,
)
from .patcher import apply_patches, parse_path, set_path
from .prompt_builder import ANALYSIS_SCHEMA, build_analysis_prompt
from .session import AnalysisSession, InputError, SessionStateError, Stage, parse_workflow_text
__all__ = [
    "ANALYSIS_SCHEMA",
    "AnalysisResult",
    "AnalysisSession",
    "AnalyzerError",
    "DEFAULT_EXPORT_NAME",
    "FixSelection",
    "GeminiClient",
    "GeminiError",
    "InputError",
    "IssueRecord",
    "JsonValue",
    "NodeBreakdown",
    "Patch",
    "SessionStateError",
    "Severity",
    "Stage",
    "Summary",
    "WorkflowAnalyzer",
    "apply_patches",
    "build_analysis_prompt",
    "describe_failure",
    "export_bytes",
    "parse_path",
    "parse_workflow_text",
    "serialize_document",
    "set_path",
    "strip_code_fence",
    "write_export",
]
__version__ = "2026.10.1"
