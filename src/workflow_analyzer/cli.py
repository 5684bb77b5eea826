from __future__ import annotations
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional
from .analyzer import WorkflowAnalyzer, describe_failure
from .credentials import has_api_key, resolve_credentials
from .document_loader import UnsupportedFileError, load_workflow_text
from .export import DEFAULT_EXPORT_NAME, write_export
from .gemini_client import GeminiClient
from .models import AnalysisResult, AnalyzerError
from .session import AnalysisSession
from .telemetry import Timer, log_event
from . import __version__ as APP_VERSION
logger = logging.getLogger(__name__)
def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Explain an n8n workflow and apply suggested fixes")
    parser.add_argument("workflow", type=Path, help="Path to the workflow .json export")
    parser.add_argument("--output", "-o", type=Path, help="Where to write the corrected workflow")
    parser.add_argument("--approve-all", action="store_true", help="Apply every fix that needs no manual input")
    parser.add_argument("--fix", action="append", default=[], metavar="ID", help="Apply the fix for this issue id (repeatable)")
    parser.add_argument("--report", type=Path, help="Optional path to write the raw analysis as JSON")
    parser.add_argument("--model", help="Gemini model name (overrides GEMINI_MODEL)")
    return parser.parse_args(argv)
def format_report(result: AnalysisResult, session: AnalysisSession) -> str:
    lines = [
        f"What it does: {result.summary.accomplishment}",
        f"How it starts: {result.summary.trigger}",
        f"What's the result: {result.summary.final_outcome}",
        f"Analogy: {result.summary.analogy}",
        "",
        "Workflow path:",
        result.text_flow,
        "",
    ]
    if not result.errors:
        lines.append("No issues found! Your workflow looks clean and ready to go.")
    for issue in result.errors:
        if issue.patch.requires_user_input:
            status = "manual input required"
        elif issue.id in session.fixes:
            status = "fix applied"
        else:
            status = "fix available"
        node = f" [node {issue.node_id}]" if issue.node_id else ""
        lines.append(f"- {issue.severity.value.upper()} {issue.id}{node}: {issue.description} ({status})")
        lines.append(f"    Impact: {issue.impact}")
        lines.append(f"    Recommendation: {issue.recommendation}")
    return "\n".join(lines)
def run(args: argparse.Namespace, analyzer: Optional[WorkflowAnalyzer] = None) -> int:
    try:
        text = load_workflow_text(args.workflow)
    except (OSError, UnsupportedFileError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    if analyzer is None:
        creds = resolve_credentials()
        if not has_api_key(creds):
            print("error: no API key configured; set GEMINI_API_KEY", file=sys.stderr)
            return 2
        model = args.model or creds.model
        analyzer = WorkflowAnalyzer(
            GeminiClient(api_key=creds.api_key, base_url=creds.base_url, model=model),
            model=model,
        )
    session = AnalysisSession(has_credential=True)
    generation = session.submit(text)
    if generation is None:
        print(f"error: {session.error}", file=sys.stderr)
        return 2
    timer = Timer()
    try:
        result = analyzer.analyze(session.raw_text)
    except AnalyzerError as exc:
        message = str(exc)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unexpected failure while analyzing %s", args.workflow)
        message = describe_failure(exc)
    else:
        message = None
    if message is not None:
        session.fail(generation, message)
        log_event("analyze", action="cli", app_version=APP_VERSION, duration_ms=timer.ms(), success=False, error=message)
        print(f"error: {session.error}", file=sys.stderr)
        return 1
    session.complete(generation, result)
    log_event(
        "analyze",
        action="cli",
        app_version=APP_VERSION,
        duration_ms=timer.ms(),
        payload={"issues": len(result.errors)},
    )
    if args.approve_all:
        session.approve_all_fixes()
    for issue_id in args.fix:
        issue = result.issue(issue_id)
        if issue is None:
            print(f"warning: no issue with id {issue_id!r}", file=sys.stderr)
            continue
        if issue.patch.requires_user_input:
            print(f"warning: fix {issue_id!r} needs manual input; skipped", file=sys.stderr)
            continue
        if issue_id not in session.fixes:
            session.toggle_fix(issue_id)
    print(format_report(result, session))
    if args.report:
        args.report.write_text(json.dumps(result.to_payload(), indent=2, ensure_ascii=False), encoding="utf-8")
    if len(session.fixes) > 0 or args.output:
        output = args.output or args.workflow.with_name(DEFAULT_EXPORT_NAME)
        write_export(session.corrected_document(), output)
        log_event("export", action="cli", app_version=APP_VERSION, payload={"path": str(output), "fixes": len(session.fixes)})
        print(f"\nCorrected workflow written to {output}")
    return 0
def main(argv: Optional[List[str]] = None) -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    raise SystemExit(run(parse_args(argv)))
if __name__ == "__main__":
    main()
