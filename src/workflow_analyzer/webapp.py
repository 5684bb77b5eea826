from __future__ import annotations
import logging
import os
import secrets
import socket
import threading
import time
import uuid
import webbrowser
from collections import OrderedDict
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Callable, Mapping, Optional
from flask import Flask, abort, redirect, render_template_string, request, send_file, session, url_for
from . import __version__ as APP_VERSION
from .analyzer import WorkflowAnalyzer, describe_failure
from .credentials import (
    DEFAULT_STORE,
    StoredCredentials,
    has_api_key,
    resolve_credentials,
    save_credentials,
)
from .document_loader import UnsupportedFileError, read_upload_text
from .export import DEFAULT_EXPORT_NAME, EXPORT_MIMETYPE, export_bytes
from .gemini_client import GeminiClient
from .models import AnalyzerError, Severity
from .session import AnalysisSession, SessionStateError, Stage
from .telemetry import Timer, log_event
logger = logging.getLogger(__name__)
SESSION_COOKIE_KEY = "analysis_session_id"
DEFAULT_MAX_SESSIONS = 256
DEFAULT_IDLE_TIMEOUT = 2 * 60 * 60.0
AnalyzerFactory = Callable[[StoredCredentials], WorkflowAnalyzer]
AnalysisRunner = Callable[[Callable[[], None]], None]
SEVERITY_STYLES = {
    Severity.CRITICAL: {"label": "Critical", "css": "sev-critical"},
    Severity.WARNING: {"label": "Warning", "css": "sev-warning"},
    Severity.INFO: {"label": "Info", "css": "sev-info"},
}
@dataclass
class BrowserState:
    analysis: AnalysisSession
    credentials: StoredCredentials
    last_seen: float = 0.0
class SessionRegistry:
    """In-memory state per browser; nothing survives a restart.

    Sessions idle for longer than ``idle_timeout`` seconds are dropped, and
    the least recently used ones go once more than ``max_sessions`` exist.
    A session that is still analyzing is never evicted.
    """
    def __init__(
        self,
        credential_factory: Callable[[], StoredCredentials],
        *,
        max_sessions: int = DEFAULT_MAX_SESSIONS,
        idle_timeout: float = DEFAULT_IDLE_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._credential_factory = credential_factory
        self._states: "OrderedDict[str, BrowserState]" = OrderedDict()
        self._lock = threading.Lock()
        self.max_sessions = max(1, max_sessions)
        self.idle_timeout = idle_timeout
        self._clock = clock
    def __len__(self) -> int:
        with self._lock:
            return len(self._states)
    def get(self, session_id: str) -> BrowserState:
        with self._lock:
            now = self._clock()
            state = self._states.get(session_id)
            if state is None:
                creds = self._credential_factory()
                state = BrowserState(
                    analysis=AnalysisSession(has_credential=has_api_key(creds)),
                    credentials=creds,
                )
                self._states[session_id] = state
            else:
                self._states.move_to_end(session_id)
            state.last_seen = now
            self._evict(now, keep=session_id)
            return state
    def _evict(self, now: float, keep: str) -> None:
        # oldest first
        for session_id in list(self._states):
            if session_id == keep:
                continue
            state = self._states[session_id]
            if state.analysis.stage is Stage.ANALYZING:
                continue
            idle = now - state.last_seen > self.idle_timeout
            if idle or len(self._states) > self.max_sessions:
                del self._states[session_id]
                logger.debug("Evicted browser session %s", session_id)
def default_analyzer_factory(creds: StoredCredentials) -> WorkflowAnalyzer:
    client = GeminiClient(api_key=creds.api_key, base_url=creds.base_url, model=creds.model)
    return WorkflowAnalyzer(client, model=creds.model)
def run_in_thread(job: Callable[[], None]) -> None:
    threading.Thread(target=job, name="workflow-analysis", daemon=True).start()
def create_app(
    analyzer_factory: Optional[AnalyzerFactory] = None,
    run_analysis: Optional[AnalysisRunner] = None,
    credential_store: Path = DEFAULT_STORE,
    env: Optional[Mapping[str, str]] = None,
    max_sessions: int = DEFAULT_MAX_SESSIONS,
    idle_timeout: float = DEFAULT_IDLE_TIMEOUT,
) -> Flask:
    active_env = os.environ if env is None else env
    app = Flask(__name__)
    app.config["SECRET_KEY"] = active_env.get("WORKFLOW_ANALYZER_SECRET_KEY") or secrets.token_hex(32)
    app.config["MAX_CONTENT_LENGTH"] = 16 * 1024 * 1024
    make_analyzer = analyzer_factory or default_analyzer_factory
    runner = run_analysis or run_in_thread
    registry = SessionRegistry(
        lambda: resolve_credentials(credential_store, active_env),
        max_sessions=max_sessions,
        idle_timeout=idle_timeout,
    )
    app.extensions["workflow_analyzer.sessions"] = registry
    def _state() -> BrowserState:
        session_id = session.get(SESSION_COOKIE_KEY)
        if not session_id:
            session_id = uuid.uuid4().hex
            session[SESSION_COOKIE_KEY] = session_id
        return registry.get(session_id)
    def _back():
        return redirect(url_for("index"))
    @app.route("/", methods=["GET"])
    def index():
        state = _state()
        analysis = state.analysis
        corrected_json = None
        if analysis.stage is Stage.RESULTS and len(analysis.fixes) > 0:
            corrected_json = analysis.corrected_json()
        return render_template_string(
            TEMPLATE,
            app_version=APP_VERSION,
            analysis=analysis,
            stage=analysis.stage.value,
            result=analysis.result,
            severity_styles=SEVERITY_STYLES,
            corrected_json=corrected_json,
            model=state.credentials.model,
            export_name=DEFAULT_EXPORT_NAME,
        )
    @app.route("/credentials", methods=["POST"])
    def select_credentials():
        state = _state()
        api_key = (request.form.get("api_key") or "").strip()
        if not api_key:
            state.analysis.report_error("Please enter an API key.")
            return _back()
        model = (request.form.get("model") or "").strip() or state.credentials.model
        state.credentials = StoredCredentials(
            api_key=api_key,
            model=model,
            base_url=state.credentials.base_url,
        )
        if request.form.get("remember_credentials") == "on":
            try:
                save_credentials(state.credentials, credential_store)
            except OSError as exc:
                app.logger.warning("Could not save credentials: %s", exc)
        state.analysis.credential_selected()
        app.logger.info("API key selected for model %s", model)
        return _back()
    @app.route("/analyze", methods=["POST"])
    def analyze():
        state = _state()
        analysis = state.analysis
        if not analysis.has_credential or analysis.stage is not Stage.INPUT:
            return _back()
        text = request.form.get("workflow_json", "") or ""
        try:
            uploaded = read_upload_text(request.files.get("workflow_file"))
        except UnsupportedFileError as exc:
            analysis.report_error(str(exc), raw_text=text)
            return _back()
        if uploaded is not None:
            text = uploaded
        try:
            generation = analysis.submit(text)
        except SessionStateError as exc:
            app.logger.warning("Analyze rejected: %s", exc)
            return _back()
        if generation is None:
            return _back()
        analyzer = make_analyzer(state.credentials)
        model = state.credentials.model
        workflow_json = analysis.raw_text
        def _job() -> None:
            timer = Timer()
            try:
                result = analyzer.analyze(workflow_json)
            except AnalyzerError as exc:
                message = str(exc)
            except Exception as exc:  # noqa: BLE001
                logger.exception("Unexpected failure during analysis %d", generation)
                message = describe_failure(exc)
            else:
                committed = analysis.complete(generation, result)
                log_event(
                    "analyze",
                    action="analyze",
                    app_version=APP_VERSION,
                    model=model,
                    duration_ms=timer.ms(),
                    success=True,
                    payload={"issues": len(result.errors), "committed": committed},
                )
                return
            analysis.fail(generation, message)
            log_event(
                "analyze",
                action="analyze",
                app_version=APP_VERSION,
                model=model,
                duration_ms=timer.ms(),
                success=False,
                error=message,
            )
        runner(_job)
        return _back()
    @app.route("/fixes/<path:issue_id>/toggle", methods=["POST"])
    def toggle_fix(issue_id: str):
        analysis = _state().analysis
        issue = analysis.result.issue(issue_id) if analysis.result else None
        if issue is None:
            abort(404)
        if not issue.auto_fixable:
            abort(400, description="This fix needs manual input before it can be applied.")
        analysis.toggle_fix(issue_id)
        return redirect(url_for("index", _anchor=f"issue-{issue_id}"))
    @app.route("/fixes/approve-all", methods=["POST"])
    def approve_all():
        _state().analysis.approve_all_fixes()
        return redirect(url_for("index", _anchor="issues"))
    @app.route("/sections/<section_id>/toggle", methods=["POST"])
    def toggle_section(section_id: str):
        _state().analysis.toggle_section(section_id)
        return redirect(url_for("index", _anchor=f"section-{section_id}"))
    @app.route("/start-over", methods=["POST"])
    def start_over():
        _state().analysis.start_over()
        return _back()
    @app.route("/download", methods=["GET"])
    def download():
        state = _state()
        document = state.analysis.corrected_document()
        if document is None:
            abort(404)
        data = export_bytes(document)
        log_event(
            "export",
            action="download",
            app_version=APP_VERSION,
            model=state.credentials.model,
            payload={"bytes": len(data), "fixes": len(state.analysis.fixes)},
        )
        return send_file(
            BytesIO(data),
            mimetype=EXPORT_MIMETYPE,
            as_attachment=True,
            download_name=DEFAULT_EXPORT_NAME,
        )
    return app
TEMPLATE = """
<!doctype html>
<html lang=\"en\">
<head>
  <meta charset=\"utf-8\">
  <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\">
  {% if stage == 'analyzing' %}<meta http-equiv=\"refresh\" content=\"2\">{% endif %}
  <title>N8N Workflow Analyzer</title>
  <style>
    :root {
      --bg: #0b1020;
      --card: #131a2e;
      --muted: #94a3b8;
      --text: #e2e8f0;
      --accent: #3b82f6;
      --danger: #ef4444;
      --warning: #f59e0b;
      --success: #22c55e;
      --border: rgba(148, 163, 184, 0.18);
    }
    * { box-sizing: border-box; }
    body { margin: 0; font-family: 'Inter', system-ui, -apple-system, sans-serif; background: var(--bg); color: var(--text); min-height: 100vh; }
    h1, h2, h3 { margin: 0; }
    .page { max-width: 1100px; margin: 0 auto; padding: 32px 24px 48px; }
    .header { text-align: center; margin-bottom: 36px; }
    .header h1 { font-size: 40px; background: linear-gradient(90deg, #60a5fa, #a855f7); -webkit-background-clip: text; color: transparent; }
    .subtitle { color: var(--muted); margin-top: 10px; }
    .badge { display: inline-block; margin-top: 8px; padding: 4px 10px; border-radius: 999px; border: 1px solid var(--border); color: var(--muted); font-size: 12px; }
    .card { background: var(--card); border-radius: 12px; border: 1px solid var(--border); padding: 20px; margin-bottom: 18px; }
    .grid { display: grid; grid-template-columns: 1fr 1fr; gap: 20px; }
    .muted { color: var(--muted); }
    .error { color: var(--danger); text-align: center; margin: 16px 0; }
    textarea, .input { width: 100%; padding: 12px; border-radius: 8px; border: 1px solid var(--border); background: var(--bg); color: var(--text); font-size: 14px; }
    textarea { min-height: 260px; resize: vertical; font-family: ui-monospace, monospace; }
    .btn { border: 0; border-radius: 999px; padding: 12px 28px; font-weight: 700; cursor: pointer; background: var(--accent); color: #fff; font-size: 15px; }
    .btn:disabled { opacity: 0.5; cursor: not-allowed; }
    .btn-small { border-radius: 8px; padding: 8px 14px; font-size: 13px; }
    .btn-ok { background: rgba(34, 197, 94, 0.8); }
    .btn-muted { background: rgba(148, 163, 184, 0.25); }
    .center { text-align: center; }
    .issue { border-radius: 10px; border: 1px solid var(--border); padding: 16px; margin-bottom: 12px; }
    .sev-critical { background: rgba(239, 68, 68, 0.12); }
    .sev-critical .sev { color: var(--danger); }
    .sev-warning { background: rgba(245, 158, 11, 0.12); }
    .sev-warning .sev { color: var(--warning); }
    .sev-info { background: rgba(59, 130, 246, 0.12); }
    .sev-info .sev { color: var(--accent); }
    .sev { font-weight: 700; font-size: 17px; }
    .recommendation { margin-top: 12px; padding: 12px; border-radius: 8px; background: rgba(0, 0, 0, 0.3); }
    .fix-row { margin-top: 12px; }
    .fix-toggle { width: 100%; text-align: left; border-radius: 8px; border: 0; padding: 10px 14px; cursor: pointer; background: rgba(148, 163, 184, 0.15); color: var(--text); }
    .fix-toggle.approved { background: rgba(22, 101, 52, 0.5); color: #86efac; }
    .fix-manual { width: 100%; text-align: left; border-radius: 8px; border: 0; padding: 10px 14px; background: rgba(113, 63, 18, 0.4); color: var(--warning); cursor: not-allowed; }
    code, pre { font-family: ui-monospace, monospace; }
    pre { white-space: pre-wrap; background: rgba(0, 0, 0, 0.35); border-radius: 8px; padding: 14px; font-size: 13px; overflow-x: auto; }
    .row { display: flex; justify-content: space-between; align-items: center; gap: 12px; margin-bottom: 12px; }
    .node-head { width: 100%; display: flex; justify-content: space-between; background: none; border: 0; color: var(--text); font-weight: 600; font-size: 15px; cursor: pointer; padding: 0; }
    .spinner { width: 64px; height: 64px; border-radius: 50%; border: 4px solid var(--border); border-top-color: var(--accent); animation: spin 1s linear infinite; margin: 0 auto 20px; }
    @keyframes spin { to { transform: rotate(360deg); } }
    @media (max-width: 800px) { .grid { grid-template-columns: 1fr; } }
  </style>
</head>
<body>
  <main class=\"page\">
    <header class=\"header\">
      <h1>N8N Workflow Analyzer</h1>
      <p class=\"subtitle\">Transforming complex workflows into simple, actionable insights.</p>
      <span class=\"badge\">v{{ app_version }} &middot; {{ model }}</span>
    </header>
    {% if not analysis.has_credential %}
      <section class=\"card center\">
        <h2>API Key Required</h2>
        <p class=\"muted\">This application uses the Gemini API to analyze workflows. Please select an API key to proceed.
          Using the Gemini API may incur charges. See the
          <a href=\"https://ai.google.dev/gemini-api/docs/billing\" target=\"_blank\" rel=\"noopener noreferrer\">billing documentation</a> for details.</p>
        {% if analysis.error %}<p class=\"error\">{{ analysis.error }}</p>{% endif %}
        <form method=\"post\" action=\"{{ url_for('select_credentials') }}\">
          <p><input class=\"input\" type=\"password\" name=\"api_key\" placeholder=\"Gemini API key\" autocomplete=\"off\"></p>
          <p><input class=\"input\" type=\"text\" name=\"model\" value=\"{{ model }}\"></p>
          <p><label class=\"muted\"><input type=\"checkbox\" name=\"remember_credentials\"> Remember this key on this computer</label></p>
          <button class=\"btn\" type=\"submit\">Select API Key</button>
        </form>
      </section>
    {% elif stage == 'input' %}
      <form method=\"post\" action=\"{{ url_for('analyze') }}\" enctype=\"multipart/form-data\">
        <div class=\"grid\">
          <section class=\"card\">
            <h2>Paste Workflow JSON</h2>
            <p><textarea id=\"workflow_json\" name=\"workflow_json\" placeholder=\"Paste your N8N workflow JSON here...\">{{ analysis.raw_text }}</textarea></p>
          </section>
          <section class=\"card\">
            <h2>Upload a File</h2>
            <p class=\"muted\">Choose a .json workflow export. An uploaded file replaces the pasted text.</p>
            <p><input class=\"input\" id=\"workflow_file\" type=\"file\" name=\"workflow_file\" accept=\"application/json,.json\"></p>
          </section>
        </div>
        {% if analysis.error %}<p class=\"error\">{{ analysis.error }}</p>{% endif %}
        <div class=\"center\">
          <button class=\"btn\" id=\"analyze\" type=\"submit\" {% if not analysis.raw_text.strip() %}disabled{% endif %}>Analyze Workflow</button>
        </div>
      </form>
      <script>
        (function () {
          const text = document.getElementById('workflow_json');
          const file = document.getElementById('workflow_file');
          const button = document.getElementById('analyze');
          const refresh = () => { button.disabled = !(text.value.trim() || file.files.length); };
          text.addEventListener('input', refresh);
          file.addEventListener('change', refresh);
        })();
      </script>
    {% elif stage == 'analyzing' %}
      <section class=\"center\">
        <div class=\"spinner\"></div>
        <h2>Analyzing Workflow...</h2>
        <p class=\"muted\">Our digital detective is on the case, examining your workflow clues.</p>
        <form method=\"post\" action=\"{{ url_for('start_over') }}\"><button class=\"btn btn-muted btn-small\" type=\"submit\">Back</button></form>
      </section>
    {% elif stage == 'results' and result %}
      <section class=\"card\">
        <h2>Analysis Summary</h2>
        <p><strong>What it does:</strong> {{ result.summary.accomplishment }}</p>
        <p><strong>How it starts:</strong> {{ result.summary.trigger }}</p>
        <p><strong>What's the result:</strong> {{ result.summary.final_outcome }}</p>
        <p class=\"recommendation\"><em><strong>Analogy:</strong> {{ result.summary.analogy }}</em></p>
      </section>
      <section id=\"issues\">
        <h2>Identified Issues &amp; Fixes</h2>
        {% if result.errors %}
          <form class=\"row\" method=\"post\" action=\"{{ url_for('approve_all') }}\" style=\"justify-content: flex-end\">
            <button class=\"btn btn-ok btn-small\" type=\"submit\">&#10003; Accept All Automated Fixes</button>
          </form>
          {% for issue in result.errors %}
            {% set style = severity_styles[issue.severity] %}
            <div class=\"issue {{ style.css }}\" id=\"issue-{{ issue.id }}\">
              <p class=\"sev\">{{ style.label }}: {{ issue.description }}</p>
              <p class=\"muted\"><strong>Impact:</strong> {{ issue.impact }}</p>
              {% if issue.node_id %}<p class=\"muted\"><strong>Node:</strong> <code>{{ issue.node_id }}</code></p>{% endif %}
              <div class=\"recommendation\">
                <strong>Recommendation:</strong>
                <p class=\"muted\">{{ issue.recommendation }}</p>
              </div>
              <div class=\"fix-row\">
                {% if issue.patch.requires_user_input %}
                  <button class=\"fix-manual\" type=\"button\" disabled>&#9888; Manual Input Required</button>
                {% else %}
                  <form method=\"post\" action=\"{{ url_for('toggle_fix', issue_id=issue.id) }}\">
                    <button class=\"fix-toggle {% if issue.id in analysis.fixes %}approved{% endif %}\" type=\"submit\">
                      {% if issue.id in analysis.fixes %}&#9745;{% else %}&#9744;{% endif %} Accept Fix
                    </button>
                  </form>
                {% endif %}
              </div>
            </div>
          {% endfor %}
        {% else %}
          <div class=\"card center\">
            <p><strong>No issues found!</strong></p>
            <p class=\"muted\">Your workflow looks clean and ready to go.</p>
          </div>
        {% endif %}
      </section>
      {% if corrected_json %}
        <section>
          <div class=\"row\">
            <h2>Validated Workflow JSON</h2>
            <a class=\"btn btn-small\" href=\"{{ url_for('download') }}\" download=\"{{ export_name }}\">Download</a>
          </div>
          <pre><code>{{ corrected_json }}</code></pre>
        </section>
      {% endif %}
      <section>
        <h2>Node-by-Node Breakdown</h2>
        {% for node in result.node_breakdowns %}
          {% set section_id = 'node-' ~ loop.index %}
          <div class=\"card\" id=\"section-{{ section_id }}\">
            <form method=\"post\" action=\"{{ url_for('toggle_section', section_id=section_id) }}\">
              <button class=\"node-head\" type=\"submit\">
                <span>{{ node.node_name }} ({{ node.node_id }})</span>
                <span>{% if section_id in analysis.open_sections %}&#9650;{% else %}&#9660;{% endif %}</span>
              </button>
            </form>
            {% if section_id in analysis.open_sections %}
              <div class=\"muted\">
                <p><strong>Purpose:</strong> {{ node.purpose }}</p>
                <p><strong>Analogy:</strong> <em>{{ node.visual_metaphor }}</em></p>
                <p><strong>Required Inputs:</strong> {{ node.required_inputs }}</p>
                <p><strong>Configuration:</strong> {{ node.configuration_needs }}</p>
                <p><strong>Output:</strong> {{ node.output }}</p>
              </div>
            {% endif %}
          </div>
        {% endfor %}
      </section>
      <section>
        <h2>Workflow Path</h2>
        <pre><code>{{ result.text_flow }}</code></pre>
      </section>
      <form class=\"center\" method=\"post\" action=\"{{ url_for('start_over') }}\">
        <button class=\"btn btn-muted\" type=\"submit\">Analyze Another Workflow</button>
      </form>
    {% endif %}
  </main>
</body>
</html>
"""
app = create_app()
def _find_open_port(host: str, preferred: int) -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            s.bind((host, preferred))
            return preferred
        except OSError:
            pass
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        s.bind((host, 0))
        return s.getsockname()[1]
def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    host = os.getenv("WORKFLOW_ANALYZER_HOST", "127.0.0.1")
    requested_port = int(os.getenv("WORKFLOW_ANALYZER_PORT", "8000"))
    port = _find_open_port(host, requested_port)
    def _open_browser() -> None:
        time.sleep(1)
        try:
            webbrowser.open(f"http://{host}:{port}")
        except webbrowser.Error as exc:
            logger.info("Could not open a browser: %s", exc)
    threading.Thread(target=_open_browser, daemon=True).start()
    app.run(host=host, port=port, debug=False, threaded=True)
if __name__ == "__main__":
    main()
