from __future__ import annotations
import json
import logging
import os
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional
logger = logging.getLogger(__name__)
DEFAULT_TELEMETRY_DIR = Path.home() / ".workflow_analyzer" / "logs"
DEFAULT_TELEMETRY_FILE = "telemetry.jsonl"
def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
def _truncate(s: str, limit: int) -> str:
    if not s:
        return ""
    s = str(s)
    return s if len(s) <= limit else (s[:limit] + "\n...TRUNCATED...")
@dataclass
class TelemetryConfig:
    dir_path: Path = DEFAULT_TELEMETRY_DIR
    filename: str = DEFAULT_TELEMETRY_FILE
    max_payload_chars: int = 20_000
    fallback_dir: Path = Path.home() / ".workflow_analyzer" / "telemetry_fallback"
    raise_on_error: bool = False
def _append(path: Path, record: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "a", encoding="utf-8", newline="\n") as f:
        f.write(json.dumps(record, ensure_ascii=False) + "\n")
def log_event(
    event_type: str,
    *,
    action: str,
    app_version: str = "",
    model: str = "",
    duration_ms: Optional[int] = None,
    success: bool = True,
    error: str = "",
    payload: Optional[Dict[str, Any]] = None,
    config: Optional[TelemetryConfig] = None,
) -> Optional[Path]:
    cfg = config or TelemetryConfig()
    dir_path = Path(os.environ.get("TELEMETRY_DIR", str(cfg.dir_path)))
    filename = os.environ.get("TELEMETRY_FILE", cfg.filename)
    record: Dict[str, Any] = {
        "id": str(uuid.uuid4()),
        "ts_utc": _utc_now_iso(),
        "event_type": event_type,
        "action": action,
        "app_version": app_version,
        "model": model,
        "duration_ms": duration_ms,
        "success": bool(success),
    }
    if error:
        record["error"] = _truncate(error, 8_000)
    if payload:
        record["payload"] = {
            k: _truncate(v, cfg.max_payload_chars) if isinstance(v, str) else v
            for k, v in payload.items()
        }
    out_path = dir_path / filename
    try:
        _append(out_path, record)
        return out_path
    except OSError as exc:
        if cfg.raise_on_error:
            raise
        record["telemetry_write_error"] = str(exc)
        fb_path = cfg.fallback_dir / filename
        try:
            _append(fb_path, record)
            return fb_path
        except OSError as fb_exc:
            logger.warning("Telemetry write failed: %s", fb_exc)
            return None
class Timer:
    def __init__(self) -> None:
        self._t0 = time.perf_counter()
    def ms(self) -> int:
        return int((time.perf_counter() - self._t0) * 1000)
