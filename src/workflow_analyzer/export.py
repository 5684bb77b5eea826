from __future__ import annotations
import json
from pathlib import Path
from .models import JsonValue
DEFAULT_EXPORT_NAME = "workflow-validated.json"
EXPORT_MIMETYPE = "application/json"
def serialize_document(document: JsonValue) -> str:
    return json.dumps(document, indent=2, ensure_ascii=False)
def export_bytes(document: JsonValue) -> bytes:
    return serialize_document(document).encode("utf-8")
def write_export(document: JsonValue, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(serialize_document(document) + "\n", encoding="utf-8")
    return path
