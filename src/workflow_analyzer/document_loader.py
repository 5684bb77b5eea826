from __future__ import annotations
from pathlib import Path
from typing import Optional
SUPPORTED_SUFFIXES = {".json"}
class UnsupportedFileError(ValueError):
    """Raised for uploads that are not JSON files."""
def _decode(raw: bytes) -> str:
    return raw.decode("utf-8-sig", errors="replace")
def load_workflow_text(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise UnsupportedFileError(f"Unsupported workflow file type: {suffix or path.name}")
    return _decode(path.read_bytes())
def read_upload_text(file_storage) -> Optional[str]:
    """Text of an uploaded workflow file, or None when nothing was uploaded."""
    if not file_storage or not file_storage.filename:
        return None
    suffix = Path(file_storage.filename).suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise UnsupportedFileError("Please upload a .json workflow file.")
    file_storage.stream.seek(0)
    return _decode(file_storage.stream.read() or b"")
