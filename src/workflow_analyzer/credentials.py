from __future__ import annotations
import json
import logging
import os
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Mapping, Optional
logger = logging.getLogger(__name__)
DEFAULT_STORE = Path.home() / ".workflow_analyzer" / "credentials.json"
@dataclass
class StoredCredentials:
    api_key: str = ""
    model: str = "gemini-2.5-flash"
    base_url: str = "https://generativelanguage.googleapis.com"
def load_credentials(store: Path = DEFAULT_STORE) -> StoredCredentials:
    if not store.exists():
        return StoredCredentials()
    try:
        data = json.loads(store.read_text(encoding="utf-8"))
        known = {f.name for f in fields(StoredCredentials)}
        return StoredCredentials(**{k: v for k, v in data.items() if k in known})
    except (OSError, ValueError, TypeError, AttributeError) as exc:
        logger.warning("Ignoring unreadable credential store %s: %s", store, exc)
        return StoredCredentials()
def save_credentials(creds: StoredCredentials, store: Path = DEFAULT_STORE) -> None:
    store.parent.mkdir(parents=True, exist_ok=True)
    store.write_text(json.dumps(asdict(creds), indent=2), encoding="utf-8")
def resolve_credentials(
    store: Path = DEFAULT_STORE,
    env: Optional[Mapping[str, str]] = None,
) -> StoredCredentials:
    """Stored credentials with GEMINI_API_KEY / API_KEY, GEMINI_MODEL and GEMINI_BASE_URL applied."""
    active_env = os.environ if env is None else env
    creds = load_credentials(store)
    api_key = active_env.get("GEMINI_API_KEY") or active_env.get("API_KEY")
    if api_key:
        creds = replace(creds, api_key=api_key)
    if active_env.get("GEMINI_MODEL"):
        creds = replace(creds, model=active_env["GEMINI_MODEL"])
    if active_env.get("GEMINI_BASE_URL"):
        creds = replace(creds, base_url=active_env["GEMINI_BASE_URL"])
    return creds
def has_api_key(creds: StoredCredentials) -> bool:
    return bool(creds.api_key and creds.api_key.strip())
