from __future__ import annotations

import getpass
import os
from pathlib import Path
from typing import Callable, Optional

import orjson

from common.config import secrets
from common.logger import get_logger

log = get_logger(__name__)


def cli_config_path() -> Path:
    """Where the Sanity CLI keeps its login (`sanity login`)."""
    base = os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config"
    return Path(base) / "sanity" / "config.json"


def load_persisted_token(path: Path | None = None) -> Optional[str]:
    path = path or cli_config_path()
    if not path.exists():
        return None
    try:
        data = orjson.loads(path.read_bytes())
    except orjson.JSONDecodeError as e:
        log.warning("Ignoring unreadable CLI config %s: %s", path, e)
        return None
    token = data.get("authToken") if isinstance(data, dict) else None
    return token or None


def find_token(path: Path | None = None) -> Optional[str]:
    """Token from SANITY_AUTH_TOKEN or the CLI login, without prompting."""
    return secrets.sanity_auth_token or load_persisted_token(path)


def get_token(
    project_id: str,
    prompt: Callable[[str], str] = getpass.getpass,
    path: Path | None = None,
) -> str:
    """Resolve a write token, asking the operator when none is stored."""
    token = find_token(path)
    if token:
        return token
    return prompt(
        f"Please enter a token with write access on project {project_id}: "
    ).strip()
