"""Safe config readers and the small path/secret helpers adapters share.

Readers never raise: a missing, unreadable or malformed file returns None
and the caller moves on to its next candidate path.
"""

from __future__ import annotations

import json
import logging
import os
import re
import tomllib
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

HOME_ENV_VAR = "AGENTPERMS_HOME"
REDACTED = "[redacted]"
SECRET_MIN_LENGTH = 8

SECRET_KEY_PATTERN = re.compile(
    r"key|token|secret|password|passwd|credential|api[-_]?key|auth", re.I)
_ENV_REFERENCE = re.compile(r"^\$(?:\{[^}]+\}|[A-Za-z_][A-Za-z0-9_]*)$")


# ── YAML loader ─────────────────────────────────────────────────────


class ConfigLoader(yaml.SafeLoader):
    """SafeLoader with YAML 1.2 booleans: only true/false, never yes/no/on/off.

    Aider's own ``yes:`` key would otherwise load as the boolean True.
    """


ConfigLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != "tag:yaml.org,2002:bool"]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
ConfigLoader.add_implicit_resolver(
    "tag:yaml.org,2002:bool",
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)


# ── Readers ─────────────────────────────────────────────────────────


def _read_text(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug("cannot read %s: %s", path, exc)
        return None


def safe_read_json(path: Path) -> Any | None:
    text = _read_text(path)
    if text is None:
        return None
    try:
        return json.loads(text)
    except (json.JSONDecodeError, RecursionError) as exc:
        logger.debug("invalid JSON in %s: %s", path, exc)
        return None


def safe_read_yaml(path: Path) -> Any | None:
    text = _read_text(path)
    if text is None:
        return None
    try:
        return yaml.load(text, Loader=ConfigLoader)
    except (yaml.YAMLError, RecursionError) as exc:
        logger.debug("invalid YAML in %s: %s", path, exc)
        return None


def safe_read_toml(path: Path) -> Any | None:
    text = _read_text(path)
    if text is None:
        return None
    try:
        return tomllib.loads(text)
    except (tomllib.TOMLDecodeError, RecursionError) as exc:
        logger.debug("invalid TOML in %s: %s", path, exc)
        return None


# ── Paths ───────────────────────────────────────────────────────────


def resolve_home() -> Path:
    """Home directory used for user-scoped configs; ``AGENTPERMS_HOME`` overrides it."""
    override = os.environ.get(HOME_ENV_VAR, "")
    if override:
        return Path(override).expanduser()
    return Path.home()


def expand_home(path: str, home: Path) -> str:
    if path == "~":
        return str(home)
    if path.startswith("~/"):
        return str(home / path[2:])
    return path


def shorten_path(path: str, home: Path) -> str:
    h = str(home)
    if path == h or path.startswith(h + os.sep):
        return "~" + path[len(h):]
    return path


# ── Secrets ─────────────────────────────────────────────────────────


def is_secret_env(key: str, value: Any) -> bool:
    """A literal, non-trivial value under a credential-like key."""
    if not isinstance(value, str) or not SECRET_KEY_PATTERN.search(key):
        return False
    if _ENV_REFERENCE.match(value.strip()):
        return False
    return len(value) > SECRET_MIN_LENGTH


def redact_env(env: dict[str, Any]) -> dict[str, Any]:
    return {k: REDACTED if is_secret_env(k, v) else v for k, v in env.items()}


def redact_args(args: list[Any]) -> list[Any]:
    """Redact ``--token VALUE`` and ``--token=VALUE`` style command-line secrets."""
    redacted: list[Any] = []
    flag = ""
    for arg in args:
        if not isinstance(arg, str):
            redacted.append(arg)
            flag = ""
            continue
        if arg.startswith("-") and "=" in arg:
            name, _, value = arg.partition("=")
            redacted.append(f"{name}={REDACTED}" if is_secret_env(name, value) else arg)
            flag = ""
        elif arg.startswith("-"):
            redacted.append(arg)
            flag = arg
        else:
            redacted.append(REDACTED if flag and is_secret_env(flag, arg) else arg)
            flag = ""
    return redacted
