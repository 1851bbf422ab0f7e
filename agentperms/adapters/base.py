"""Adapter contract and the extraction helpers several agents share.

An adapter knows where one agent keeps its config and how to read it. For
each risk-relevant setting it builds a ``NormalizedPermission``, picks a
rule id and hands both to the classifier.
"""

from __future__ import annotations

import logging
import os
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, ClassVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from agentperms.classifier import classify, is_sensitive_path
from agentperms.models import (
    Capability,
    Finding,
    NormalizedPermission,
    Persistence,
    Scope,
    make_finding_id,
)
from agentperms.readers import (
    REDACTED,
    expand_home,
    is_secret_env,
    redact_args,
    redact_env,
    safe_read_json,
    safe_read_toml,
    safe_read_yaml,
)
from agentperms.rules import RuleId

logger = logging.getLogger(__name__)

READERS: dict[str, Callable[[Path], Any]] = {
    "json": safe_read_json,
    "yaml": safe_read_yaml,
    "toml": safe_read_toml,
}

SHELL_TOOL_NAMES = frozenset({"bash", "shell", "terminal"})
_WILDCARD_ARGS = frozenset({"", "*", ":*"})
_ALLOW_ENTRY = re.compile(r"^(?P<name>[\w.-]+)(?:\((?P<args>.*)\))?$", re.S)


# ── Schemas ─────────────────────────────────────────────────────────


class ConfigModel(BaseModel):
    """Base for per-agent schemas: every field optional, unknown keys ignored."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class McpServer(ConfigModel):
    command: str | None = None
    args: list[str] | None = None
    env: dict[str, Any] | None = None
    url: str | None = None
    http_url: str | None = Field(default=None, alias="httpUrl")
    headers: dict[str, Any] | None = None


class AllowDeny(ConfigModel):
    allow: list[str] | None = None
    deny: list[str] | None = None


@dataclass(frozen=True)
class ConfigLocation:
    """One candidate config file and the breadth of anything granted in it."""

    path: Path
    scope: Scope


# ── Adapter ─────────────────────────────────────────────────────────


class Adapter(ABC):
    agent_id: ClassVar[str]
    agent_label: ClassVar[str]
    config_format: ClassVar[str]
    schema: ClassVar[type[ConfigModel]]

    def __init__(self, home: Path) -> None:
        self.home = Path(home)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.agent_id}>"

    @abstractmethod
    def locations(self, project_dir: Path) -> list[ConfigLocation]:
        """Candidate config files, in the order they are read."""

    @abstractmethod
    def extract(self, config: Any, location: ConfigLocation,
                project_dir: Path) -> list[Finding]:
        """Findings for one validated config document."""

    def detect(self, project_dir: str | Path) -> bool:
        return any(_is_file(loc.path) for loc in self.locations(Path(project_dir)))

    def scan(self, project_dir: str | Path) -> list[Finding]:
        project = Path(project_dir)
        findings: list[Finding] = []
        for location in self.locations(project):
            if not _is_file(location.path):
                continue
            try:
                findings.extend(self._scan_location(location, project))
            except Exception as exc:  # per-path isolation
                logger.debug("%s: skipping %s: %r", self.agent_id, location.path, exc)
        return findings

    def _scan_location(self, location: ConfigLocation, project: Path) -> list[Finding]:
        raw = READERS[self.config_format](location.path)
        if raw is None:
            return []
        try:
            config = self.schema.model_validate(raw)
        except ValidationError as exc:
            logger.debug("%s: %s does not match schema: %s",
                         self.agent_id, location.path, exc.error_count())
            return []
        return self.extract(config, location, project)

    # ── Finding construction ────────────────────────────────────────

    def finding(self, permission: NormalizedPermission, rule_id: RuleId,
                location: ConfigLocation, project_dir: Path,
                id_parts: tuple[str, str] | None = None) -> Finding:
        if id_parts is None:
            id_parts = (permission.raw_key, str(permission.raw_value))
        result = classify(permission, rule_id)
        return Finding(
            id=make_finding_id(self.agent_id, *id_parts),
            agent_id=self.agent_id,
            agent_label=self.agent_label,
            config_path=str(location.path),
            project_dir=str(project_dir),
            permission=permission,
            risk_level=result.risk_level,
            score=result.score,
            rule_id=rule_id.value,
            title=result.title,
            summary=result.summary,
            description=result.description,
            remediation=result.remediation,
        )

    def flag_finding(self, raw_key: str, raw_value: Any, rule_id: RuleId,
                     capability: Capability, location: ConfigLocation,
                     project_dir: Path, scope: Scope = Scope.GLOBAL) -> Finding:
        permission = NormalizedPermission(
            capability=capability,
            scope=scope,
            persistence=Persistence.ALWAYS,
            raw_key=raw_key,
            raw_value=raw_value,
        )
        return self.finding(permission, rule_id, location, project_dir)

    def allow_findings(self, entries: list[str] | None, raw_key: str,
                       location: ConfigLocation, project_dir: Path) -> list[Finding]:
        findings = []
        for entry in entries or []:
            rule_id, capability, scope = classify_allow_entry(entry)
            permission = NormalizedPermission(
                capability=capability,
                scope=scope,
                persistence=Persistence.ALWAYS,
                raw_key=raw_key,
                raw_value=entry,
                constraints=() if rule_id is RuleId.SHELL_UNRESTRICTED_ALWAYS else (entry,),
            )
            findings.append(self.finding(permission, rule_id, location, project_dir))
        return findings

    def trusted_dir_findings(self, entries: list[str] | None, raw_key: str,
                             location: ConfigLocation, project_dir: Path) -> list[Finding]:
        findings = []
        for entry in entries or []:
            rule_id, scope = classify_trusted_dir(entry, self.home)
            permission = NormalizedPermission(
                capability=Capability.FS_WRITE,
                scope=scope,
                persistence=Persistence.ALWAYS,
                raw_key=raw_key,
                raw_value=entry,
                constraints=(entry,),
            )
            findings.append(self.finding(permission, rule_id, location, project_dir))
        return findings

    def mcp_findings(self, servers: dict[str, McpServer] | None,
                     location: ConfigLocation, project_dir: Path) -> list[Finding]:
        """One finding per server, plus one per hardcoded secret in its env."""
        findings = []
        for name, server in (servers or {}).items():
            env = server.env or {}
            raw_value = server.model_dump(exclude_none=True, by_alias=True)
            if env:
                raw_value["env"] = redact_env(env)
            if server.args:
                raw_value["args"] = redact_args(server.args)
            if server.headers:
                raw_value["headers"] = redact_env(server.headers)
            permission = NormalizedPermission(
                capability=Capability.MCP,
                scope=location.scope,
                persistence=Persistence.ALWAYS,
                raw_key=f"mcpServers.{name}",
                raw_value=raw_value,
                constraints=(server.command,) if server.command else (),
            )
            findings.append(self.finding(permission, RuleId.MCP_SERVER_REGISTERED,
                                         location, project_dir,
                                         id_parts=("mcpservers", name)))

            for key, value in env.items():
                if not is_secret_env(key, value):
                    continue
                secret = NormalizedPermission(
                    capability=Capability.SECRETS,
                    scope=location.scope,
                    persistence=Persistence.ALWAYS,
                    raw_key=f"mcpServers.{name}.env.{key}",
                    raw_value=REDACTED,
                )
                findings.append(self.finding(secret, RuleId.SECRETS_IN_MCP_ENV,
                                             location, project_dir,
                                             id_parts=(f"mcpservers.{name}.env", key)))
        return findings


# ── Shared policies ─────────────────────────────────────────────────


def _is_file(path: Path) -> bool:
    try:
        return path.is_file()
    except OSError:
        return False


def classify_allow_entry(entry: str) -> tuple[RuleId, Capability, Scope]:
    """Map an always-allow entry such as ``Bash`` or ``Bash(npm run *)`` to a rule."""
    m = _ALLOW_ENTRY.match(entry.strip())
    if not m or m.group("name").lower() not in SHELL_TOOL_NAMES:
        return RuleId.TOOL_ALWAYS_ALLOWED, Capability.UNKNOWN, Scope.REPO
    args = (m.group("args") or "").strip()
    if args in _WILDCARD_ARGS:
        return RuleId.SHELL_UNRESTRICTED_ALWAYS, Capability.SHELL, Scope.GLOBAL
    return RuleId.SHELL_RESTRICTED_ALWAYS, Capability.SHELL, Scope.REPO


def classify_trusted_dir(entry: str, home: Path) -> tuple[RuleId, Scope]:
    """Sensitive paths win over the home/root check; everything else is path-scoped."""
    expanded = expand_home(entry, home)
    normalized = os.path.normpath(expanded) if expanded else expanded
    is_global = (entry in ("/", "~")
                 or normalized == os.path.normpath(str(home))
                 or normalized == os.sep)
    if is_sensitive_path(expanded):
        return RuleId.SENSITIVE_PATH_TRUSTED, Scope.GLOBAL
    if is_global:
        return RuleId.TRUSTED_DIR_GLOBAL, Scope.GLOBAL
    return RuleId.FS_WRITE_REPO, Scope.PATH
