"""Data model shared by adapters, classifier, orchestrator and reporters."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


# ── Enumerations ────────────────────────────────────────────────────


class Capability(str, Enum):
    SHELL = "shell"
    FS_READ = "fs-read"
    FS_WRITE = "fs-write"
    NETWORK = "network"
    MCP = "mcp"
    ENV = "env"
    SECRETS = "secrets"
    UNKNOWN = "unknown"


class Scope(str, Enum):
    GLOBAL = "global"
    REPO = "repo"
    PATH = "path"
    UNKNOWN = "unknown"


class Persistence(str, Enum):
    ALWAYS = "always"
    SESSION = "session"
    ONCE = "once"
    UNKNOWN = "unknown"


class RiskLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"


RISK_ORDER = {RiskLevel.HIGH: 0, RiskLevel.MEDIUM: 1, RiskLevel.LOW: 2, RiskLevel.INFO: 3}


def _plain(value: Any) -> Any:
    """Turn enum members (possibly nested) into their JSON-ready values."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


# ── Finding ids ─────────────────────────────────────────────────────

_WHITESPACE = re.compile(r"\s+")


def make_finding_id(*parts: str) -> str:
    """Stable, lowercase id: ``agent::key::value``."""
    return _WHITESPACE.sub("-", "::".join(parts)).lower()


# ── Permission and Finding ──────────────────────────────────────────


@dataclass(frozen=True)
class NormalizedPermission:
    capability: Capability
    scope: Scope
    persistence: Persistence
    raw_key: str
    raw_value: Any
    constraints: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "capability": self.capability.value,
            "scope": self.scope.value,
            "persistence": self.persistence.value,
            "constraints": list(self.constraints),
            "rawKey": self.raw_key,
            "rawValue": _plain(self.raw_value),
        }


@dataclass(frozen=True)
class Finding:
    id: str
    agent_id: str
    agent_label: str
    config_path: str
    project_dir: str
    permission: NormalizedPermission
    risk_level: RiskLevel
    score: int
    rule_id: str
    title: str
    summary: str
    description: str
    remediation: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "agentId": self.agent_id,
            "agentLabel": self.agent_label,
            "configPath": self.config_path,
            "projectDir": self.project_dir,
            "permission": self.permission.to_dict(),
            "riskLevel": self.risk_level.value,
            "score": self.score,
            "ruleId": str(_plain(self.rule_id)),
            "title": self.title,
            "summary": self.summary,
            "description": self.description,
            "remediation": self.remediation,
        }


# ── Scan summary ────────────────────────────────────────────────────


@dataclass(frozen=True)
class ScanStats:
    configs_checked: int = 0
    configs_found: int = 0
    projects_scanned: int = 0
    duration_ms: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "configsChecked": self.configs_checked,
            "configsFound": self.configs_found,
            "projectsScanned": self.projects_scanned,
            "durationMs": self.duration_ms,
        }


@dataclass(frozen=True)
class ScanSummary:
    findings: tuple[Finding, ...]
    agents_detected: tuple[str, ...]
    agents_scanned: tuple[str, ...]
    high_count: int
    medium_count: int
    low_count: int
    info_count: int
    scanned_at: str
    stats: ScanStats = field(default_factory=ScanStats)

    @property
    def has_high(self) -> bool:
        return self.high_count > 0

    def find(self, finding_id: str) -> Finding | None:
        for f in self.findings:
            if f.id == finding_id:
                return f
        return None

    def to_dict(self, version: str) -> dict[str, Any]:
        return {
            "version": version,
            "scannedAt": self.scanned_at,
            "summary": {
                "agentsDetected": list(self.agents_detected),
                "high": self.high_count,
                "medium": self.medium_count,
                "low": self.low_count,
                "info": self.info_count,
            },
            "stats": self.stats.to_dict(),
            "findings": [f.to_dict() for f in self.findings],
        }


def build_summary(findings: list[Finding], agents_detected: list[str],
                  agents_scanned: list[str], stats: ScanStats,
                  scanned_at: str) -> ScanSummary:
    counts = {level: 0 for level in RiskLevel}
    for f in findings:
        counts[f.risk_level] += 1
    return ScanSummary(
        findings=tuple(findings),
        agents_detected=tuple(agents_detected),
        agents_scanned=tuple(agents_scanned),
        high_count=counts[RiskLevel.HIGH],
        medium_count=counts[RiskLevel.MEDIUM],
        low_count=counts[RiskLevel.LOW],
        info_count=counts[RiskLevel.INFO],
        scanned_at=scanned_at,
        stats=stats,
    )
