"""Turn a normalized permission plus rule id into a risk level and score."""

from __future__ import annotations

import re
from typing import NamedTuple

from agentperms.models import NormalizedPermission, Persistence, RiskLevel, Scope
from agentperms.rules import (
    INTERPRETERS,
    MEDIUM_RISK_COMMANDS,
    SENSITIVE_PATH_PATTERNS,
    SYNTAX_CHECK_FLAG,
    RuleId,
    get_rule,
)


class Classification(NamedTuple):
    risk_level: RiskLevel
    score: int
    title: str
    summary: str
    description: str
    remediation: str


def is_sensitive_path(path: str) -> bool:
    return any(pattern in path for pattern in SENSITIVE_PATH_PATTERNS)


# ── Command extraction ──────────────────────────────────────────────

_TOOL_WRAPPER = re.compile(r"^\w+\((.*)\)$", re.S)


def command_tokens(pattern: str) -> list[str]:
    """Split ``Bash(git add:*)`` style patterns into command tokens."""
    inner = pattern.strip()
    m = _TOOL_WRAPPER.match(inner)
    if m:
        inner = m.group(1).strip()
    if inner.endswith(":*"):
        inner = inner[:-2]
    return inner.split()


def base_command(pattern: str) -> str:
    """Return the command a pattern grants, preferring two-word forms like ``git add``."""
    tokens = command_tokens(pattern)
    if not tokens:
        return ""
    if len(tokens) > 1:
        pair = f"{tokens[0]} {tokens[1]}"
        if pair in MEDIUM_RISK_COMMANDS:
            return pair
    return tokens[0]


def _is_low_risk_command(pattern: str) -> bool:
    tokens = command_tokens(pattern)
    if not tokens:
        return False
    if tokens[0] in INTERPRETERS and SYNTAX_CHECK_FLAG in tokens[1:]:
        return True
    return base_command(pattern) not in MEDIUM_RISK_COMMANDS


# ── Classifier ──────────────────────────────────────────────────────


def classify(permission: NormalizedPermission, rule_id: str) -> Classification:
    """Classify one permission.

    Adjustments run in a fixed order and each one reads the level left by
    the previous step, not the rule default.
    """
    rule = get_rule(rule_id)
    if rule is None:
        return Classification(
            risk_level=RiskLevel.INFO,
            score=1,
            title="Unknown permission",
            summary=f"Unrecognized configuration key: {permission.raw_key}",
            description=f"Unrecognized permission at key: {permission.raw_key}",
            remediation="Review this configuration key manually.",
        )

    level = rule.default_risk_level
    score = rule.base_score

    if (permission.persistence is Persistence.ALWAYS
            and permission.scope is Scope.GLOBAL
            and level is RiskLevel.MEDIUM):
        level = RiskLevel.HIGH
        score = min(10, score + 2)

    if permission.persistence is Persistence.SESSION and level is RiskLevel.HIGH:
        level = RiskLevel.MEDIUM
        score = max(1, score - 2)

    if permission.scope is Scope.REPO and level is RiskLevel.MEDIUM:
        score = max(1, score - 1)

    if (rule.id is RuleId.SHELL_RESTRICTED_ALWAYS and level is RiskLevel.MEDIUM
            and permission.constraints
            and _is_low_risk_command(permission.constraints[0])):
        level = RiskLevel.LOW
        score = max(1, score - 3)

    return Classification(
        risk_level=level,
        score=score,
        title=rule.title,
        summary=rule.summary,
        description=rule.description,
        remediation=rule.remediation,
    )
