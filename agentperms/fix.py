"""Fix planner: turn findings into exact, whole-file config mutations.

Only findings whose setting can be expressed as a single edit get an
action. Selection and confirmation belong to the caller.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import Any, Callable, Iterable

import yaml

from agentperms.models import RISK_ORDER, Finding, RiskLevel, ScanSummary
from agentperms.readers import ConfigLoader
from agentperms.rules import RuleId

logger = logging.getLogger(__name__)

FIXABLE_RULES = frozenset({
    RuleId.SHELL_UNRESTRICTED_ALWAYS,
    RuleId.SHELL_RESTRICTED_ALWAYS,
    RuleId.TOOL_ALWAYS_ALLOWED,
    RuleId.TRUSTED_DIR_GLOBAL,
    RuleId.SENSITIVE_PATH_TRUSTED,
    RuleId.SKIP_ALL_CONFIRMATIONS,
    RuleId.AUTO_COMMITS_ENABLED,
})

JSON_SUFFIXES = frozenset({".json"})
YAML_SUFFIXES = frozenset({".yml", ".yaml"})


class FixError(RuntimeError):
    """The config no longer holds what the scan saw."""


@dataclass(frozen=True)
class FixAction:
    finding_id: str
    config_path: str
    label: str
    description: str
    risk_level: RiskLevel
    mutation: Callable[[], None] = field(repr=False, compare=False)

    def apply(self) -> None:
        self.mutation()


# ── Mutations ───────────────────────────────────────────────────────


def remove_from_json_array(config_path: str, key_path: str, value: str) -> None:
    """Drop ``value`` from the array at dotted ``key_path``; drop the key if it empties."""
    path = Path(config_path)
    document = json.loads(path.read_text(encoding="utf-8"))

    *parents, last = key_path.split(".")
    cursor: Any = document
    for key in parents:
        cursor = cursor.get(key) if isinstance(cursor, dict) else None
    if not isinstance(cursor, dict):
        raise FixError(f"{key_path} not found in {config_path}")

    items = cursor.get(last)
    if not isinstance(items, list) or value not in items:
        raise FixError(f"{value!r} not found under {key_path} in {config_path}")

    remaining = [item for item in items if item != value]
    if remaining:
        cursor[last] = remaining
    else:
        del cursor[last]

    path.write_text(json.dumps(document, indent=2, ensure_ascii=False) + "\n",
                    encoding="utf-8")


def update_yaml_key(config_path: str, key: str, value: Any = None,
                    delete: bool = False) -> None:
    path = Path(config_path)
    document = yaml.load(path.read_text(encoding="utf-8"), Loader=ConfigLoader) or {}
    if not isinstance(document, dict) or key not in document:
        raise FixError(f"{key} not found in {config_path}")

    if delete:
        del document[key]
    else:
        document[key] = value

    path.write_text(yaml.safe_dump(document, default_flow_style=False, sort_keys=False),
                    encoding="utf-8")


# ── Planning ────────────────────────────────────────────────────────


def fix_label(finding: Finding) -> str:
    value = finding.permission.raw_value
    if isinstance(value, str):
        return f"{finding.title}: {value}"
    return f"{finding.title} ({finding.permission.raw_key})"


def build_fix(finding: Finding) -> FixAction | None:
    """The single mutation that neutralizes ``finding``, or None if there isn't one."""
    try:
        rule_id = RuleId(finding.rule_id)
    except ValueError:
        return None
    if rule_id not in FIXABLE_RULES:
        return None

    config_path = finding.config_path
    raw_key = finding.permission.raw_key
    raw_value = finding.permission.raw_value
    suffix = Path(config_path).suffix.lower()

    mutation: Callable[[], None] | None = None
    if suffix in JSON_SUFFIXES and isinstance(raw_value, str):
        mutation = partial(remove_from_json_array, config_path, raw_key, raw_value)
    elif suffix in YAML_SUFFIXES and rule_id is RuleId.SKIP_ALL_CONFIRMATIONS:
        mutation = partial(update_yaml_key, config_path, raw_key, delete=True)
    elif suffix in YAML_SUFFIXES and rule_id is RuleId.AUTO_COMMITS_ENABLED:
        # false is an explicit opt-out, so keep the key
        mutation = partial(update_yaml_key, config_path, raw_key, False)

    if mutation is None:
        return None
    return FixAction(
        finding_id=finding.id,
        config_path=config_path,
        label=fix_label(finding),
        description=finding.remediation,
        risk_level=finding.risk_level,
        mutation=mutation,
    )


def plan_fixes(summary: ScanSummary) -> list[FixAction]:
    """Fix actions for every fixable non-info finding, highest risk first."""
    ranked = sorted((f for f in summary.findings if f.risk_level is not RiskLevel.INFO),
                    key=lambda f: (RISK_ORDER[f.risk_level], -f.score))
    actions = []
    for finding in ranked:
        action = build_fix(finding)
        if action is not None:
            actions.append(action)
    return actions


def apply_fixes(actions: Iterable[FixAction]
                ) -> tuple[list[FixAction], list[tuple[FixAction, str]]]:
    """Apply each action on its own; one failure never blocks the rest."""
    applied: list[FixAction] = []
    failed: list[tuple[FixAction, str]] = []
    for action in actions:
        try:
            action.apply()
        except (OSError, ValueError, yaml.YAMLError, FixError) as exc:
            logger.warning("fix failed for %s: %s", action.finding_id, exc)
            failed.append((action, str(exc)))
            continue
        logger.info("applied fix %s to %s", action.finding_id, action.config_path)
        applied.append(action)
    return applied, failed
