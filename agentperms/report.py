"""Terminal, JSON and Markdown output for a ``ScanSummary``."""

from __future__ import annotations

import json
from pathlib import Path

from agentperms import __version__
from agentperms.fix import FixAction
from agentperms.models import RISK_ORDER, Finding, RiskLevel, ScanSummary
from agentperms.readers import shorten_path

R = "\033[0m"
B = "\033[1m"
D = "\033[2m"

RISK_COLORS = {
    RiskLevel.HIGH: "\033[91m",
    RiskLevel.MEDIUM: "\033[93m",
    RiskLevel.LOW: "\033[36m",
    RiskLevel.INFO: "\033[90m",
}
RISK_BADGES = {
    RiskLevel.HIGH: "HIGH",
    RiskLevel.MEDIUM: "MED ",
    RiskLevel.LOW: "LOW ",
    RiskLevel.INFO: "INFO",
}
MARKDOWN_ICONS = {
    RiskLevel.HIGH: "🔴 High",
    RiskLevel.MEDIUM: "🟡 Medium",
    RiskLevel.LOW: "🔵 Low",
    RiskLevel.INFO: "⚪ Info",
}


def sort_findings(findings: tuple[Finding, ...] | list[Finding]) -> list[Finding]:
    return sorted(findings, key=lambda f: (RISK_ORDER[f.risk_level], -f.score))


def score_bar(score: int, width: int = 6) -> str:
    filled = round(score / 10 * width)
    return "█" * filled + "░" * (width - filled) + f" {score}/10"


def _duration(ms: int) -> str:
    return f"{ms}ms" if ms < 1000 else f"{ms / 1000:.1f}s"


# ── Terminal ────────────────────────────────────────────────────────


def print_results(summary: ScanSummary, home: Path, quiet: bool = False,
                  verbose: bool = False) -> None:
    print(f"\n{B}agentperms{R} {D}AI agent permission scanner{R}")
    print(f"{D}{'─' * 62}{R}")

    if not summary.agents_detected:
        print(f"\n  {D}No supported AI agent configs detected.{R}\n")
        _print_footer(summary)
        return

    findings = sort_findings(summary.findings)
    if quiet:
        findings = [f for f in findings if f.risk_level is RiskLevel.HIGH]

    if not findings and summary.findings:
        print(f"\n  {B}✓ No high-risk findings.{R} {D}{len(summary.findings)} lower-risk "
              f"finding(s) hidden by --quiet.{R}\n")
        _print_footer(summary)
        return

    if not findings:
        print(f"\n  {B}✓ All clear.{R} {D}No risky permissions found across "
              f"{len(summary.agents_detected)} agent(s).{R}\n")
        _print_footer(summary)
        return

    current_group = ""
    last_project = ""
    for index, f in enumerate(findings, 1):
        if summary.stats.projects_scanned > 1 and f.project_dir != last_project:
            print(f"\n{B}{shorten_path(f.project_dir, home)}{R}")
            last_project = f.project_dir
        group = f"{f.agent_label}::{f.config_path}"
        if group != current_group:
            current_group = group
            print(f"\n  {B}{f.agent_label}{R}  {D}·  {shorten_path(f.config_path, home)}{R}")

        c = RISK_COLORS[f.risk_level]
        print(f"    {D}{index}.{R} {c}{RISK_BADGES[f.risk_level]}{R}  {B}{f.title}{R}")
        print(f"       {D}risk score{R} {c}{score_bar(f.score)}{R}")
        print(f"       {D}{f.summary}{R}")
        if verbose:
            print(f"       {D}{f.permission.raw_key} = {json.dumps(f.permission.raw_value)}{R}")
            print(f"       → {f.remediation}")
        print(f"       {D}id: {f.id}{R}")

    print()
    _print_footer(summary)


def _print_footer(summary: ScanSummary) -> None:
    stats = summary.stats
    counts = (f"{RISK_COLORS[RiskLevel.HIGH]}{summary.high_count} high{R}  ·  "
              f"{RISK_COLORS[RiskLevel.MEDIUM]}{summary.medium_count} medium{R}  ·  "
              f"{RISK_COLORS[RiskLevel.LOW]}{summary.low_count} low{R}")
    if stats.projects_scanned > 1:
        scope = f"{stats.projects_scanned} projects"
    else:
        scope = f"{len(summary.agents_detected)} agent(s) detected"
    print(f"  {counts}    {D}{_duration(stats.duration_ms)}  ·  {scope}{R}")
    if summary.high_count or summary.medium_count:
        print(f"\n  {D}run{R} agentperms explain <id> {D}for full detail and remediation{R}")
    print()


def print_explain(finding: Finding, home: Path) -> None:
    c = RISK_COLORS[finding.risk_level]
    perm = finding.permission
    print(f"\n  {B}agentperms{R}  {D}explain{R}\n")
    print(f"  {B}{finding.title}{R}")
    print(f"  {D}{'─' * 62}{R}\n")
    print(f"  {D}agent{R}        {finding.agent_label}")
    print(f"  {D}risk{R}         {c}{finding.risk_level.value.upper()}{R}  "
          f"{c}{score_bar(finding.score, 8)}{R}")
    print(f"  {D}rule{R}         {finding.rule_id}")
    print(f"  {D}config{R}       {shorten_path(finding.config_path, home)}")
    print(f"  {D}key{R}          {perm.raw_key}")
    print(f"  {D}value{R}        {json.dumps(perm.raw_value)}")
    print(f"  {D}capability{R}   {perm.capability.value}")
    print(f"  {D}scope{R}        {perm.scope.value}")
    print(f"  {D}persistence{R}  {perm.persistence.value}")
    if perm.constraints:
        print(f"  {D}constraints{R}  {', '.join(perm.constraints)}")
    print(f"\n  {B}What this means{R}")
    print(f"  {finding.description}")
    print(f"\n  {B}How to fix it{R}")
    print(f"  → {finding.remediation}\n")


def print_fix_results(applied: list[FixAction],
                      failed: list[tuple[FixAction, str]], home: Path) -> None:
    by_file: dict[str, list[str]] = {}
    for action in applied:
        by_file.setdefault(action.config_path, []).append(action.label)
    print()
    for config_path, labels in by_file.items():
        print(f"  ✓  {D}{shorten_path(config_path, home)}{R}")
        for label in labels:
            print(f"       {D}fixed{R}  {label}")
    for action, error in failed:
        print(f"  {RISK_COLORS[RiskLevel.HIGH]}✗{R}  {action.label}: {error}")
    print(f"\n  {B}{len(applied)} fix(es) applied{R}  {D}run agentperms scan to verify.{R}\n")


# ── Files ───────────────────────────────────────────────────────────


def render_json(summary: ScanSummary) -> str:
    return json.dumps(summary.to_dict(__version__), indent=2, ensure_ascii=False) + "\n"


def _markdown_finding(f: Finding, home: Path) -> str:
    perm = f.permission
    return "\n".join([
        f"### [{f.risk_level.value.upper()}] {f.title}",
        "",
        "| Field | Value |",
        "|-------|-------|",
        f"| Agent | {f.agent_label} |",
        f"| Risk score | {f.score}/10 |",
        f"| Config | `{shorten_path(f.config_path, home)}` |",
        f"| Key | `{perm.raw_key}` |",
        f"| Value | `{json.dumps(perm.raw_value)}` |",
        f"| Capability | {perm.capability.value} |",
        f"| Scope | {perm.scope.value} |",
        f"| ID | `{f.id}` |",
        "",
        f"**What this means:** {f.description}",
        "",
        f"**How to fix it:** {f.remediation}",
    ])


def render_markdown(summary: ScanSummary, home: Path) -> str:
    stats = summary.stats
    lines = [
        "# agentperms Security Report",
        "",
        f"**Scanned at:** {summary.scanned_at}",
        f"**Duration:** {stats.duration_ms}ms",
        f"**Projects scanned:** {stats.projects_scanned}",
        "",
        "## Summary",
        "",
        "| Risk Level | Count |",
        "|------------|-------|",
        f"| {MARKDOWN_ICONS[RiskLevel.HIGH]} | {summary.high_count} |",
        f"| {MARKDOWN_ICONS[RiskLevel.MEDIUM]} | {summary.medium_count} |",
        f"| {MARKDOWN_ICONS[RiskLevel.LOW]} | {summary.low_count} |",
        f"| {MARKDOWN_ICONS[RiskLevel.INFO]} | {summary.info_count} |",
        "",
        f"**Agents detected:** {', '.join(summary.agents_detected) or 'none'}",
        "",
        "## Findings",
        "",
    ]
    if not summary.findings:
        lines.append("✅ No findings detected. Agent configurations look clean.")
    for f in sort_findings(summary.findings):
        lines.append(_markdown_finding(f, home))
        lines.append("")
    return "\n".join(lines) + "\n"
