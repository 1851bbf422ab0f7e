"""Scan orchestration: project discovery, adapter fan-out, dedup, stats."""

from __future__ import annotations

import logging
import os
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Sequence

from agentperms.adapters import Adapter, all_adapters
from agentperms.models import Finding, ScanStats, ScanSummary, build_summary
from agentperms.readers import resolve_home

logger = logging.getLogger(__name__)

# Never descended into; hidden directories are skipped as well.
SKIP_DIRS = frozenset({
    "node_modules", ".git", "dist", "build", "out", ".next", ".nuxt",
    "__pycache__", ".venv", "venv", ".cache", "coverage", ".turbo",
    "vendor", "bower_components", "target", ".gradle",
})


# ── Discovery ───────────────────────────────────────────────────────


def _detects(adapter: Adapter, directory: Path) -> bool:
    try:
        return adapter.detect(directory)
    except Exception as exc:  # adapters promise not to raise; don't trust it
        logger.debug("%s: detect failed in %s: %s", adapter.agent_id, directory, exc)
        return False


def _subdirectories(directory: Path) -> list[Path]:
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as exc:
        logger.debug("cannot list %s: %s", directory, exc)
        return []
    subdirs = []
    for entry in entries:
        if entry.name in SKIP_DIRS or entry.name.startswith("."):
            continue
        try:
            if entry.is_dir(follow_symlinks=False):
                subdirs.append(Path(entry.path))
        except OSError:
            continue
    return subdirs


def find_project_dirs(root: Path, max_depth: int,
                      adapters: Sequence[Adapter]) -> list[Path]:
    """Root first, then every directory up to ``max_depth`` that some agent detects."""
    projects: list[Path] = []
    seen: set[Path] = set()

    def walk(directory: Path, depth: int) -> None:
        key = directory.resolve()
        if key in seen:
            return
        seen.add(key)

        if depth == 0 or any(_detects(a, directory) for a in adapters):
            projects.append(directory)
        if depth >= max_depth:
            return
        for sub in _subdirectories(directory):
            walk(sub, depth + 1)

    walk(root, 0)
    return projects


# ── Scan ────────────────────────────────────────────────────────────


def dedupe_findings(findings: list[Finding]) -> list[Finding]:
    """Keep the first finding per id.

    Home-scoped configs are seen again under every project directory.
    """
    seen: set[str] = set()
    unique = []
    for f in findings:
        if f.id in seen:
            continue
        seen.add(f.id)
        unique.append(f)
    return unique


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def run_scan(project_dir: str | Path, depth: int = 0,
             adapters: Sequence[Adapter] | None = None,
             home: Path | None = None) -> ScanSummary:
    """Scan ``project_dir`` and, up to ``depth`` levels down, every detected project."""
    root = Path(project_dir)
    if adapters is None:
        adapters = all_adapters(home if home is not None else resolve_home())

    start = time.perf_counter()
    project_dirs = find_project_dirs(root, max(0, depth), adapters)

    collected: list[Finding] = []
    detected: dict[str, None] = {}
    scanned: dict[str, None] = {}
    configs_checked = 0
    configs_found = 0

    for directory in project_dirs:
        for adapter in adapters:
            if not _detects(adapter, directory):
                continue
            detected[adapter.agent_id] = None
            configs_checked += 1
            try:
                findings = adapter.scan(directory)
            except Exception as exc:
                logger.warning("could not scan %s in %s: %s",
                               adapter.agent_label, directory, exc)
                continue
            configs_found += 1
            scanned[adapter.agent_id] = None
            collected.extend(findings)

    findings = dedupe_findings(collected)
    stats = ScanStats(
        configs_checked=configs_checked,
        configs_found=configs_found,
        projects_scanned=len(project_dirs),
        duration_ms=round((time.perf_counter() - start) * 1000),
    )
    logger.debug("scanned %d project(s), %d finding(s) after dedup (%d raw)",
                 len(project_dirs), len(findings), len(collected))
    return build_summary(findings, list(detected), list(scanned), stats, _utc_now())
