"""Tests for project discovery and the scan orchestrator."""

import json

import pytest

from agentperms.adapters import AiderAdapter, ClaudeCodeAdapter
from agentperms.models import RiskLevel
from agentperms.scan import dedupe_findings, find_project_dirs, run_scan
from conftest import write_json, write_text


class ExplodingAdapter(ClaudeCodeAdapter):
    """Detects everywhere, then fails while scanning."""

    agent_id = "exploding"

    def detect(self, project_dir):
        return True

    def scan(self, project_dir):
        raise RuntimeError("boom")


@pytest.fixture
def workspace(tmp_path):
    """Root with a detected app, an undetected lib and skipped directories."""
    root = tmp_path / "workspace"
    write_json(root / "app" / ".claude" / "settings.json", {"allowedTools": ["Bash"]})
    (root / "lib").mkdir(parents=True)
    write_json(root / "node_modules" / "pkg" / ".claude" / "settings.json",
               {"allowedTools": ["Bash"]})
    write_json(root / ".hidden" / ".claude" / "settings.json", {"allowedTools": ["Bash"]})
    write_text(root / "app" / "nested" / ".aider.conf.yml", "yes: true\n")
    return root


# ── Discovery ───────────────────────────────────────────────────────


def test_depth_zero_is_root_only(workspace, adapters):
    """Depth 0 never descends."""
    assert find_project_dirs(workspace, 0, adapters) == [workspace]


def test_depth_one_finds_detected_children(workspace, adapters):
    """Only detected subdirectories are added; the root is always first."""
    assert find_project_dirs(workspace, 1, adapters) == [workspace, workspace / "app"]


def test_depth_two_finds_nested(workspace, adapters):
    """Deeper projects appear in discovery order."""
    dirs = find_project_dirs(workspace, 2, adapters)
    assert dirs == [workspace, workspace / "app", workspace / "app" / "nested"]


def test_skip_and_hidden_dirs_not_descended(workspace, adapters):
    """node_modules and dot-directories are never scanned."""
    dirs = find_project_dirs(workspace, 5, adapters)
    assert all("node_modules" not in d.parts for d in dirs)
    assert all(".hidden" not in d.parts for d in dirs)


def test_symlink_not_followed(workspace, adapters):
    """A symlinked directory is not walked a second time."""
    (workspace / "link").symlink_to(workspace / "app", target_is_directory=True)
    dirs = find_project_dirs(workspace, 1, adapters)
    assert workspace / "link" not in dirs


# ── Orchestration ───────────────────────────────────────────────────


def test_run_scan_depth_zero(workspace, home):
    """A root with no configs reports nothing."""
    summary = run_scan(workspace, home=home)
    assert summary.stats.projects_scanned == 1
    assert summary.findings == ()
    assert summary.agents_detected == ()
    assert not summary.has_high


def test_run_scan_nested_projects(workspace, home):
    """Findings from every discovered project are aggregated."""
    summary = run_scan(workspace, depth=2, home=home)
    assert summary.stats.projects_scanned == 3
    assert set(summary.agents_detected) == {"claude-code", "aider"}
    assert summary.high_count == 2
    assert summary.has_high


def test_home_config_deduplicated_across_projects(workspace, home):
    """A home-scoped finding seen from every project is reported once."""
    write_text(home / ".aider.conf.yml", "yes: true\n")
    summary = run_scan(workspace, depth=1, home=home)

    assert summary.stats.projects_scanned > 1
    ids = [f.id for f in summary.findings]
    assert len(ids) == len(set(ids))
    assert ids.count("aider::yes::true") == 1


def test_counts_sum_to_findings(workspace, home):
    """Per-level counts always add up."""
    write_json(home / ".claude" / "settings.json",
               {"allowedTools": ["Read", "Bash(npm test)", "Bash(ls)"]})
    summary = run_scan(workspace, depth=2, home=home)
    total = summary.high_count + summary.medium_count + summary.low_count + summary.info_count
    assert total == len(summary.findings)
    assert summary.low_count >= 2


def test_adapter_failure_is_isolated(workspace, home, caplog):
    """One adapter raising does not stop the others."""
    write_text(workspace / ".aider.conf.yml", "yes: true\n")
    summary = run_scan(workspace, adapters=[ExplodingAdapter(home), AiderAdapter(home)])

    assert [f.agent_id for f in summary.findings] == ["aider"]
    assert summary.agents_detected == ("exploding", "aider")
    assert summary.agents_scanned == ("aider",)
    assert summary.stats.configs_checked == 2
    assert summary.stats.configs_found == 1
    assert "boom" in caplog.text


def test_dedupe_keeps_first(workspace, home):
    """The first finding per id wins."""
    write_json(workspace / ".claude" / "settings.json", {"allowedTools": ["Bash"]})
    findings = ClaudeCodeAdapter(home).scan(workspace)
    assert dedupe_findings(findings + findings) == findings


def test_summary_json_shape(workspace, home):
    """The summary serialises to the camelCase report document."""
    write_json(workspace / ".claude" / "settings.json", {"allowedTools": ["Bash"]})
    data = json.loads(json.dumps(run_scan(workspace, home=home).to_dict("1.0.0")))

    assert data["version"] == "1.0.0"
    assert data["scannedAt"].endswith("Z")
    assert data["summary"] == {"agentsDetected": ["claude-code"], "high": 1,
                               "medium": 0, "low": 0, "info": 0}
    assert set(data["stats"]) == {"configsChecked", "configsFound", "projectsScanned", "durationMs"}
    finding = data["findings"][0]
    assert finding["riskLevel"] == "high"
    assert finding["ruleId"] == "SHELL_UNRESTRICTED_ALWAYS"
    assert finding["permission"]["rawValue"] == "Bash"
    assert finding["permission"]["scope"] == "global"
    assert RiskLevel(finding["riskLevel"]) is RiskLevel.HIGH
