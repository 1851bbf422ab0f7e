"""Tests for finding ids, the rule registry and the classifier."""

from dataclasses import replace

import pytest

from agentperms.classifier import base_command, classify, command_tokens, is_sensitive_path
from agentperms.models import (
    Capability,
    NormalizedPermission,
    Persistence,
    RiskLevel,
    Scope,
    ScanStats,
    build_summary,
    make_finding_id,
)
from agentperms.rules import RULES, RuleId, get_rule


def perm(capability=Capability.SHELL, scope=Scope.GLOBAL,
         persistence=Persistence.ALWAYS, raw_key="allowedTools",
         raw_value="Bash", constraints=()):
    return NormalizedPermission(capability, scope, persistence, raw_key, raw_value,
                                tuple(constraints))


def shell_pattern(pattern):
    return perm(scope=Scope.REPO, raw_value=pattern, constraints=(pattern,))


# ── Finding ids ─────────────────────────────────────────────────────


def test_finding_id_joins_parts():
    """Parts are joined with '::'."""
    assert make_finding_id("claude-code", "allowedTools", "Bash") == "claude-code::allowedtools::bash"


def test_finding_id_collapses_whitespace():
    """Runs of whitespace become a single dash."""
    assert make_finding_id("claude-code", "permissions.allow", "Bash(npm   run *)") == \
        "claude-code::permissions.allow::bash(npm-run-*)"


def test_finding_id_is_pure():
    """Same parts, same id."""
    parts = ("aider", "yes", "True")
    assert make_finding_id(*parts) == make_finding_id(*parts)


def test_finding_id_distinct_inputs():
    """Different agent, key or value gives a different id."""
    ids = {
        make_finding_id("claude-code", "allowedTools", "Bash"),
        make_finding_id("cursor", "allowedTools", "Bash"),
        make_finding_id("claude-code", "permissions.allow", "Bash"),
        make_finding_id("claude-code", "allowedTools", "Read"),
    }
    assert len(ids) == 4


def test_finding_id_is_lowercase():
    """Ids never contain upper-case letters."""
    fid = make_finding_id("Codex", "SANDBOX_MODE", "Danger-Full-Access")
    assert fid == fid.lower()


# ── Rule registry ───────────────────────────────────────────────────


def test_registry_has_every_rule():
    """Each RuleId has exactly one rule."""
    assert set(RULES) == set(RuleId)
    assert len(RULES) == 14


def test_rule_scores_in_range():
    """Base scores stay within 1..10."""
    for rule in RULES.values():
        assert 1 <= rule.base_score <= 10
        assert rule.title and rule.remediation


def test_get_rule_unknown():
    """Unknown ids return None instead of raising."""
    assert get_rule("NOT_A_RULE") is None
    assert get_rule("SANDBOX_DISABLED").id is RuleId.SANDBOX_DISABLED


# ── Classifier: adjustments ─────────────────────────────────────────


def test_unknown_rule_is_info():
    """An unregistered rule classifies as info with score 1."""
    result = classify(perm(raw_key="mystery"), "NOT_A_RULE")
    assert result.risk_level is RiskLevel.INFO
    assert result.score == 1
    assert result.title == "Unknown permission"
    assert "mystery" in result.summary


def test_unrestricted_shell_is_high():
    """A bare shell grant keeps its high default."""
    result = classify(perm(), RuleId.SHELL_UNRESTRICTED_ALWAYS)
    assert result.risk_level is RiskLevel.HIGH
    assert result.score >= 7


def test_always_global_medium_is_elevated():
    """Medium rules granted always and globally become high, score +2."""
    result = classify(perm(capability=Capability.MCP, raw_key="mcpServers.x"),
                      RuleId.MCP_SERVER_REGISTERED)
    assert result.risk_level is RiskLevel.HIGH
    assert result.score == 7


def test_session_high_is_downgraded():
    """High rules that only last a session drop to medium, score -2."""
    result = classify(perm(persistence=Persistence.SESSION), RuleId.SHELL_UNRESTRICTED_ALWAYS)
    assert result.risk_level is RiskLevel.MEDIUM
    assert result.score == 7


def test_repo_medium_loses_a_point():
    """Repo-scoped medium grants stay medium at score -1."""
    result = classify(perm(capability=Capability.MCP, scope=Scope.REPO),
                      RuleId.MCP_SERVER_REGISTERED)
    assert result.risk_level is RiskLevel.MEDIUM
    assert result.score == 4


def test_elevated_trusted_dir_score():
    """A global trusted directory is elevated from 6 to 8."""
    result = classify(perm(capability=Capability.FS_WRITE, raw_value="~"),
                      RuleId.TRUSTED_DIR_GLOBAL)
    assert result.risk_level is RiskLevel.HIGH
    assert result.score == 8


def test_elevation_clamps_at_ten(monkeypatch):
    """Elevating a medium rule with base score 9 stops at 10."""
    rule = RULES[RuleId.MCP_SERVER_REGISTERED]
    monkeypatch.setitem(RULES, RuleId.MCP_SERVER_REGISTERED, replace(rule, base_score=9))
    result = classify(perm(capability=Capability.MCP), RuleId.MCP_SERVER_REGISTERED)
    assert result.risk_level is RiskLevel.HIGH
    assert result.score == 10


def test_session_downgrade_feeds_repo_adjustment():
    """Steps chain: a repo session high goes 9 -> 7 medium -> 6."""
    result = classify(perm(scope=Scope.REPO, persistence=Persistence.SESSION),
                      RuleId.SHELL_UNRESTRICTED_ALWAYS)
    assert result.risk_level is RiskLevel.MEDIUM
    assert result.score == 6


def test_session_medium_is_not_elevated():
    """Only always-persistent grants are elevated; a global session medium stays 5."""
    result = classify(perm(capability=Capability.MCP, persistence=Persistence.SESSION),
                      RuleId.MCP_SERVER_REGISTERED)
    assert result.risk_level is RiskLevel.MEDIUM
    assert result.score == 5


# ── Classifier: restricted shell commands ───────────────────────────


@pytest.mark.parametrize("pattern", [
    "Bash(npm run *)",
    "Bash(git push:*)",
    "Bash(curl https://example.com)",
    "Bash(python script.py)",
    "Bash(rm -rf build)",
])
def test_restricted_shell_medium(pattern):
    """Package managers, git mutations, network and interpreters stay medium."""
    result = classify(shell_pattern(pattern), RuleId.SHELL_RESTRICTED_ALWAYS)
    assert result.risk_level is RiskLevel.MEDIUM
    assert result.score == 4


@pytest.mark.parametrize("pattern", [
    "Bash(git status)",
    "Bash(ls -la)",
    "Bash(echo hello)",
    "Bash(python -m py_compile --check x.py)",
])
def test_restricted_shell_low(pattern):
    """Read-only commands and interpreter syntax checks drop to low."""
    result = classify(shell_pattern(pattern), RuleId.SHELL_RESTRICTED_ALWAYS)
    assert result.risk_level is RiskLevel.LOW
    assert result.score == 1


def test_command_tokens_strip_wrapper():
    """Tool wrapper and trailing ':*' are removed."""
    assert command_tokens("Bash(git add:*)") == ["git", "add"]
    assert command_tokens("npm test") == ["npm", "test"]


def test_base_command_prefers_two_words():
    """Two-word entries like 'git add' win over the first token."""
    assert base_command("Bash(git add .)") == "git add"
    assert base_command("Bash(git log)") == "git"
    assert base_command("Bash()") == ""


def test_classify_is_idempotent():
    """Classifying the same permission twice gives the same result."""
    p = shell_pattern("Bash(npm install)")
    assert classify(p, RuleId.SHELL_RESTRICTED_ALWAYS) == classify(p, RuleId.SHELL_RESTRICTED_ALWAYS)


def test_classify_accepts_plain_string_rule_id():
    """Rule ids may be passed as their string values."""
    assert classify(perm(), "SHELL_UNRESTRICTED_ALWAYS") == \
        classify(perm(), RuleId.SHELL_UNRESTRICTED_ALWAYS)


# ── Sensitive paths ─────────────────────────────────────────────────


@pytest.mark.parametrize("path", ["/home/u/.ssh", "/home/u/.aws/config", "/srv/app/.env",
                                  "/Users/u/Library/Keychains"])
def test_sensitive_paths(path):
    """Credential locations are recognised by substring."""
    assert is_sensitive_path(path)


def test_ordinary_path_not_sensitive():
    """Plain project paths are not sensitive."""
    assert not is_sensitive_path("/home/u/code/app")


# ── Summary counts ──────────────────────────────────────────────────


def test_summary_counts_sum_to_findings():
    """Level counts add up to the number of findings."""
    summary = build_summary([], ["aider"], ["aider"], ScanStats(), "2026-01-01T00:00:00.000Z")
    total = summary.high_count + summary.medium_count + summary.low_count + summary.info_count
    assert total == len(summary.findings) == 0
    assert not summary.has_high
