"""Codex CLI: ``~/.codex/config.toml``."""

from __future__ import annotations

from pathlib import Path

from pydantic import StrictBool

from agentperms.adapters.base import Adapter, ConfigLocation, ConfigModel
from agentperms.models import Capability, Finding, Scope
from agentperms.rules import RuleId

AUTO_APPROVAL_POLICIES = frozenset({"auto", "never"})
UNSANDBOXED_MODE = "danger-full-access"


class CodexSandbox(ConfigModel):
    enabled: StrictBool | None = None


class CodexConfig(ConfigModel):
    approval_policy: str | None = None
    full_auto: StrictBool | None = None
    sandbox: CodexSandbox | None = None
    sandbox_mode: str | None = None


class CodexAdapter(Adapter):
    agent_id = "codex"
    agent_label = "Codex CLI"
    config_format = "toml"
    schema = CodexConfig

    def locations(self, project_dir: Path) -> list[ConfigLocation]:
        return [ConfigLocation(self.home / ".codex" / "config.toml", Scope.GLOBAL)]

    def extract(self, config: CodexConfig, location: ConfigLocation,
                project_dir: Path) -> list[Finding]:
        findings = []

        if config.full_auto is True:
            findings.append(self.flag_finding(
                "full_auto", True, RuleId.APPROVAL_POLICY_AUTO, Capability.SHELL,
                location, project_dir))
        elif config.approval_policy in AUTO_APPROVAL_POLICIES:
            findings.append(self.flag_finding(
                "approval_policy", config.approval_policy, RuleId.APPROVAL_POLICY_AUTO,
                Capability.SHELL, location, project_dir))

        if config.sandbox is not None and config.sandbox.enabled is False:
            findings.append(self.flag_finding(
                "sandbox.enabled", False, RuleId.SANDBOX_DISABLED, Capability.SHELL,
                location, project_dir))
        elif config.sandbox_mode == UNSANDBOXED_MODE:
            findings.append(self.flag_finding(
                "sandbox_mode", UNSANDBOXED_MODE, RuleId.SANDBOX_DISABLED,
                Capability.SHELL, location, project_dir))

        return findings
