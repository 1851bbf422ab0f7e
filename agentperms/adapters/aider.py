"""Aider: ``.aider.conf.yml`` in the home directory and in the project."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, StrictBool

from agentperms.adapters.base import Adapter, ConfigLocation, ConfigModel
from agentperms.models import Capability, Finding, Scope
from agentperms.rules import RuleId


class AiderConfig(ConfigModel):
    yes: StrictBool | None = None
    auto_commits: StrictBool | None = Field(default=None, alias="auto-commits")
    shell: StrictBool | None = None


class AiderAdapter(Adapter):
    agent_id = "aider"
    agent_label = "Aider"
    config_format = "yaml"
    schema = AiderConfig

    def locations(self, project_dir: Path) -> list[ConfigLocation]:
        return [
            ConfigLocation(self.home / ".aider.conf.yml", Scope.GLOBAL),
            ConfigLocation(project_dir / ".aider.conf.yml", Scope.REPO),
        ]

    def extract(self, config: AiderConfig, location: ConfigLocation,
                project_dir: Path) -> list[Finding]:
        findings = []
        if config.yes is True:
            findings.append(self.flag_finding(
                "yes", True, RuleId.SKIP_ALL_CONFIRMATIONS, Capability.SHELL,
                location, project_dir))
        if config.auto_commits is True:
            findings.append(self.flag_finding(
                "auto-commits", True, RuleId.AUTO_COMMITS_ENABLED, Capability.FS_WRITE,
                location, project_dir, scope=Scope.REPO))
        if config.shell is True:
            findings.append(self.flag_finding(
                "shell", True, RuleId.SHELL_UNRESTRICTED_ALWAYS, Capability.SHELL,
                location, project_dir))
        return findings
