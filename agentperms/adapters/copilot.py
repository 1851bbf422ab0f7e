"""GitHub Copilot CLI: ``~/.copilot/config.json``."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, StrictBool

from agentperms.adapters.base import Adapter, ConfigLocation, ConfigModel
from agentperms.models import Capability, Finding, Scope
from agentperms.rules import RuleId


class CopilotConfig(ConfigModel):
    trusted_directories: list[str] | None = Field(
        default=None, alias="permanentlyTrustedDirectories")
    allowed_tools: list[str] | None = Field(default=None, alias="allowedTools")
    network_access: StrictBool | None = Field(default=None, alias="networkAccess")


class CopilotAdapter(Adapter):
    agent_id = "copilot"
    agent_label = "GitHub Copilot"
    config_format = "json"
    schema = CopilotConfig

    def locations(self, project_dir: Path) -> list[ConfigLocation]:
        return [ConfigLocation(self.home / ".copilot" / "config.json", Scope.GLOBAL)]

    def extract(self, config: CopilotConfig, location: ConfigLocation,
                project_dir: Path) -> list[Finding]:
        findings = self.trusted_dir_findings(
            config.trusted_directories, "permanentlyTrustedDirectories",
            location, project_dir)
        findings += self.allow_findings(config.allowed_tools, "allowedTools",
                                        location, project_dir)
        if config.network_access is True:
            findings.append(self.flag_finding(
                "networkAccess", True, RuleId.NETWORK_UNRESTRICTED, Capability.NETWORK,
                location, project_dir))
        return findings
