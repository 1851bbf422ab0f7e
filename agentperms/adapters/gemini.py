"""Gemini CLI: ``~/.gemini/settings.json``."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, StrictBool

from agentperms.adapters.base import Adapter, ConfigLocation, ConfigModel, McpServer
from agentperms.models import Capability, Finding, Scope
from agentperms.rules import RuleId


class GeminiSettings(ConfigModel):
    trusted_folders: list[str] | None = Field(default=None, alias="trustedFolders")
    sandbox_enabled: StrictBool | None = Field(default=None, alias="sandboxEnabled")
    mcp_servers: dict[str, McpServer] | None = Field(default=None, alias="mcpServers")


class GeminiAdapter(Adapter):
    agent_id = "gemini"
    agent_label = "Gemini CLI"
    config_format = "json"
    schema = GeminiSettings

    def locations(self, project_dir: Path) -> list[ConfigLocation]:
        return [ConfigLocation(self.home / ".gemini" / "settings.json", Scope.GLOBAL)]

    def extract(self, config: GeminiSettings, location: ConfigLocation,
                project_dir: Path) -> list[Finding]:
        findings = self.trusted_dir_findings(config.trusted_folders, "trustedFolders",
                                             location, project_dir)
        if config.sandbox_enabled is False:
            findings.append(self.flag_finding(
                "sandboxEnabled", False, RuleId.SANDBOX_DISABLED, Capability.SHELL,
                location, project_dir))
        findings += self.mcp_findings(config.mcp_servers, location, project_dir)
        return findings
