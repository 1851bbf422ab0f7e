"""Claude Code: ``settings.json`` / ``settings.local.json`` in ``~/.claude`` and per project."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field

from agentperms.adapters.base import (
    Adapter,
    AllowDeny,
    ConfigLocation,
    ConfigModel,
    McpServer,
)
from agentperms.models import Finding, Scope


class ClaudeSettings(ConfigModel):
    allowed_tools: list[str] | None = Field(default=None, alias="allowedTools")
    permissions: AllowDeny | None = None
    mcp_servers: dict[str, McpServer] | None = Field(default=None, alias="mcpServers")


class ClaudeCodeAdapter(Adapter):
    agent_id = "claude-code"
    agent_label = "Claude Code"
    config_format = "json"
    schema = ClaudeSettings

    def locations(self, project_dir: Path) -> list[ConfigLocation]:
        return [
            ConfigLocation(self.home / ".claude" / "settings.json", Scope.GLOBAL),
            ConfigLocation(project_dir / ".claude" / "settings.json", Scope.REPO),
            ConfigLocation(project_dir / ".claude" / "settings.local.json", Scope.REPO),
        ]

    def extract(self, config: ClaudeSettings, location: ConfigLocation,
                project_dir: Path) -> list[Finding]:
        findings = self.allow_findings(config.allowed_tools, "allowedTools",
                                       location, project_dir)
        if config.permissions is not None:
            findings += self.allow_findings(config.permissions.allow, "permissions.allow",
                                            location, project_dir)
        findings += self.mcp_findings(config.mcp_servers, location, project_dir)
        return findings
