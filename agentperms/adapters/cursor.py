"""Cursor CLI: ``~/.cursor/cli-config.json`` and the project's ``.cursor/cli.json``."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field

from agentperms.adapters.base import Adapter, AllowDeny, ConfigLocation, ConfigModel
from agentperms.models import Finding, Scope


class CursorConfig(ConfigModel):
    permissions: AllowDeny | None = None
    trusted_paths: list[str] | None = Field(default=None, alias="trustedPaths")


class CursorAdapter(Adapter):
    agent_id = "cursor"
    agent_label = "Cursor"
    config_format = "json"
    schema = CursorConfig

    def locations(self, project_dir: Path) -> list[ConfigLocation]:
        return [
            ConfigLocation(self.home / ".cursor" / "cli-config.json", Scope.GLOBAL),
            ConfigLocation(project_dir / ".cursor" / "cli.json", Scope.REPO),
        ]

    def extract(self, config: CursorConfig, location: ConfigLocation,
                project_dir: Path) -> list[Finding]:
        findings: list[Finding] = []
        if config.permissions is not None:
            findings += self.allow_findings(config.permissions.allow, "permissions.allow",
                                            location, project_dir)
        findings += self.trusted_dir_findings(config.trusted_paths, "trustedPaths",
                                              location, project_dir)
        return findings
