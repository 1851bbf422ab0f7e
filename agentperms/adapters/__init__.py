"""One adapter per supported agent."""

from __future__ import annotations

from pathlib import Path

from agentperms.adapters.aider import AiderAdapter
from agentperms.adapters.base import Adapter, ConfigLocation
from agentperms.adapters.claude_code import ClaudeCodeAdapter
from agentperms.adapters.codex import CodexAdapter
from agentperms.adapters.copilot import CopilotAdapter
from agentperms.adapters.cursor import CursorAdapter
from agentperms.adapters.gemini import GeminiAdapter

ADAPTER_CLASSES: tuple[type[Adapter], ...] = (
    ClaudeCodeAdapter,
    CursorAdapter,
    CodexAdapter,
    GeminiAdapter,
    CopilotAdapter,
    AiderAdapter,
)


def all_adapters(home: Path) -> list[Adapter]:
    return [cls(home) for cls in ADAPTER_CLASSES]


__all__ = [
    "ADAPTER_CLASSES",
    "Adapter",
    "AiderAdapter",
    "ClaudeCodeAdapter",
    "CodexAdapter",
    "ConfigLocation",
    "CopilotAdapter",
    "CursorAdapter",
    "GeminiAdapter",
    "all_adapters",
]
