"""agentperms - audit the permissions granted to AI coding agents."""

from __future__ import annotations

__version__ = "1.0.0"

from agentperms.models import (  # noqa: E402
    Capability,
    Finding,
    NormalizedPermission,
    Persistence,
    RiskLevel,
    ScanSummary,
    Scope,
)
from agentperms.scan import run_scan  # noqa: E402

__all__ = [
    "Capability",
    "Finding",
    "NormalizedPermission",
    "Persistence",
    "RiskLevel",
    "ScanSummary",
    "Scope",
    "__version__",
    "run_scan",
]
