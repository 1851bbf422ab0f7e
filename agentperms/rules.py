"""Static rule registry plus the lookup tables the classifier relies on.

Nothing in here has behaviour; it is the data the classifier and the
adapters agree on. Changing any table changes reported risk levels.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from agentperms.models import RiskLevel


class RuleId(str, Enum):
    SHELL_UNRESTRICTED_ALWAYS = "SHELL_UNRESTRICTED_ALWAYS"
    SHELL_RESTRICTED_ALWAYS = "SHELL_RESTRICTED_ALWAYS"
    TOOL_ALWAYS_ALLOWED = "TOOL_ALWAYS_ALLOWED"
    MCP_SERVER_REGISTERED = "MCP_SERVER_REGISTERED"
    FS_WRITE_GLOBAL = "FS_WRITE_GLOBAL"
    FS_WRITE_REPO = "FS_WRITE_REPO"
    NETWORK_UNRESTRICTED = "NETWORK_UNRESTRICTED"
    TRUSTED_DIR_GLOBAL = "TRUSTED_DIR_GLOBAL"
    SENSITIVE_PATH_TRUSTED = "SENSITIVE_PATH_TRUSTED"
    SKIP_ALL_CONFIRMATIONS = "SKIP_ALL_CONFIRMATIONS"
    SANDBOX_DISABLED = "SANDBOX_DISABLED"
    AUTO_COMMITS_ENABLED = "AUTO_COMMITS_ENABLED"
    APPROVAL_POLICY_AUTO = "APPROVAL_POLICY_AUTO"
    SECRETS_IN_MCP_ENV = "SECRETS_IN_MCP_ENV"


@dataclass(frozen=True)
class Rule:
    id: RuleId
    default_risk_level: RiskLevel
    base_score: int
    title: str
    summary: str  # one line for terminal output
    description: str  # full prose for JSON / Markdown
    remediation: str


# ── Rule definitions ────────────────────────────────────────────────

_RULE_LIST: list[Rule] = [
    Rule(RuleId.SHELL_UNRESTRICTED_ALWAYS, RiskLevel.HIGH, 9,
         "Unrestricted shell execution always allowed",
         "Any command can run without confirmation: delete, exfiltrate, anything.",
         "The agent can run any shell command without restriction or confirmation. "
         "This includes commands that delete files, exfiltrate data, or modify system state.",
         'Remove "Bash" or "Bash(*)" from allowedTools. '
         'Use scoped patterns like "Bash(npm run *)" instead.'),
    Rule(RuleId.SHELL_RESTRICTED_ALWAYS, RiskLevel.MEDIUM, 5,
         "Restricted shell execution always allowed",
         "Commands matching this pattern run without confirmation every time.",
         "The agent can always run shell commands matching a specific pattern without "
         "confirmation. Depending on the pattern, this may still be exploitable.",
         "Review the pattern for over-breadth. Remove if rarely needed and confirm "
         "per-session instead."),
    Rule(RuleId.TOOL_ALWAYS_ALLOWED, RiskLevel.LOW, 2,
         "Tool permanently allowed",
         "This tool bypasses per-session confirmation permanently.",
         "A built-in tool has been granted permanent allow status, bypassing "
         "per-session confirmation.",
         "Remove from allowedTools to restore per-session confirmation."),
    Rule(RuleId.MCP_SERVER_REGISTERED, RiskLevel.MEDIUM, 5,
         "MCP server registered",
         "MCP servers can expose filesystem, shell, and network access combined.",
         "An MCP server is registered in the agent config. MCP servers can expose "
         "combined capabilities: filesystem access, shell execution, and network access.",
         "Audit registered MCP servers. Remove any you don't actively use."),
    Rule(RuleId.FS_WRITE_GLOBAL, RiskLevel.HIGH, 8,
         "Global filesystem write access always allowed",
         "Agent can overwrite any file your account can access, without asking.",
         "The agent has unrestricted write access to the filesystem with no path constraints.",
         "Scope filesystem write permissions to the project directory only."),
    Rule(RuleId.FS_WRITE_REPO, RiskLevel.LOW, 2,
         "Repository filesystem write access always allowed",
         "Write access is scoped to this path, which is generally acceptable.",
         "The agent has write access scoped to the current repository.",
         "Verify this is intentional. Remove if write access should require confirmation."),
    Rule(RuleId.NETWORK_UNRESTRICTED, RiskLevel.HIGH, 8,
         "Unrestricted network access always allowed",
         "Agent can make outbound requests anywhere, which enables silent exfiltration.",
         "The agent can make outbound network requests to any destination without prompting.",
         "Restrict to specific domains or disable entirely if network access isn't needed."),
    Rule(RuleId.TRUSTED_DIR_GLOBAL, RiskLevel.MEDIUM, 6,
         "Broad directory permanently trusted",
         "Agent operates across your entire home folder without further confirmation.",
         "A broad directory (home folder or filesystem root) has been marked as "
         "permanently trusted.",
         "Replace with specific project paths. Never trust your home or root directory."),
    Rule(RuleId.SENSITIVE_PATH_TRUSTED, RiskLevel.HIGH, 9,
         "Sensitive path permanently trusted",
         "Agent has permanent access to credentials: SSH keys, AWS config, .env, etc.",
         "A path containing secrets or credentials has been granted permanent trust. "
         "The agent can read and potentially exfiltrate those credentials.",
         "Remove this path from trusted directories immediately. Never grant agent "
         "access to credential stores."),
    Rule(RuleId.SKIP_ALL_CONFIRMATIONS, RiskLevel.HIGH, 8,
         "All confirmation prompts bypassed",
         "Every agent action proceeds without asking, like always-allow for everything.",
         "The agent is configured to skip all confirmation prompts. This is equivalent "
         'to "always allow" for every action the agent takes.',
         "Remove the --yes / skip-confirmation setting. Let the agent prompt for "
         "destructive actions."),
    Rule(RuleId.SANDBOX_DISABLED, RiskLevel.HIGH, 8,
         "Sandboxing explicitly disabled",
         "Agent runs with full user-account permissions and no isolation.",
         "The agent's sandbox protection has been explicitly turned off. The agent runs "
         "with the full permissions of your user account.",
         "Re-enable sandboxing. Only disable if you have a specific technical reason."),
    Rule(RuleId.AUTO_COMMITS_ENABLED, RiskLevel.MEDIUM, 4,
         "Automatic git commits enabled",
         "Agent commits to git without review, so mistakes land in history silently.",
         "The agent commits changes to git without prompting for review.",
         "Set auto-commits: false and review agent changes before committing."),
    Rule(RuleId.APPROVAL_POLICY_AUTO, RiskLevel.HIGH, 9,
         "Approval policy set to auto",
         "All actions (writes, shell commands, network) are auto-approved with no review.",
         "The agent approval policy is set to automatically approve all actions without "
         "user confirmation.",
         'Change approval_policy to "untrusted" or "on-request" to restore human oversight.'),
    Rule(RuleId.SECRETS_IN_MCP_ENV, RiskLevel.HIGH, 7,
         "Credentials hardcoded in MCP server config",
         "API keys or tokens stored in plaintext inside the config file.",
         "An MCP server configuration contains API keys, tokens, or passwords in its env "
         "block, stored in plaintext.",
         "Move credentials to a secrets manager or runtime env vars. Remove hardcoded "
         "values from the config."),
]

RULES: dict[RuleId, Rule] = {rule.id: rule for rule in _RULE_LIST}


def get_rule(rule_id: str) -> Rule | None:
    """Look up a rule; ids outside the registry return None."""
    try:
        return RULES[RuleId(rule_id)]
    except ValueError:
        return None


# ── Path and command tables ─────────────────────────────────────────

SENSITIVE_PATH_PATTERNS: tuple[str, ...] = (
    ".ssh", ".aws", ".gnupg", ".gpg", "keychain", "Keychain",
    ".env", ".npmrc", ".pypirc", ".netrc", ".git-credentials",
    "credentials", "secrets", "private_key", ".kube",
)

INTERPRETERS: frozenset[str] = frozenset({
    "python", "python3", "node", "deno", "bun", "ruby", "perl", "php",
})

# A restricted shell grant whose base command is not in here drops to low.
MEDIUM_RISK_COMMANDS: frozenset[str] = INTERPRETERS | frozenset({
    # package managers
    "npm", "npx", "pnpm", "yarn", "pip", "pip3", "pipx", "uv", "poetry",
    "cargo", "go", "gem", "bundle", "composer", "brew", "apt", "apt-get",
    # git mutation
    "git add", "git commit", "git push", "git pull", "git merge", "git rebase",
    "git reset", "git checkout", "git clean", "git rm", "git stash",
    # network
    "curl", "wget", "ssh", "scp", "rsync", "nc",
    # filesystem search / read
    "find", "grep", "rg", "cat", "xargs",
    # cloud
    "aws", "gcloud", "az", "kubectl", "terraform", "docker",
    # destructive file ops
    "rm", "mv", "cp", "chmod", "chown", "dd",
    # shells
    "bash", "sh", "zsh", "fish",
    "eval", "sudo", "make",
})

SYNTAX_CHECK_FLAG = "--check"
