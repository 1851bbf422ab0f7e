"""Command-line entry point: scan, explain, fix and export."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from agentperms import __version__
from agentperms.fix import FixAction, apply_fixes, plan_fixes
from agentperms.models import RiskLevel, ScanSummary
from agentperms.readers import resolve_home, shorten_path
from agentperms.report import (
    B,
    D,
    R,
    RISK_BADGES,
    RISK_COLORS,
    print_explain,
    print_fix_results,
    print_results,
    render_json,
    render_markdown,
)
from agentperms.scan import run_scan

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_HIGH = 1
EXIT_ERROR = 2

AUTO_FIX_LEVELS = frozenset({RiskLevel.HIGH, RiskLevel.MEDIUM})
DEFAULT_REPORT_NAMES = {"md": "agentperms-report.md", "json": "agentperms-report.json"}


def _exit_code(summary: ScanSummary) -> int:
    return EXIT_HIGH if summary.has_high else EXIT_OK


def _confirm(prompt: str) -> bool:
    try:
        answer = input(prompt)
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")


# ── Commands ────────────────────────────────────────────────────────


def cmd_scan(args: argparse.Namespace, home: Path) -> int:
    summary = run_scan(args.directory, depth=args.depth, home=home)
    if args.json_output:
        sys.stdout.write(render_json(summary))
    else:
        print_results(summary, home, quiet=args.quiet, verbose=args.verbose)
    return _exit_code(summary)


def cmd_explain(args: argparse.Namespace, home: Path) -> int:
    summary = run_scan(args.dir, depth=args.depth, home=home)
    finding = summary.find(args.id.strip().lower())
    if finding is None:
        print(f"\n  No finding with id {B}{args.id}{R}. "
              f"{D}Run agentperms scan to list finding ids.{R}\n")
        return EXIT_HIGH
    print_explain(finding, home)
    return EXIT_OK


def _select_fixes(actions: list[FixAction], assume_yes: bool, home: Path) -> list[FixAction]:
    if assume_yes:
        return [a for a in actions if a.risk_level in AUTO_FIX_LEVELS]
    selected = []
    for action in actions:
        c = RISK_COLORS[action.risk_level]
        print(f"\n  {c}{RISK_BADGES[action.risk_level]}{R}  {B}{action.label}{R}")
        print(f"       {D}{shorten_path(action.config_path, home)}{R}")
        print(f"       → {action.description}")
        if _confirm("       apply this fix? [y/N] "):
            selected.append(action)
    return selected


def cmd_fix(args: argparse.Namespace, home: Path) -> int:
    summary = run_scan(args.directory, depth=args.depth, home=home)
    actions = plan_fixes(summary)
    if not actions:
        print(f"\n  {B}✓ Nothing to fix.{R} {D}No auto-fixable findings.{R}\n")
        return EXIT_OK

    print(f"\n  {B}{len(actions)} fixable finding(s){R}")
    selected = _select_fixes(actions, args.yes, home)
    if not selected:
        print(f"\n  {D}No fixes selected.{R}\n")
        return EXIT_OK

    applied, failed = apply_fixes(selected)
    print_fix_results(applied, failed, home)
    return EXIT_HIGH if failed else EXIT_OK


def cmd_export(args: argparse.Namespace, home: Path) -> int:
    summary = run_scan(args.directory, depth=args.depth, home=home)
    output = Path(args.output or DEFAULT_REPORT_NAMES[args.format])
    if args.format == "json":
        text = render_json(summary)
    else:
        text = render_markdown(summary, home)
    output.write_text(text, encoding="utf-8")
    print(f"  Report written to {output}")
    return _exit_code(summary)


# ── CLI ─────────────────────────────────────────────────────────────


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="agentperms",
        description="Audit the permissions granted to AI coding agents "
                    "(Claude Code, Cursor, Codex, Gemini, Copilot, Aider)",
    )
    parser.add_argument("--version", action="version",
                        version=f"agentperms {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--depth", type=int, default=0,
                        help="Subdirectory levels to search for projects (default: 0)")
    common.add_argument("-v", "--verbose", action="store_true",
                        help="Show raw values, remediation and debug logs")

    scan = sub.add_parser("scan", parents=[common],
                          help="Scan agent configs and report risky permissions")
    scan.add_argument("directory", nargs="?", default=".",
                      help="Project directory to scan (default: .)")
    scan.add_argument("--json", dest="json_output", action="store_true",
                      help="Output results as JSON")
    scan.add_argument("--quiet", action="store_true",
                      help="Show high-risk findings only")
    scan.set_defaults(handler=cmd_scan)

    explain = sub.add_parser("explain", parents=[common],
                             help="Show full detail for one finding")
    explain.add_argument("id", help="Finding id from scan output")
    explain.add_argument("--dir", default=".",
                         help="Project directory to scan (default: .)")
    explain.set_defaults(handler=cmd_explain, directory=None)

    fix = sub.add_parser("fix", parents=[common],
                         help="Interactively fix risky permissions")
    fix.add_argument("directory", nargs="?", default=".",
                     help="Project directory to scan (default: .)")
    fix.add_argument("--yes", action="store_true",
                     help="Apply all high and medium fixes without prompting")
    fix.set_defaults(handler=cmd_fix)

    export = sub.add_parser("export", parents=[common],
                            help="Write a report file")
    export.add_argument("directory", nargs="?", default=".",
                        help="Project directory to scan (default: .)")
    export.add_argument("--format", choices=sorted(DEFAULT_REPORT_NAMES), default="md",
                        help="Report format (default: md)")
    export.add_argument("--output", help="Report path (default: ./agentperms-report.<format>)")
    export.set_defaults(handler=cmd_export)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    root = Path(args.directory or args.dir)
    if not root.is_dir():
        print(f"agentperms: not a directory: {root}", file=sys.stderr)
        return EXIT_ERROR

    home = resolve_home()
    try:
        return args.handler(args, home)
    except Exception:
        logger.exception("%s failed", args.command)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
