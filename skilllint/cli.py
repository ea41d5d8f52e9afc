"""
skilllint command line.

    skilllint                          validate every skill in skills/
    skilllint validate skills/name     validate a single skill
    skilllint validate f1.md f2.md     validate skills containing these files
    skilllint commit-msg .git/COMMIT_EDITMSG
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Set

from skilllint import __version__
from skilllint.commits import ALIASES, expand_alias, lint_commit_message
from skilllint.config import LintConfig
from skilllint.history import RunHistory
from skilllint.services.watcher import SkillWatcher
from skilllint.skills.registry import SkillRegistry, resolve_skill_dirs
from skilllint.validation.report import render_json, render_text
from skilllint.validation.validator import validate_corpus

logger = logging.getLogger(__name__)

COMMANDS = {"validate", "list", "match", "commit-msg", "watch", "history"}


def _known_skills(config: LintConfig, skill_dirs: List[Path]) -> Optional[Set[str]]:
    """Names usable as Delegation targets, or None when the corpus is unknown."""
    corpus = resolve_skill_dirs([], config.skills_dir)
    if not corpus:
        return None
    return {d.name for d in corpus} | {d.name for d in skill_dirs}


def _run_validation(config: LintConfig, paths: List[str], output_format: str = "text", strict: bool = False):
    skill_dirs = resolve_skill_dirs(paths, config.skills_dir)
    if not skill_dirs:
        return None, 1
    report = validate_corpus(
        skill_dirs,
        conflict_threshold=config.conflict_threshold,
        known_skills=_known_skills(config, skill_dirs),
    )
    print(render_json(report) if output_format == "json" else render_text(report))
    return report, report.exit_code(strict=strict)


def cmd_validate(args, config: LintConfig) -> int:
    report, code = _run_validation(config, args.paths, args.format, args.strict)
    if report is None:
        print("No skills found to validate")
        return code
    if args.record:
        history = RunHistory(config.history_db)
        try:
            history.record(report, exit_code=code)
        finally:
            history.close()
    return code


def cmd_list(args, config: LintConfig) -> int:
    registry = SkillRegistry(config.skills_dir)
    skills = registry.list_all()
    if not skills:
        print("No skills found")
        return 1
    for doc in skills:
        line = f"{doc.name}"
        if args.verbose:
            refs = len(doc.references)
            line += f" ({refs} reference(s), {doc.line_count} lines)"
        print(line)
        if doc.description:
            print(f"    {doc.description.splitlines()[0]}")
    return 0


def cmd_match(args, config: LintConfig) -> int:
    registry = SkillRegistry(config.skills_dir)
    matched = registry.match(" ".join(args.text), limit=args.limit)
    if not matched:
        print("No matching skills")
        return 1
    for doc in matched:
        print(f"{doc.name}: {doc.path}")
    return 0


def cmd_commit_msg(args, config: LintConfig) -> int:
    if args.alias:
        message = expand_alias(args.alias)
        if message is None:
            print(f"Unknown alias '{args.alias}' (known: {', '.join(sorted(ALIASES))})")
            return 1
        print(message)
        return 0

    if not args.file:
        print("commit-msg: a message file or --alias is required")
        return 2
    try:
        text = Path(args.file).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.debug("Failed to read %s: %s", args.file, e)
        print(f"commit-msg: cannot read {args.file}")
        return 2
    result = lint_commit_message(text)
    for e in result.errors:
        print(f"  x {e}")
    for w in result.warnings:
        print(f"  ! {w}")
    return 0 if result.ok else 1


def cmd_watch(args, config: LintConfig) -> int:
    skill_dirs = resolve_skill_dirs(args.paths, config.skills_dir)
    if not skill_dirs:
        print("No skills found to validate")
        return 1

    roots = [Path(p) for p in args.paths] if args.paths else [config.skills_dir]

    def on_change(changed):
        print(f"\n--- {len(changed)} file(s) changed ---")
        _run_validation(config, args.paths)

    _run_validation(config, args.paths)
    watcher = SkillWatcher(roots, on_change=on_change, check_interval=config.watch_interval)
    watcher.run_forever()
    return 0


def cmd_history(args, config: LintConfig) -> int:
    history = RunHistory(config.history_db)
    try:
        if args.json:
            print(history.export_json())
            return 0
        runs = history.get_recent(limit=args.limit)
    finally:
        history.close()
    if not runs:
        print("No recorded runs")
        return 0
    for run in runs:
        status = "FAILED" if run["exit_code"] else "ok"
        failed = f" [{', '.join(run['failed_skills'])}]" if run["failed_skills"] else ""
        print(
            f"{run['timestamp']}  {status:6}  {run['skills']} skill(s), "
            f"{run['errors']} error(s), {run['warnings']} warning(s){failed}"
        )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="skilllint",
        description="Validate a corpus of SKILL.md documents",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--skills-dir", help="Corpus root (default: $SKILLLINT_SKILLS_DIR or skills)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress to stderr")
    sub = parser.add_subparsers(dest="command")

    p = sub.add_parser("validate", help="Validate skills (default command)")
    p.add_argument("paths", nargs="*", help="Skill directories or files inside them")
    p.add_argument("--format", choices=["text", "json"], default="text")
    p.add_argument("--strict", action="store_true", help="Treat warnings as failures")
    p.add_argument("--record", action="store_true", help="Store the run in the history database")
    p.set_defaults(func=cmd_validate)

    p = sub.add_parser("list", help="List skills in the corpus")
    p.set_defaults(func=cmd_list)

    p = sub.add_parser("match", help="Find skills whose description matches a request")
    p.add_argument("text", nargs="+")
    p.add_argument("--limit", type=int, default=5)
    p.set_defaults(func=cmd_match)

    p = sub.add_parser("commit-msg", help="Lint a conventional commit message")
    p.add_argument("file", nargs="?", help="Commit message file (e.g. .git/COMMIT_EDITMSG)")
    p.add_argument("--alias", help="Print the message an alias expands to")
    p.set_defaults(func=cmd_commit_msg)

    p = sub.add_parser("watch", help="Re-validate whenever skill files change")
    p.add_argument("paths", nargs="*")
    p.set_defaults(func=cmd_watch)

    p = sub.add_parser("history", help="Show recorded validation runs")
    p.add_argument("--limit", type=int, default=10)
    p.add_argument("--json", action="store_true")
    p.set_defaults(func=cmd_history)
    return parser


def _with_default_command(argv: List[str]) -> List[str]:
    """Bare paths (or nothing) mean ``validate``."""
    global_flags = {"-h", "--help", "--version"}
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg in COMMANDS or arg in global_flags:
            return argv
        if arg == "--skills-dir":
            i += 2
            continue
        if arg.startswith("--skills-dir=") or arg in ("-v", "--verbose"):
            i += 1
            continue
        break
    return argv[:i] + ["validate"] + argv[i:]


def main(argv: Optional[List[str]] = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    parser = build_parser()
    args = parser.parse_args(_with_default_command(argv))

    config = LintConfig.from_env()
    if args.skills_dir:
        config.skills_dir = Path(args.skills_dir)

    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.INFO if args.verbose else getattr(logging, config.log_level, logging.WARNING),
        stream=sys.stderr,
    )
    logger.debug("skills_dir=%s", config.skills_dir)
    return args.func(args, config)


if __name__ == "__main__":
    sys.exit(main())
