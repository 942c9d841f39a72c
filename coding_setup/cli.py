"""Command-line entry point for ``coding-setup``."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from pydantic import ValidationError

from . import __version__
from .config import RunContext, Settings
from .errors import CodingSetupError
from .models import FeatureFlag
from .prompts import ask_features
from .runner import SetupRunner
from .utils import console, print_error


INIT_FLAGS: frozenset[FeatureFlag] = frozenset(
    {
        FeatureFlag.GIT_INIT,
        FeatureFlag.LINT_REACT,
        FeatureFlag.COMMIT_LINT,
        FeatureFlag.GITFLOW_HOOKS,
        FeatureFlag.EDITOR_CONFIG,
        FeatureFlag.GITIGNORE,
    }
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="coding-setup",
        description=(
            "Setup linting, commit hooks and other standard best practices "
            "for a JavaScript/TypeScript project"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  coding-setup --init\n"
            "  coding-setup --linter --react --skip-ts\n"
            "  coding-setup --gitcommit --gitflow --dir ./my-app\n"
            "  coding-setup --interactive\n"
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    features = parser.add_argument_group("features")
    features.add_argument("--linter", action="store_true", help="Setup ESLint only")
    features.add_argument("--react", action="store_true", help="Use the React lint rules with --linter")
    features.add_argument("--gitcommit", action="store_true", help="Setup husky and commitlint")
    features.add_argument("--gitflow", action="store_true", help="Setup the git-flow branch name check")
    features.add_argument("--gitignore", action="store_true", help="Add a .gitignore if missing")
    features.add_argument(
        "--editorconfig", action="store_true", help="Add .editorconfig and .nvmrc if missing"
    )
    features.add_argument("--tsconfig", action="store_true", help="Write a tsconfig.json")
    features.add_argument("--git-init", action="store_true", help="Run `git init` if needed")
    features.add_argument(
        "--init", "--all", dest="init", action="store_true", help="Setup all of the above"
    )

    options = parser.add_argument_group("options")
    options.add_argument(
        "--skip-ts", action="store_true", help="Omit TypeScript lint packages and config"
    )
    options.add_argument(
        "--interactive", "-i", action="store_true", help="Ask which features to setup"
    )
    options.add_argument(
        "--dir", dest="target_dir", default=".", help="Target project directory (default: .)"
    )
    options.add_argument(
        "--package-manager",
        choices=["npm", "yarn", "pnpm"],
        default=None,
        help="Package manager used to install dev dependencies (default: npm)",
    )
    options.add_argument(
        "--dry-run", action="store_true", help="Print the planned actions without applying them"
    )
    return parser


def resolve_flags(args: argparse.Namespace) -> frozenset[FeatureFlag]:
    """Translate parsed command-line switches into feature flags."""
    flags: set[FeatureFlag] = set()
    if args.init:
        flags |= INIT_FLAGS
    if args.linter:
        flags.add(FeatureFlag.LINT_REACT if args.react else FeatureFlag.LINT_BASIC)
    if args.gitcommit:
        flags.add(FeatureFlag.COMMIT_LINT)
    if args.gitflow:
        flags.add(FeatureFlag.GITFLOW_HOOKS)
    if args.gitignore:
        flags.add(FeatureFlag.GITIGNORE)
    if args.editorconfig:
        flags.add(FeatureFlag.EDITOR_CONFIG)
    if args.tsconfig:
        flags.add(FeatureFlag.TS_CONFIG)
    if args.git_init:
        flags.add(FeatureFlag.GIT_INIT)
    # --init already selects the React lint rules; a basic lint flag from
    # --linter would only add a conflicting config flavour.
    if FeatureFlag.LINT_REACT in flags:
        flags.discard(FeatureFlag.LINT_BASIC)
    return frozenset(flags)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for ``coding-setup`` and ``python -m coding_setup``."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.tsconfig and args.skip_ts:
        parser.error("--tsconfig cannot be combined with --skip-ts")
    if args.react and not (args.linter or args.init):
        parser.error("--react requires --linter")

    flags = resolve_flags(args)
    if not flags and not args.interactive:
        parser.print_help()
        return 1

    target_dir = Path(args.target_dir)
    if args.interactive and not flags:
        console.print("This tool will setup linting, commit hooks and other standard best practices")
        flags = ask_features((target_dir / ".git").exists())
        if args.skip_ts and FeatureFlag.TS_CONFIG in flags:
            print_error("A tsconfig.json cannot be created together with --skip-ts")
            return 2

    try:
        settings = Settings.from_env()
        if args.package_manager:
            settings = settings.model_copy(update={"package_manager": args.package_manager})
    except (ValidationError, ValueError) as exc:
        print_error(f"Invalid configuration: {exc}")
        return 1

    ctx = RunContext(
        target_dir=target_dir,
        flags=flags,
        typescript=not args.skip_ts,
        settings=settings,
    )

    try:
        asyncio.run(SetupRunner(ctx).run(dry_run=args.dry_run))
    except CodingSetupError as exc:
        print_error(str(exc))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
