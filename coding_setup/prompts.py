"""Interactive mode: derive the feature flags from yes/no questions."""

from __future__ import annotations

from typing import Callable

from rich.prompt import Confirm

from .models import FeatureFlag
from .utils import console


ConfirmFn = Callable[[str, bool], bool]


def _rich_confirm(question: str, default: bool) -> bool:
    return Confirm.ask(question, default=default, console=console)


def ask_features(is_git_repository: bool, confirm: ConfirmFn | None = None) -> frozenset[FeatureFlag]:
    """Ask the setup questions and return the equivalent flag set.

    The linter and the editor settings are always part of an interactive
    run; the React question only chooses which lint flavour is installed.

    Args:
        is_git_repository: Whether the target already has a ``.git``
            directory.  The ``git init`` question is skipped when it does.
        confirm: Callable asking one question; defaults to a Rich prompt.
    """
    ask = confirm or _rich_confirm
    flags: set[FeatureFlag] = {FeatureFlag.EDITOR_CONFIG}

    if not is_git_repository and ask(
        "Current folder is not a Git repository. Run `git init`?", True
    ):
        flags.add(FeatureFlag.GIT_INIT)

    if ask("Setup eslint with React support?", True):
        flags.add(FeatureFlag.LINT_REACT)
    else:
        flags.add(FeatureFlag.LINT_BASIC)

    if ask("Setup git flow branch name checker?", True):
        flags.add(FeatureFlag.GITFLOW_HOOKS)
    if ask("Setup commit-lint?", True):
        flags.add(FeatureFlag.COMMIT_LINT)
    if ask("Create a tsconfig.json file?", False):
        flags.add(FeatureFlag.TS_CONFIG)

    return frozenset(flags)
