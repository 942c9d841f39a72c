"""Action planning.

Turns the resolved feature flags and the inspector's ``TargetState`` into an
ordered ``ActionPlan``.  Planning is pure: it never reads the filesystem and
never raises.  The plan is laid out in four stages:

1. repository initialisation (``git init``),
2. one aggregated ``InstallPackages`` for every flag,
3. one ``MergeJsonPatch`` per JSON document, all patches for it coalesced,
4. template file writes, deduplicated by target path.

Installation precedes merging because the package manager rewrites the
dependency section of ``package.json``; the merge reads the manifest after
that rewrite.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .config import RunContext
from .errors import MissingManifestError
from .inspector import HOOK_DOCUMENT, MANIFEST
from .merger import (
    HOOK_DOCUMENT_SECTION,
    MANIFEST_HOOKS_SECTION,
    SCRIPTS_SECTION,
    ProjectConfig,
)
from .models import (
    Action,
    ActionPlan,
    FeatureFlag,
    InitRepository,
    InstallPackages,
    JsonPatch,
    MergeJsonPatch,
    TargetState,
    WriteFileAlways,
    WriteFileIfAbsent,
)
from .templates import TemplateStore


# ---------------------------------------------------------------------------
# Package and hook catalogue
# ---------------------------------------------------------------------------

LINT_PACKAGES: list[str] = ["eslint", "eslint-plugin-import@^2.20.1"]
LINT_TYPESCRIPT_PACKAGES: list[str] = [
    "eslint-config-airbnb-typescript",
    "@typescript-eslint/eslint-plugin@^2.24.0",
    "@typescript-eslint/parser@^2.24.0",
]
REACT_PACKAGES: list[str] = [
    "eslint-plugin-jsx-a11y@^6.2.3",
    "eslint-plugin-react@^7.19.0",
    "eslint-plugin-react-hooks@^2.5.0",
]
COMMIT_LINT_PACKAGES: list[str] = [
    "husky",
    "@commitlint/cli",
    "@commitlint/config-conventional",
]
GITFLOW_PACKAGES: list[str] = ["husky", "@springtree/check-git-branch-name"]
TSCONFIG_PACKAGES: list[str] = ["typescript"]

COMMIT_MSG_HOOK: dict[str, str] = {"commit-msg": "commitlint -E HUSKY_GIT_PARAMS"}
PRE_PUSH_HOOK: dict[str, str] = {"pre-push": "check-git-branch-name -e"}


# ---------------------------------------------------------------------------
# Plan builder
# ---------------------------------------------------------------------------


@dataclass
class _PlanBuilder:
    """Collects per-flag contributions before they are laid out in order."""

    state: TargetState
    store: TemplateStore
    init_repository: bool = False
    packages: list[str] = field(default_factory=list)
    merges: dict[str, list[JsonPatch]] = field(default_factory=dict)
    merge_requires_existing: dict[str, bool] = field(default_factory=dict)
    writes: dict[str, Action] = field(default_factory=dict)

    def install(self, packages: list[str]) -> None:
        for package in packages:
            if package not in self.packages:
                self.packages.append(package)

    def merge(self, path: str, patch: JsonPatch, *, require_existing: bool) -> None:
        self.merges.setdefault(path, []).append(patch)
        self.merge_requires_existing[path] = (
            self.merge_requires_existing.get(path, False) or require_existing
        )

    def write_always(self, name: str) -> None:
        payload = self.store.get(name)
        self.writes.setdefault(
            payload.target_path, WriteFileAlways(path=payload.target_path, payload=payload)
        )

    def write_if_absent(self, name: str) -> None:
        payload = self.store.get(name)
        if self.state.exists(payload.target_path):
            return
        self.writes.setdefault(
            payload.target_path, WriteFileIfAbsent(path=payload.target_path, payload=payload)
        )

    def build(self) -> ActionPlan:
        actions: list[Action] = []
        if self.init_repository:
            actions.append(InitRepository())
        if self.packages:
            actions.append(InstallPackages(packages=tuple(self.packages)))
        for path, patches in self.merges.items():
            actions.append(
                MergeJsonPatch(
                    path=path,
                    patches=tuple(_coalesce(patches)),
                    require_existing=self.merge_requires_existing[path],
                )
            )
        actions.extend(self.writes.values())
        return ActionPlan(actions=tuple(actions))


def _coalesce(patches: list[JsonPatch]) -> list[JsonPatch]:
    """Combine patches addressing the same section, keeping first-seen order."""
    by_section: dict[tuple[str, ...], dict[str, str]] = {}
    for patch in patches:
        by_section.setdefault(patch.section, {}).update(patch.entries)
    return [JsonPatch(section=section, entries=entries) for section, entries in by_section.items()]


def plan(
    flags: frozenset[FeatureFlag] | set[FeatureFlag],
    state: TargetState,
    ctx: RunContext,
    store: TemplateStore | None = None,
) -> ActionPlan:
    """Compute the ordered actions for *flags* against *state*.

    Args:
        flags: Resolved feature flags.  Flags never conflict; the plan is the
            union of their contributions.
        state: The inspector's snapshot of the target.
        ctx: Run context (TypeScript toggle, settings).
        store: Template store; a store rendered from *ctx* is used if omitted.

    Returns:
        The ``ActionPlan``.  Planning itself never fails.
    """
    store = store or TemplateStore(ctx.template_context())
    builder = _PlanBuilder(state=state, store=store)

    if FeatureFlag.GIT_INIT in flags and not state.is_git_repository:
        builder.init_repository = True

    if FeatureFlag.LINT_REACT in flags or FeatureFlag.LINT_BASIC in flags:
        _plan_linter(builder, ctx, react=FeatureFlag.LINT_REACT in flags)

    hooks: dict[str, str] = {}
    if FeatureFlag.COMMIT_LINT in flags:
        builder.install(COMMIT_LINT_PACKAGES)
        hooks.update(COMMIT_MSG_HOOK)
        builder.write_always("commitlint")
    if FeatureFlag.GITFLOW_HOOKS in flags:
        builder.install(GITFLOW_PACKAGES)
        hooks.update(PRE_PUSH_HOOK)
    if hooks:
        _plan_hooks(builder, state, hooks)

    if FeatureFlag.TS_CONFIG in flags:
        builder.install(TSCONFIG_PACKAGES)
        builder.write_always("tsconfig")

    if FeatureFlag.EDITOR_CONFIG in flags:
        builder.write_if_absent("editorconfig")
        builder.write_if_absent("nvmrc")

    if FeatureFlag.GITIGNORE in flags or FeatureFlag.GIT_INIT in flags:
        builder.write_if_absent("gitignore")

    return builder.build()


def _plan_linter(builder: _PlanBuilder, ctx: RunContext, *, react: bool) -> None:
    builder.install(LINT_PACKAGES)
    if ctx.typescript:
        builder.install(LINT_TYPESCRIPT_PACKAGES)
    else:
        builder.install(["eslint-config-airbnb" if react else "eslint-config-airbnb-base"])
    if react:
        builder.install(REACT_PACKAGES)

    extensions = ".ts,.tsx" if ctx.typescript else ".js,.jsx"
    lint_command = f"eslint --ext {extensions} {ctx.settings.source_dir}/"
    builder.merge(
        MANIFEST,
        JsonPatch(section=SCRIPTS_SECTION, entries={"lint": lint_command}),
        require_existing=True,
    )
    builder.write_always("eslintrc")


def _plan_hooks(builder: _PlanBuilder, state: TargetState, hooks: dict[str, str]) -> None:
    # husky reads .huskyrc.json before package.json; keep hooks wherever the
    # project already configures them.
    if state.exists(HOOK_DOCUMENT):
        builder.merge(
            HOOK_DOCUMENT,
            JsonPatch(section=HOOK_DOCUMENT_SECTION, entries=hooks),
            require_existing=False,
        )
    else:
        builder.merge(
            MANIFEST,
            JsonPatch(section=MANIFEST_HOOKS_SECTION, entries=hooks),
            require_existing=True,
        )


# ---------------------------------------------------------------------------
# Preflight
# ---------------------------------------------------------------------------


def validate_plan(action_plan: ActionPlan, state: TargetState) -> None:
    """Reject a plan that cannot complete before any action runs.

    Every JSON merge, including hooks kept in ``.huskyrc.json``, wires the
    project's package scripts or hook runner and so needs a host manifest.

    Raises:
        MissingManifestError: If the plan merges anything and the target has
            no ``package.json``, or a merge requires a document that is absent.
        InspectionError: If a section the plan patches exists in the
            inspected document but is not an object of strings.
    """
    for action in action_plan.of_kind(MergeJsonPatch):
        if not state.has_manifest:
            raise MissingManifestError(state.root / MANIFEST)
        if action.require_existing and not state.exists(action.path):
            raise MissingManifestError(state.root / action.path)

        document = state.document(action.path)
        if document is None:
            continue
        # Work on a copy: section() creates missing objects on the way down.
        config = ProjectConfig(document, state.root / action.path).copy()
        for patch in action.patches:
            config.section(patch.section)
