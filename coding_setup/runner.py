"""Run orchestration.

``SetupRunner`` performs one complete run against a target project:

1. inspect the target,
2. compute the action plan,
3. preflight it (missing manifest is fatal before anything is written),
4. apply every action in order, stopping at the first failure.

Nothing is rolled back on failure.  Every action is idempotent, so running
the tool again after fixing the cause is safe.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path

from .config import RunContext
from .errors import PolicyOverride
from .executor import Executor, ShellExecutor
from .inspector import inspect, read_json_document
from .merger import ProjectConfig, merge_manifest
from .models import (
    Action,
    ActionPlan,
    InitRepository,
    InstallPackages,
    MergeJsonPatch,
    TargetState,
    WriteFileAlways,
    WriteFileIfAbsent,
    WriteMode,
)
from .planner import plan, validate_plan
from .templates import TemplateStore
from .utils import (
    format_duration,
    print_header,
    print_step,
    print_success,
    print_summary_table,
    print_warning,
)


@dataclass
class RunReport:
    """What a run did to the target project."""

    plan: ActionPlan
    written: list[Path] = field(default_factory=list)
    unchanged: list[Path] = field(default_factory=list)
    installed: list[str] = field(default_factory=list)
    overrides: list[PolicyOverride] = field(default_factory=list)
    repository_initialised: bool = False
    dry_run: bool = False
    duration: float = 0.0


class SetupRunner:
    """Inspect, plan and apply the selected setup to one target directory."""

    def __init__(
        self,
        ctx: RunContext,
        executor: Executor | None = None,
        store: TemplateStore | None = None,
    ) -> None:
        self.ctx = ctx
        self.executor = executor or ShellExecutor(ctx)
        self.store = store or TemplateStore(ctx.template_context())

    # -- Public API --------------------------------------------------------

    def prepare(self) -> tuple[TargetState, ActionPlan]:
        """Inspect the target and build a validated plan.

        Raises:
            InspectionError: If an existing tracked file cannot be read.
            MissingManifestError: If the plan merges into an absent manifest.
        """
        state = inspect(self.ctx)
        action_plan = plan(self.ctx.flags, state, self.ctx, self.store)
        validate_plan(action_plan, state)
        return state, action_plan

    async def run(self, *, dry_run: bool = False) -> RunReport:
        """Perform a full run and return its report.

        With *dry_run* the plan is printed and nothing is executed.
        """
        started = time.monotonic()
        _state, action_plan = self.prepare()

        if dry_run:
            print_plan(action_plan)
            return RunReport(plan=action_plan, dry_run=True)

        report = await self.execute(action_plan)
        report.duration = time.monotonic() - started
        print_success(f"DONE in {format_duration(report.duration)}: Happy coding!")
        return report

    async def execute(self, action_plan: ActionPlan) -> RunReport:
        """Apply *action_plan* left to right, aborting on the first error."""
        print_header(f"Setting up {self.ctx.target_dir}")
        report = RunReport(plan=action_plan)
        for action in action_plan.actions:
            await self._apply(action, report)
        return report

    # -- Actions -----------------------------------------------------------

    async def _apply(self, action: Action, report: RunReport) -> None:
        if isinstance(action, InitRepository):
            print_step("SCM", "Initializing new Git repository...")
            await self.executor.init_repository()
            report.repository_initialised = True

        elif isinstance(action, InstallPackages):
            print_step("INSTALL", " ".join(action.packages))
            await self.executor.run_package_install(list(action.packages))
            report.installed.extend(action.packages)

        elif isinstance(action, MergeJsonPatch):
            await self._merge(action, report)

        elif isinstance(action, (WriteFileAlways, WriteFileIfAbsent)):
            path = self.ctx.path(action.path)
            written = await self.executor.write_file(path, action.payload.content, action.mode)
            if written:
                print_step("WRITE", action.path)
                report.written.append(path)
            else:
                report.unchanged.append(path)

        else:
            raise TypeError(f"Unsupported action: {action!r}")

    async def _merge(self, action: MergeJsonPatch, report: RunReport) -> None:
        # Re-read after installation: the package manager rewrites the
        # dependency section of package.json.
        path = self.ctx.path(action.path)
        document = read_json_document(path)
        existing = ProjectConfig(document, path) if document is not None else None
        result = merge_manifest(
            existing,
            action.patches,
            path=path,
            require_existing=action.require_existing,
        )

        for override in result.overrides:
            print_warning(override.describe())
        report.overrides.extend(result.overrides)

        if not result.changed:
            report.unchanged.append(path)
            return

        print_step("MERGE", f"{action.path} ({', '.join(result.added) or 'updated'})")
        await self.executor.write_file(path, result.config.to_text(), WriteMode.ALWAYS)
        report.written.append(path)


def print_plan(action_plan: ActionPlan) -> None:
    """Print *action_plan* as a numbered table."""
    if action_plan.is_empty:
        print_success("Nothing to do: the project is already set up.")
        return
    rows = [
        (f"{index}. {action.kind}", action.describe())
        for index, action in enumerate(action_plan.actions, start=1)
    ]
    print_summary_table(rows, title="Planned actions")
