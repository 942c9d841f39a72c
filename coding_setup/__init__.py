"""coding-setup -- lint, commit-message and branch-naming conventions for JS/TS projects.

Inspects a target project, plans the idempotent actions needed for the
selected features and applies them: one package-manager install, one
non-destructive merge per JSON document and the bundled config templates.

Quick usage::

    from coding_setup import FeatureFlag, RunContext, SetupRunner

    ctx = RunContext(target_dir="./my-app", flags={FeatureFlag.COMMIT_LINT})
    report = await SetupRunner(ctx).run()
"""

__version__ = "0.3.0"

from coding_setup.config import RunContext, Settings
from coding_setup.errors import (
    CodingSetupError,
    FileWriteError,
    InspectionError,
    MissingManifestError,
    PolicyOverride,
    ProcessError,
)
from coding_setup.merger import ProjectConfig, merge_manifest
from coding_setup.models import ActionPlan, FeatureFlag, TargetState
from coding_setup.planner import plan
from coding_setup.runner import RunReport, SetupRunner

__all__ = [
    "ActionPlan",
    "CodingSetupError",
    "FeatureFlag",
    "FileWriteError",
    "InspectionError",
    "MissingManifestError",
    "PolicyOverride",
    "ProcessError",
    "ProjectConfig",
    "RunContext",
    "RunReport",
    "Settings",
    "SetupRunner",
    "TargetState",
    "merge_manifest",
    "plan",
]
