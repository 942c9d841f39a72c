"""Pydantic v2 models for coding-setup.

Defines the feature flags selected for a run, the template payloads shipped
with the tool, the inspector's view of the target project and the action
variants that make up an ``ActionPlan``.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class FeatureFlag(str, Enum):
    """A unit of setup the user can switch on."""
    LINT_REACT = "lint-react"
    LINT_BASIC = "lint-basic"
    GITFLOW_HOOKS = "gitflow-hooks"
    COMMIT_LINT = "commit-lint"
    EDITOR_CONFIG = "editorconfig"
    TS_CONFIG = "tsconfig"
    GIT_INIT = "git-init"
    GITIGNORE = "gitignore"


class WriteMode(str, Enum):
    """How the executor treats a file that already exists."""
    IF_ABSENT = "if-absent"
    ALWAYS = "always"


LINT_FLAGS: frozenset[FeatureFlag] = frozenset(
    {FeatureFlag.LINT_REACT, FeatureFlag.LINT_BASIC}
)


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------

class TemplatePayload(BaseModel):
    """A rendered configuration file ready to be written into the target."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Logical name, e.g. 'eslintrc'")
    content: str = Field(..., description="Rendered file content")
    target_path: str = Field(..., description="Path relative to the project root")


# ---------------------------------------------------------------------------
# Target inspection
# ---------------------------------------------------------------------------

class ArtifactState(BaseModel):
    """Presence (and parsed content for JSON documents) of one tracked file."""
    model_config = ConfigDict(frozen=True)

    path: Path
    exists: bool = False
    content: Optional[dict[str, Any]] = Field(
        default=None, description="Parsed JSON object for structured documents"
    )


class TargetState(BaseModel):
    """Snapshot of the tracked artifacts in the target project."""
    model_config = ConfigDict(frozen=True)

    root: Path
    artifacts: dict[str, ArtifactState] = Field(default_factory=dict)

    def exists(self, relative_path: str) -> bool:
        artifact = self.artifacts.get(relative_path)
        return artifact.exists if artifact is not None else False

    def document(self, relative_path: str) -> Optional[dict[str, Any]]:
        artifact = self.artifacts.get(relative_path)
        return artifact.content if artifact else None

    @property
    def is_git_repository(self) -> bool:
        return self.exists(".git")

    @property
    def has_manifest(self) -> bool:
        return self.exists("package.json")


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------

class JsonPatch(BaseModel):
    """String entries to set inside the mapping addressed by ``section``."""
    model_config = ConfigDict(frozen=True)

    section: tuple[str, ...]
    entries: dict[str, str] = Field(default_factory=dict)


class InitRepository(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["init-repository"] = "init-repository"

    def describe(self) -> str:
        return "git init"


class InstallPackages(BaseModel):
    """One package-manager invocation installing every required dev package."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["install-packages"] = "install-packages"
    packages: tuple[str, ...]

    def describe(self) -> str:
        return f"install {len(self.packages)} dev packages"


class MergeJsonPatch(BaseModel):
    """Read, merge and rewrite one JSON document.

    ``require_existing`` marks host documents (the manifest) that must already
    exist; sibling documents are created from an empty object.
    """
    model_config = ConfigDict(frozen=True)

    kind: Literal["merge-json"] = "merge-json"
    path: str
    patches: tuple[JsonPatch, ...]
    require_existing: bool = True

    def describe(self) -> str:
        keys = sum(len(p.entries) for p in self.patches)
        return f"merge {keys} entries into {self.path}"


class WriteFileAlways(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["write-always"] = "write-always"
    path: str
    payload: TemplatePayload

    mode: WriteMode = WriteMode.ALWAYS

    def describe(self) -> str:
        return f"write {self.path}"


class WriteFileIfAbsent(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["write-if-absent"] = "write-if-absent"
    path: str
    payload: TemplatePayload

    mode: WriteMode = WriteMode.IF_ABSENT

    def describe(self) -> str:
        return f"create {self.path} if missing"


Action = Annotated[
    Union[InitRepository, InstallPackages, MergeJsonPatch, WriteFileAlways, WriteFileIfAbsent],
    Field(discriminator="kind"),
]


class ActionPlan(BaseModel):
    """Ordered actions computed before anything touches the target."""
    model_config = ConfigDict(frozen=True)

    actions: tuple[Action, ...] = Field(default_factory=tuple)

    def of_kind(self, kind: type[BaseModel]) -> list[Any]:
        """Return the actions that are instances of *kind*, in plan order."""
        return [a for a in self.actions if isinstance(a, kind)]

    @property
    def is_empty(self) -> bool:
        return not self.actions
