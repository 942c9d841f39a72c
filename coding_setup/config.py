"""coding-setup configuration.

Typed settings for a single run.  ``Settings`` holds the tuneable knobs
(package manager, install timeout) and can be built from environment
variables; ``RunContext`` bundles the target directory, the resolved feature
flags and the settings so every component receives its inputs explicitly
instead of reading the process working directory.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import LINT_FLAGS, FeatureFlag


PackageManager = Literal["npm", "yarn", "pnpm"]

# Dev-dependency install command prefix per package manager.
INSTALL_COMMANDS: dict[str, list[str]] = {
    "npm": ["npm", "install", "--save-dev"],
    "yarn": ["yarn", "add", "--dev"],
    "pnpm": ["pnpm", "add", "--save-dev"],
}


class Settings(BaseModel):
    """Tuning knobs that do not change the selected features."""

    package_manager: PackageManager = Field(default="npm")
    install_timeout: int = Field(
        default=600, ge=30, description="Package manager timeout in seconds"
    )
    source_dir: str = Field(default="src", description="Folder the lint script targets")
    node_version: str = Field(default="v12", description="Content of the .nvmrc pin")

    @field_validator("source_dir")
    @classmethod
    def _strip_slashes(cls, value: str) -> str:
        cleaned = value.strip().strip("/")
        if not cleaned:
            raise ValueError("source_dir must not be empty")
        return cleaned

    @property
    def install_command(self) -> list[str]:
        """Return the argv prefix used to install dev dependencies."""
        return list(INSTALL_COMMANDS[self.package_manager])

    @classmethod
    def from_env(cls) -> "Settings":
        """Build ``Settings`` from environment variables.

        Recognised variables (all optional):
            CODING_SETUP_PACKAGE_MANAGER, CODING_SETUP_INSTALL_TIMEOUT,
            CODING_SETUP_SOURCE_DIR, CODING_SETUP_NODE_VERSION.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("CODING_SETUP_PACKAGE_MANAGER"):
            kwargs["package_manager"] = os.environ["CODING_SETUP_PACKAGE_MANAGER"]
        if os.environ.get("CODING_SETUP_INSTALL_TIMEOUT"):
            kwargs["install_timeout"] = int(os.environ["CODING_SETUP_INSTALL_TIMEOUT"])
        if os.environ.get("CODING_SETUP_SOURCE_DIR"):
            kwargs["source_dir"] = os.environ["CODING_SETUP_SOURCE_DIR"]
        if os.environ.get("CODING_SETUP_NODE_VERSION"):
            kwargs["node_version"] = os.environ["CODING_SETUP_NODE_VERSION"]
        return cls(**kwargs)


class RunContext(BaseModel):
    """Everything one run needs to know about its target."""

    model_config = ConfigDict(frozen=True)

    target_dir: Path
    flags: frozenset[FeatureFlag] = Field(default_factory=frozenset)
    typescript: bool = Field(default=True, description="False when --skip-ts was given")
    settings: Settings = Field(default_factory=Settings)

    @field_validator("target_dir")
    @classmethod
    def _absolute(cls, value: Path) -> Path:
        return Path(value).expanduser().resolve()

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def lint_enabled(self) -> bool:
        return bool(self.flags & LINT_FLAGS)

    @property
    def react(self) -> bool:
        return FeatureFlag.LINT_REACT in self.flags

    def path(self, relative_path: str) -> Path:
        """Resolve *relative_path* inside the target directory."""
        return self.target_dir / relative_path

    def template_context(self) -> dict[str, Any]:
        """Build the Jinja2 context shared by every template."""
        return {
            "project_dir": self.target_dir.name,
            "react": self.react,
            "typescript": self.typescript,
            "source_dir": self.settings.source_dir,
            "node_version": self.settings.node_version,
        }
