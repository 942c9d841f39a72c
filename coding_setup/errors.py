"""Error taxonomy for coding-setup.

Every fatal condition derives from ``CodingSetupError`` so the CLI can catch a
single type, print the message and exit non-zero.  ``PolicyOverride`` is not
an exception: it is a record returned by the merger when an existing value
was replaced, and the runner reports it as a warning.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class CodingSetupError(Exception):
    """Base class for all fatal coding-setup errors."""


class InspectionError(CodingSetupError):
    """An existing file in the target project could not be read or parsed."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Cannot inspect {self.path}: {reason}")


class MissingManifestError(CodingSetupError):
    """A merge into ``package.json`` was requested but the project has none."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        super().__init__(
            f"No manifest found at {self.path}. "
            "Run `npm init` first; hooks and scripts need a host package.json."
        )


class ProcessError(CodingSetupError):
    """An external command could not be spawned or exited non-zero."""

    def __init__(self, command: list[str], returncode: int, stderr: str = "") -> None:
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        message = f"Command failed with exit code {returncode}: {' '.join(command)}"
        if stderr:
            message += f"\n{stderr}"
        super().__init__(message)


class FileWriteError(CodingSetupError):
    """Writing a file into the target project failed."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Cannot write {self.path}: {reason}")


class PolicyOverride(BaseModel):
    """An existing hook or script value that a merge replaced."""

    model_config = ConfigDict(frozen=True)

    path: Path = Field(..., description="Document the value lives in")
    section: tuple[str, ...] = Field(..., description="Keys leading to the mapping")
    key: str
    previous: str
    value: str

    def describe(self) -> str:
        """Return a one-line human readable summary."""
        location = ".".join((*self.section, self.key))
        return (
            f"{self.path.name}: {location} changed "
            f"from {self.previous!r} to {self.value!r}"
        )
