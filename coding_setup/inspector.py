"""Target project inspection.

Reports which tracked artifacts already exist in the target directory and
parses the structured ones.  A missing file is a normal state; a file that
exists but cannot be read or parsed is an ``InspectionError`` so that a
broken ``package.json`` is never mistaken for an absent one and overwritten.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from .config import RunContext
from .errors import InspectionError
from .models import ArtifactState, TargetState
from .utils import parse_json_object


MANIFEST = "package.json"
HOOK_DOCUMENT = ".huskyrc.json"

# Relative paths the inspector reports on.  ``True`` marks JSON documents
# whose content is parsed.
TRACKED_ARTIFACTS: dict[str, bool] = {
    ".git": False,
    MANIFEST: True,
    HOOK_DOCUMENT: True,
    ".eslintrc.json": False,
    "commitlint.config.js": False,
    ".editorconfig": False,
    ".nvmrc": False,
    "tsconfig.json": False,
    ".gitignore": False,
}


def read_json_document(path: Path) -> dict[str, Any] | None:
    """Load a JSON object from *path*.

    Returns:
        The parsed object, or ``None`` when the file does not exist.

    Raises:
        InspectionError: If the file exists but is unreadable, is not valid
            JSON, or does not hold a top-level object.
    """
    if not path.exists():
        return None
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise InspectionError(path, str(exc)) from exc
    try:
        return parse_json_object(raw)
    except ValueError as exc:
        raise InspectionError(path, f"invalid JSON ({exc})") from exc


def inspect(ctx: RunContext) -> TargetState:
    """Inspect the target directory of *ctx*.

    Raises:
        InspectionError: If the target directory itself is missing, or a
            tracked file exists but cannot be read.
    """
    root = ctx.target_dir
    if not root.is_dir():
        raise InspectionError(root, "target directory does not exist")

    artifacts: dict[str, ArtifactState] = {}
    for relative_path, structured in TRACKED_ARTIFACTS.items():
        path = root / relative_path
        if structured:
            content = read_json_document(path)
            artifacts[relative_path] = ArtifactState(
                path=path, exists=content is not None, content=content
            )
            continue

        exists = path.exists()
        if exists and path.is_file():
            _check_readable(path)
        artifacts[relative_path] = ArtifactState(path=path, exists=exists)

    return TargetState(root=root, artifacts=artifacts)


def _check_readable(path: Path) -> None:
    try:
        with path.open("rb") as handle:
            handle.read(1)
    except OSError as exc:
        raise InspectionError(path, str(exc)) from exc
