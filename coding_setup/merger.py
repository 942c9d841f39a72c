"""Non-destructive merging of JSON configuration documents.

``ProjectConfig`` wraps a parsed ``package.json`` (or ``.huskyrc.json``) and
exposes the sections this tool writes to.  ``merge_manifest`` applies a list
of ``JsonPatch`` objects to a copy of it:

- keys outside the patched sections are passed through untouched, in order;
- a patched key that already holds the same value is left alone;
- a patched key that holds a different value is replaced and reported as a
  ``PolicyOverride``.

Merging is pure; callers persist ``MergeResult.config.to_text()``.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

from pydantic import TypeAdapter, ValidationError

from .errors import InspectionError, MissingManifestError, PolicyOverride
from .models import JsonPatch
from .utils import dump_json_text, parse_json_object


SCRIPTS_SECTION: tuple[str, ...] = ("scripts",)
MANIFEST_HOOKS_SECTION: tuple[str, ...] = ("husky", "hooks")
HOOK_DOCUMENT_SECTION: tuple[str, ...] = ("hooks",)

_STRING_MAP = TypeAdapter(dict[str, str])


# ---------------------------------------------------------------------------
# ProjectConfig
# ---------------------------------------------------------------------------


class ProjectConfig:
    """A JSON object document with typed access to its string-map sections."""

    def __init__(self, data: dict[str, Any], path: Path | None = None) -> None:
        self.data = data
        self.path = path

    @classmethod
    def from_text(cls, raw: str, path: Path | None = None) -> "ProjectConfig":
        """Parse *raw* into a ``ProjectConfig``.

        Raises:
            InspectionError: If *raw* is not a JSON object.
        """
        try:
            data = parse_json_object(raw)
        except ValueError as exc:
            raise InspectionError(path or Path("<memory>"), f"invalid JSON ({exc})") from exc
        return cls(data, path)

    @classmethod
    def empty(cls, path: Path | None = None) -> "ProjectConfig":
        return cls({}, path)

    def copy(self) -> "ProjectConfig":
        return ProjectConfig(copy.deepcopy(self.data), self.path)

    # -- Section access ------------------------------------------------------

    def get_section(self, keys: Iterable[str]) -> dict[str, str] | None:
        """Return the string map at *keys*, or ``None`` when absent.

        Raises:
            InspectionError: If the section exists but is not a mapping of
                strings to strings.
        """
        node: Any = self.data
        keys = tuple(keys)
        for key in keys:
            if not isinstance(node, dict) or key not in node:
                return None
            node = node[key]
        return self._validated(keys, node)

    def section(self, keys: Iterable[str]) -> dict[str, str]:
        """Fetch the string map at *keys*, creating empty objects on the way."""
        node: dict[str, Any] = self.data
        keys = tuple(keys)
        for depth, key in enumerate(keys):
            child = node.get(key)
            if child is None:
                child = {}
                node[key] = child
            elif not isinstance(child, dict):
                self._invalid(keys[: depth + 1], "expected an object")
            node = child
        return self._validated(keys, node)

    @property
    def scripts(self) -> dict[str, str]:
        return self.get_section(SCRIPTS_SECTION) or {}

    @property
    def hooks(self) -> dict[str, str]:
        """Hooks from ``husky.hooks`` (manifest) or top-level ``hooks``."""
        found = self.get_section(MANIFEST_HOOKS_SECTION)
        if found is None:
            found = self.get_section(HOOK_DOCUMENT_SECTION)
        return found or {}

    # -- Serialisation -------------------------------------------------------

    def to_text(self) -> str:
        return dump_json_text(self.data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ProjectConfig):
            return NotImplemented
        return self.data == other.data

    def __repr__(self) -> str:
        return f"ProjectConfig(path={self.path!s}, keys={list(self.data)})"

    # -- Internal ------------------------------------------------------------

    def _validated(self, keys: tuple[str, ...], node: Any) -> dict[str, str]:
        try:
            _STRING_MAP.validate_python(node, strict=True)
        except ValidationError:
            self._invalid(keys, "expected an object of strings")
        return node

    def _invalid(self, keys: tuple[str, ...], reason: str) -> None:
        raise InspectionError(self.path or Path("<memory>"), f"{'.'.join(keys)}: {reason}")


# ---------------------------------------------------------------------------
# Merge
# ---------------------------------------------------------------------------


@dataclass
class MergeResult:
    """Outcome of merging patches into a document."""

    config: ProjectConfig
    overrides: list[PolicyOverride] = field(default_factory=list)
    added: list[str] = field(default_factory=list)
    created: bool = False

    @property
    def changed(self) -> bool:
        return self.created or bool(self.added) or bool(self.overrides)


def merge_manifest(
    existing: ProjectConfig | None,
    patches: Iterable[JsonPatch],
    *,
    path: Path,
    require_existing: bool = True,
) -> MergeResult:
    """Apply *patches* to a copy of *existing*.

    Args:
        existing: The parsed document, or ``None`` when the file is absent.
        patches: Sections and entries to set.
        path: Location of the document, used in errors and overrides.
        require_existing: When true a missing document is fatal; otherwise
            the merge starts from an empty object.

    Raises:
        MissingManifestError: If *existing* is ``None`` and
            *require_existing* is set.
        InspectionError: If a patched section holds something other than a
            mapping of strings.
    """
    if existing is None:
        if require_existing:
            raise MissingManifestError(path)
        result = MergeResult(config=ProjectConfig.empty(path), created=True)
    else:
        merged = existing.copy()
        merged.path = path
        result = MergeResult(config=merged)

    for patch in patches:
        target = result.config.section(patch.section)
        for key, value in patch.entries.items():
            current = target.get(key)
            if current == value:
                continue
            if current is None:
                result.added.append(".".join((*patch.section, key)))
            else:
                result.overrides.append(
                    PolicyOverride(
                        path=path,
                        section=patch.section,
                        key=key,
                        previous=current,
                        value=value,
                    )
                )
            target[key] = value

    return result
