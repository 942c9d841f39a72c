"""Shared pytest fixtures for the coding-setup test suite.

Provides reusable fixtures for:
- Temporary target projects (with and without a manifest)
- Run contexts for common flag selections
- A recording executor that writes real files but fakes git and npm
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from coding_setup.cli import INIT_FLAGS
from coding_setup.config import RunContext
from coding_setup.executor import ShellExecutor
from coding_setup.models import FeatureFlag


# ---------------------------------------------------------------------------
# Target projects
# ---------------------------------------------------------------------------

SAMPLE_MANIFEST: dict[str, Any] = {
    "name": "sample-app",
    "version": "1.0.0",
    "foo": "bar",
    "scripts": {
        "build": "tsc",
        "test": "jest",
    },
    "dependencies": {
        "lodash": "^4.17.15",
    },
}


def write_manifest(root: Path, data: dict[str, Any]) -> Path:
    path = root / "package.json"
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def empty_project(tmp_path: Path) -> Path:
    """An empty target directory (no manifest, no git)."""
    project_dir = tmp_path / "empty-project"
    project_dir.mkdir()
    yield project_dir


@pytest.fixture
def node_project(tmp_path: Path) -> Path:
    """A target directory holding only ``SAMPLE_MANIFEST`` as package.json."""
    project_dir = tmp_path / "node-project"
    project_dir.mkdir()
    write_manifest(project_dir, SAMPLE_MANIFEST)
    yield project_dir


@pytest.fixture
def manifest_data() -> dict[str, Any]:
    return json.loads(json.dumps(SAMPLE_MANIFEST))


# ---------------------------------------------------------------------------
# Contexts
# ---------------------------------------------------------------------------


@pytest.fixture
def make_context():
    """Factory building a ``RunContext`` for a directory and flag set."""

    def _make(target: Path, *flags: FeatureFlag, typescript: bool = True) -> RunContext:
        return RunContext(target_dir=target, flags=frozenset(flags), typescript=typescript)

    return _make


@pytest.fixture
def init_flags() -> frozenset[FeatureFlag]:
    return INIT_FLAGS


# ---------------------------------------------------------------------------
# Executors
# ---------------------------------------------------------------------------


def _fake_npm_install(root: Path):
    """Mimic ``npm install --save-dev``: add packages to devDependencies."""

    async def _install(packages: list[str]) -> None:
        manifest_path = root / "package.json"
        data = json.loads(manifest_path.read_text(encoding="utf-8"))
        dev = data.setdefault("devDependencies", {})
        for requirement in packages:
            if requirement.rfind("@") > 0:
                name, _, version = requirement.rpartition("@")
            else:
                name, version = requirement, "^1.0.0"
            dev[name] = version
        manifest_path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")

    return _install


@pytest.fixture
def recording_executor():
    """Factory for an executor that writes files but fakes git and npm.

    ``run_package_install`` rewrites ``devDependencies`` the way npm does, so
    tests exercise the install-then-merge ordering.
    """

    def _make(ctx: RunContext) -> MagicMock:
        real = ShellExecutor(ctx)
        executor = MagicMock(spec=ShellExecutor)
        executor.write_file = AsyncMock(side_effect=real.write_file)
        executor.run_package_install = AsyncMock(side_effect=_fake_npm_install(ctx.target_dir))

        async def _git_init() -> None:
            (ctx.target_dir / ".git").mkdir(exist_ok=True)

        executor.init_repository = AsyncMock(side_effect=_git_init)
        return executor

    return _make


def _snapshot(root: Path) -> dict[str, bytes]:
    return {
        str(p.relative_to(root)): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


@pytest.fixture
def snapshot():
    """Return a function mapping every file under a root to its bytes."""
    return _snapshot
