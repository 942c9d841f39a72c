"""Tests for the shell executor (coding_setup.executor).

Subprocesses are mocked at ``run_command``; file writes use ``tmp_path``.
"""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from coding_setup.config import RunContext, Settings
from coding_setup.errors import FileWriteError, ProcessError
from coding_setup.executor import ShellExecutor
from coding_setup.models import WriteMode


pytestmark = pytest.mark.unit


@pytest.fixture
def executor(node_project: Path) -> ShellExecutor:
    return ShellExecutor(RunContext(target_dir=node_project))


class TestWriteFile:
    @pytest.mark.asyncio
    async def test_always_overwrites(self, executor, node_project):
        path = node_project / ".eslintrc.json"
        path.write_text("old", encoding="utf-8")
        assert await executor.write_file(path, "new", WriteMode.ALWAYS) is True
        assert path.read_text(encoding="utf-8") == "new"

    @pytest.mark.asyncio
    async def test_if_absent_keeps_existing(self, executor, node_project):
        path = node_project / ".gitignore"
        path.write_text("dist/", encoding="utf-8")
        assert await executor.write_file(path, "node_modules\n", WriteMode.IF_ABSENT) is False
        assert path.read_text(encoding="utf-8") == "dist/"

    @pytest.mark.asyncio
    async def test_if_absent_creates(self, executor, node_project):
        path = node_project / ".gitignore"
        assert await executor.write_file(path, "node_modules\n", WriteMode.IF_ABSENT) is True
        assert path.read_text(encoding="utf-8") == "node_modules\n"

    @pytest.mark.asyncio
    async def test_creates_parent_directories(self, executor, node_project):
        path = node_project / "config" / "nested" / "file.json"
        await executor.write_file(path, "{}", WriteMode.ALWAYS)
        assert path.exists()

    @pytest.mark.asyncio
    async def test_leaves_no_temp_file(self, executor, node_project):
        path = node_project / "tsconfig.json"
        await executor.write_file(path, "{}", WriteMode.ALWAYS)
        assert sorted(p.name for p in node_project.iterdir()) == ["package.json", "tsconfig.json"]

    @pytest.mark.asyncio
    async def test_overwrite_keeps_permission_bits(self, executor, node_project):
        path = node_project / "package.json"
        path.chmod(0o640)
        await executor.write_file(path, '{"name": "x"}\n', WriteMode.ALWAYS)
        assert path.stat().st_mode & 0o777 == 0o640
        assert path.read_text(encoding="utf-8") == '{"name": "x"}\n'

    @pytest.mark.asyncio
    async def test_executable_bit_survives(self, executor, node_project):
        path = node_project / "commitlint.config.js"
        path.write_text("old", encoding="utf-8")
        path.chmod(0o755)
        await executor.write_file(path, "new", WriteMode.ALWAYS)
        assert path.stat().st_mode & 0o777 == 0o755

    @pytest.mark.asyncio
    @pytest.mark.skipif(
        not hasattr(os, "geteuid") or os.geteuid() == 0,
        reason="root ignores directory permissions",
    )
    async def test_permission_error_raises(self, executor, node_project):
        locked = node_project / "locked"
        locked.mkdir()
        locked.chmod(0o500)
        try:
            with pytest.raises(FileWriteError) as excinfo:
                await executor.write_file(locked / "x.json", "{}", WriteMode.ALWAYS)
            assert excinfo.value.path == locked / "x.json"
        finally:
            locked.chmod(0o700)

    @pytest.mark.asyncio
    async def test_target_is_directory_raises(self, executor, node_project):
        target = node_project / "tsconfig.json"
        target.mkdir()
        (target / "keep").write_text("x", encoding="utf-8")
        with pytest.raises(FileWriteError):
            await executor.write_file(target, "{}", WriteMode.ALWAYS)


class TestPackageInstall:
    @pytest.mark.asyncio
    async def test_single_invocation(self, executor, node_project):
        with patch("coding_setup.executor.run_command", new=AsyncMock(return_value=(0, "", ""))) as run:
            await executor.run_package_install(["eslint", "husky"])

        run.assert_awaited_once()
        cmd = run.await_args.args[0]
        assert cmd == ["npm", "install", "--save-dev", "eslint", "husky"]
        assert run.await_args.kwargs["cwd"] == node_project
        assert run.await_args.kwargs["timeout"] == 600

    @pytest.mark.asyncio
    async def test_uses_configured_package_manager(self, node_project):
        ctx = RunContext(target_dir=node_project, settings=Settings(package_manager="yarn"))
        with patch("coding_setup.executor.run_command", new=AsyncMock(return_value=(0, "", ""))) as run:
            await ShellExecutor(ctx).run_package_install(["eslint"])
        assert run.await_args.args[0] == ["yarn", "add", "--dev", "eslint"]

    @pytest.mark.asyncio
    async def test_empty_list_does_nothing(self, executor):
        with patch("coding_setup.executor.run_command", new=AsyncMock()) as run:
            await executor.run_package_install([])
        run.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_non_zero_exit_raises(self, executor):
        failing = AsyncMock(return_value=(1, "", "npm ERR! 404"))
        with patch("coding_setup.executor.run_command", new=failing):
            with pytest.raises(ProcessError) as excinfo:
                await executor.run_package_install(["no-such-package"])
        assert excinfo.value.returncode == 1
        assert "npm ERR! 404" in str(excinfo.value)

    @pytest.mark.asyncio
    async def test_missing_executable_raises(self, executor):
        missing = AsyncMock(side_effect=FileNotFoundError("npm"))
        with patch("coding_setup.executor.run_command", new=missing):
            with pytest.raises(ProcessError) as excinfo:
                await executor.run_package_install(["eslint"])
        assert excinfo.value.returncode == -1


class TestInitRepository:
    @pytest.mark.asyncio
    async def test_runs_git_init(self, executor, node_project):
        with patch("coding_setup.executor.run_command", new=AsyncMock(return_value=(0, "", ""))) as run:
            await executor.init_repository()
        assert run.await_args.args[0] == ["git", "init"]
        assert run.await_args.kwargs["cwd"] == node_project

    @pytest.mark.asyncio
    async def test_failure_raises(self, executor):
        with patch("coding_setup.executor.run_command", new=AsyncMock(return_value=(128, "", "fatal"))):
            with pytest.raises(ProcessError):
                await executor.init_repository()
