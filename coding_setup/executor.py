"""Side-effecting adapter between the plan and the outside world.

The planner and merger never touch the filesystem or spawn processes; they
hand that to an object implementing ``Executor``.  ``ShellExecutor`` is the
real implementation: it shells out to git and the configured package manager
and writes files inside the run's target directory.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Protocol

from .config import RunContext
from .errors import FileWriteError, ProcessError
from .models import WriteMode
from .utils import run_command


class Executor(Protocol):
    """Operations the runner needs to apply a plan."""

    async def init_repository(self) -> None: ...

    async def run_package_install(self, packages: list[str]) -> None: ...

    async def write_file(self, path: Path, content: str, mode: WriteMode) -> bool: ...


class ShellExecutor:
    """Executor backed by real subprocesses and the local filesystem."""

    def __init__(self, ctx: RunContext) -> None:
        self.ctx = ctx

    async def init_repository(self) -> None:
        await self._run(["git", "init"], timeout=60)

    async def run_package_install(self, packages: list[str]) -> None:
        """Install *packages* as dev dependencies in a single invocation.

        Raises:
            ProcessError: If the package manager is missing, times out or
                exits non-zero.
        """
        if not packages:
            return
        cmd = [*self.ctx.settings.install_command, *packages]
        await self._run(cmd, timeout=self.ctx.settings.install_timeout, capture=False)

    async def write_file(self, path: Path, content: str, mode: WriteMode) -> bool:
        """Write *content* to *path*.

        Returns:
            ``True`` if the file was written, ``False`` if *mode* is
            ``IF_ABSENT`` and the file already existed.

        Raises:
            FileWriteError: If the file cannot be written.
        """
        path = Path(path)
        if mode is WriteMode.IF_ABSENT and path.exists():
            return False
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            _atomic_write(path, content)
        except OSError as exc:
            raise FileWriteError(path, exc.strerror or str(exc)) from exc
        return True

    async def _run(self, cmd: list[str], *, timeout: int, capture: bool = True) -> None:
        try:
            returncode, _stdout, stderr = await run_command(
                cmd, cwd=self.ctx.target_dir, timeout=timeout, capture=capture
            )
        except OSError as exc:
            raise ProcessError(cmd, -1, str(exc)) from exc
        if returncode != 0:
            raise ProcessError(cmd, returncode, stderr)


def _atomic_write(path: Path, content: str) -> None:
    """Write through a sibling temp file and rename it over *path*.

    The permission bits of an existing *path* are carried over.
    """
    tmp = path.with_name(f".{path.name}.tmp")
    try:
        tmp.write_text(content, encoding="utf-8")
        if path.exists():
            shutil.copymode(path, tmp)
        tmp.replace(path)
    finally:
        if tmp.exists():
            tmp.unlink()
