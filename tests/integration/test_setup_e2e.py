"""End-to-end setup runs against temporary projects.

The package manager and git are simulated by the recording executor; every
other step (inspection, planning, merging, template writes) is real.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from coding_setup.models import FeatureFlag
from coding_setup.runner import SetupRunner


pytestmark = pytest.mark.integration


async def _run(ctx, recording_executor):
    return await SetupRunner(ctx, executor=recording_executor(ctx)).run()


class TestIdempotence:
    @pytest.mark.asyncio
    async def test_init_twice_is_byte_identical(self, node_project, make_context, recording_executor, snapshot, init_flags):
        ctx = make_context(node_project, *init_flags)

        await _run(ctx, recording_executor)
        first = snapshot(node_project)
        second_report = await _run(ctx, recording_executor)
        second = snapshot(node_project)

        assert second == first
        assert second_report.overrides == []
        assert node_project / "package.json" in second_report.unchanged

    @pytest.mark.asyncio
    async def test_every_flag_twice(self, node_project, make_context, recording_executor, snapshot):
        ctx = make_context(node_project, *FeatureFlag)
        await _run(ctx, recording_executor)
        first = snapshot(node_project)
        await _run(ctx, recording_executor)
        assert snapshot(node_project) == first

    @pytest.mark.asyncio
    async def test_init_writes_expected_files(self, node_project, make_context, recording_executor, init_flags):
        ctx = make_context(node_project, *init_flags)
        await _run(ctx, recording_executor)

        for name in (".eslintrc.json", "commitlint.config.js", ".editorconfig", ".nvmrc", ".gitignore"):
            assert (node_project / name).is_file(), name
        assert not (node_project / "tsconfig.json").exists()

        manifest = json.loads((node_project / "package.json").read_text(encoding="utf-8"))
        assert manifest["husky"]["hooks"] == {
            "commit-msg": "commitlint -E HUSKY_GIT_PARAMS",
            "pre-push": "check-git-branch-name -e",
        }
        assert manifest["scripts"] == {
            "build": "tsc",
            "test": "jest",
            "lint": "eslint --ext .ts,.tsx src/",
        }


class TestPreservation:
    @pytest.mark.asyncio
    async def test_unrelated_keys_survive(self, node_project, make_context, recording_executor, init_flags, manifest_data):
        ctx = make_context(node_project, *init_flags)
        await _run(ctx, recording_executor)

        manifest = json.loads((node_project / "package.json").read_text(encoding="utf-8"))
        assert manifest["foo"] == "bar"
        assert manifest["name"] == manifest_data["name"]
        assert manifest["dependencies"] == manifest_data["dependencies"]
        assert list(manifest)[:5] == list(manifest_data)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "flags",
        [
            (FeatureFlag.GITIGNORE,),
            (FeatureFlag.GIT_INIT,),
            (FeatureFlag.GIT_INIT, FeatureFlag.GITIGNORE, FeatureFlag.LINT_REACT),
            tuple(FeatureFlag),
        ],
    )
    async def test_user_gitignore_never_overwritten(self, node_project, make_context, recording_executor, flags):
        gitignore = node_project / ".gitignore"
        gitignore.write_text("dist/", encoding="utf-8")

        await _run(make_context(node_project, *flags), recording_executor)

        assert gitignore.read_text(encoding="utf-8") == "dist/"

    @pytest.mark.asyncio
    async def test_missing_gitignore_created(self, empty_project, make_context, recording_executor):
        await _run(make_context(empty_project, FeatureFlag.GITIGNORE), recording_executor)
        assert (empty_project / ".gitignore").read_text(encoding="utf-8").strip() == "node_modules"

    @pytest.mark.asyncio
    async def test_tool_owned_lint_config_refreshed(self, node_project, make_context, recording_executor):
        eslintrc = node_project / ".eslintrc.json"
        eslintrc.write_text('{"extends": "standard"}', encoding="utf-8")

        await _run(make_context(node_project, FeatureFlag.LINT_BASIC), recording_executor)

        config = json.loads(eslintrc.read_text(encoding="utf-8"))
        assert config["extends"] == ["airbnb-typescript/base"]

    @pytest.mark.asyncio
    async def test_user_editorconfig_kept(self, node_project, make_context, recording_executor):
        editorconfig = node_project / ".editorconfig"
        editorconfig.write_text("root = true\n[*]\nindent_size = 4\n", encoding="utf-8")
        (node_project / ".nvmrc").write_text("v20\n", encoding="utf-8")

        await _run(make_context(node_project, FeatureFlag.EDITOR_CONFIG), recording_executor)

        assert "indent_size = 4" in editorconfig.read_text(encoding="utf-8")
        assert (node_project / ".nvmrc").read_text(encoding="utf-8") == "v20\n"


class TestOverrides:
    @pytest.mark.asyncio
    async def test_changed_hook_reported_once(self, node_project, make_context, recording_executor, manifest_data):
        manifest_data["husky"] = {"hooks": {"commit-msg": "old-command", "pre-commit": "lint-staged"}}
        (node_project / "package.json").write_text(json.dumps(manifest_data, indent=2), encoding="utf-8")

        ctx = make_context(node_project, FeatureFlag.COMMIT_LINT, FeatureFlag.GITFLOW_HOOKS)
        report = await _run(ctx, recording_executor)

        assert [o.key for o in report.overrides] == ["commit-msg"]
        hooks = json.loads((node_project / "package.json").read_text(encoding="utf-8"))["husky"]["hooks"]
        assert hooks == {
            "commit-msg": "commitlint -E HUSKY_GIT_PARAMS",
            "pre-commit": "lint-staged",
            "pre-push": "check-git-branch-name -e",
        }

        again = await _run(ctx, recording_executor)
        assert again.overrides == []
