"""Tests for relkit.release.pipeline module."""

from __future__ import annotations

from pathlib import Path

import pytest

import relkit.git.shell as shell_mod
from relkit.core.config import DistConfig, GitConfig, GithubConfig, ReleaseConfig
from relkit.core.result import Err, Ok
from relkit.core.runtime import CHANGELOG, DIST_TAG_SET, PREVIOUS_VERSION, RELEASE_ID, TAG_SET
from relkit.git.remote import RepoIdentity
from relkit.output.console import MockConsole
from relkit.release.api import ReleaseApi
from relkit.release.context import ReleaseContext, create_context
from relkit.release.pipeline import run_release
from relkit.test._fakes import FakeReleaseApi, ScriptedProcess

REMOTE = "git@github.com:webpro/my.project.git"
DIST_REMOTE = "git@github.com:webpro/my.project-dist.git"
DIFF_INDEX = ("git", "diff-index", "--name-only", "HEAD", "--exit-code")
MUTATING = (("git", "add"), ("git", "commit"), ("git", "tag"), ("git", "push"), ("git", "clone"))


@pytest.fixture
def proc(monkeypatch: pytest.MonkeyPatch) -> ScriptedProcess:
    scripted = ScriptedProcess()
    scripted.on("git", "config", "--get", "remote.origin.url", stdout=f"{REMOTE}\n")
    scripted.on("git", "describe", "--tags", "--abbrev=0", stdout="v0.9.0\n")
    scripted.on("git", "log", stdout="* Add feature (abc1234)")
    monkeypatch.setattr(shell_mod, "run_process", scripted)
    return scripted


@pytest.fixture(autouse=True)
def token(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITHUB_TOKEN", "secret")


class RecordingApiFactory:
    def __init__(self, api: FakeReleaseApi | None = None) -> None:
        self.api = api or FakeReleaseApi()
        self.calls: list[tuple[RepoIdentity, str | None]] = []

    def __call__(self, repo: RepoIdentity, token: str | None) -> ReleaseApi:
        self.calls.append((repo, token))
        return self.api


def _context(
    tmp_path: Path,
    config: ReleaseConfig | None = None,
    *,
    dry_run: bool = False,
    force: bool = False,
) -> tuple[ReleaseContext, MockConsole]:
    console = MockConsole()
    ctx = create_context(
        root=tmp_path,
        version="1.0.0",
        config=config or ReleaseConfig(git=GitConfig(tag_name="v%s")),
        console=console,
        dry_run=dry_run,
        force=force,
    )
    return ctx, console


def _github_config(**github: object) -> ReleaseConfig:
    return ReleaseConfig(
        git=GitConfig(tag_name="v%s"),
        github=GithubConfig(release=True, **github),  # type: ignore[arg-type]
    )


class TestSourceRepository:
    def test_steps_run_in_order(self, proc: ScriptedProcess, tmp_path: Path) -> None:
        ctx, console = _context(tmp_path)

        result = run_release(ctx)

        assert result == Ok(None)
        order = [
            proc.index("git", "rev-parse", "--git-dir"),
            proc.index(*DIFF_INDEX),
            proc.index("git", "config", "--get", "remote.origin.url"),
            proc.index("git", "describe"),
            proc.index("git", "add", ".", "--all"),
            proc.index("git", "commit"),
            proc.index("git", "tag"),
            proc.index("git", "push"),
            proc.index("git", "push", "--follow-tags"),
            proc.index("git", "log"),
        ]
        assert -1 not in order
        assert order == sorted(order)
        assert ["git", "tag", "--annotate", "--message=Release 1.0.0", "v1.0.0"] in proc.calls
        assert ctx.runtime.get_option(PREVIOUS_VERSION) == "0.9.0"
        assert ctx.runtime.get_flag(TAG_SET)
        assert ctx.runtime.get_option(CHANGELOG) == "* Add feature (abc1234)"
        assert console.messages[-1] == "OK Released 1.0.0: workflow completed."

    def test_changelog_range_from_previous_tag(self, proc: ScriptedProcess, tmp_path: Path) -> None:
        ctx, _ = _context(tmp_path)
        run_release(ctx)
        assert proc.calls[-1] == ["git", "log", "--pretty=format:* %s (%h)", "v0.9.0...HEAD"]

    def test_stage_files_before_stage_all(self, proc: ScriptedProcess, tmp_path: Path) -> None:
        config = ReleaseConfig(git=GitConfig(stage_files=("package.json",), stage_all=False))
        ctx, _ = _context(tmp_path, config)

        run_release(ctx)

        assert proc.ran("git", "add", "package.json")
        assert not proc.ran("git", "add", ".", "--all")

    def test_not_a_repo(self, proc: ScriptedProcess, tmp_path: Path) -> None:
        proc.on("git", "rev-parse", "--git-dir", returncode=128, stderr="fatal: not a git repository")
        ctx, _ = _context(tmp_path)

        result = run_release(ctx)

        assert isinstance(result, Err)
        assert result.error.kind == "not_a_repo"
        assert len(proc.calls) == 1

    def test_dirty_working_dir_stops_before_mutation(self, proc: ScriptedProcess, tmp_path: Path) -> None:
        proc.on(*DIFF_INDEX, returncode=1, stdout="package.json\n")
        ctx, console = _context(tmp_path)

        result = run_release(ctx)

        assert isinstance(result, Err)
        assert result.error.kind == "dirty_working_dir"
        assert not any(proc.ran(*prefix) for prefix in MUTATING)
        assert not console.has_success()

    def test_clean_source_repository_is_not_reported_as_unchanged(
        self, proc: ScriptedProcess, tmp_path: Path
    ) -> None:
        ctx, console = _context(tmp_path)

        assert run_release(ctx) == Ok(None)

        assert ctx.runtime.get_option("src_has_changes") is False
        assert not console.find("No changes in src repo.")

    def test_unchanged_source_warns_without_clean_check(
        self, proc: ScriptedProcess, tmp_path: Path
    ) -> None:
        ctx, console = _context(tmp_path, ReleaseConfig(git=GitConfig(require_clean=False)))

        assert run_release(ctx) == Ok(None)

        assert console.find("warning: No changes in src repo.")

    def test_dirty_allowed_when_not_required(self, proc: ScriptedProcess, tmp_path: Path) -> None:
        proc.on(*DIFF_INDEX, returncode=1, stdout="package.json\n")
        config = ReleaseConfig(git=GitConfig(require_clean=False))
        ctx, _ = _context(tmp_path, config)

        assert run_release(ctx) == Ok(None)
        assert ctx.runtime.get_flag("src_has_changes")

    def test_missing_remote(self, proc: ScriptedProcess, tmp_path: Path) -> None:
        proc.on("git", "config", "--get", "remote.origin.url", returncode=1)
        ctx, _ = _context(tmp_path)

        result = run_release(ctx)

        assert isinstance(result, Err)
        assert result.error.kind == "remote_missing"

    def test_push_failure_is_fatal(self, proc: ScriptedProcess, tmp_path: Path) -> None:
        proc.on("git", "push", returncode=128, stderr="fatal: no upstream")
        factory = RecordingApiFactory()
        ctx, console = _context(tmp_path, _github_config())

        result = run_release(ctx, api_factory=factory)

        assert isinstance(result, Err)
        assert result.error.kind == "push_failed"
        assert not proc.ran("git", "log")
        assert factory.api.created == []
        assert factory.api.closed
        assert "git remote add origin" in console.text

    def test_soft_failures_continue(self, proc: ScriptedProcess, tmp_path: Path) -> None:
        proc.on("git", "commit", returncode=1, stdout="nothing to commit")
        proc.on("git", "tag", returncode=128, stderr="already exists")
        ctx, console = _context(tmp_path)

        assert run_release(ctx) == Ok(None)
        assert not proc.ran("git", "push", "--follow-tags")
        assert console.has_warning()
        assert console.has_success()


class TestRemoteRelease:
    def test_release_and_assets(self, proc: ScriptedProcess, tmp_path: Path) -> None:
        (tmp_path / "dist").mkdir()
        (tmp_path / "dist" / "my.project-1.0.0.zip").write_bytes(b"zip")
        factory = RecordingApiFactory()
        ctx, _ = _context(tmp_path, _github_config(assets="dist/*.zip"))

        assert run_release(ctx, api_factory=factory) == Ok(None)

        repo, token = factory.calls[0]
        assert repo.repository == "webpro/my.project"
        assert token == "secret"
        created = factory.api.created[0]
        assert created.tag_name == "v1.0.0"
        assert created.body == "* Add feature (abc1234)"
        assert ctx.runtime.get_option(RELEASE_ID) == 42
        assert [p.name for p in factory.api.uploaded] == ["my.project-1.0.0.zip"]
        assert factory.api.closed

    def test_missing_token_warns(
        self, proc: ScriptedProcess, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("GITHUB_TOKEN")
        factory = RecordingApiFactory()
        ctx, console = _context(tmp_path, _github_config())

        assert run_release(ctx, api_factory=factory) == Ok(None)
        assert factory.calls[0][1] is None
        assert console.find("GITHUB_TOKEN is not set")

    def test_release_disabled_builds_no_client(self, proc: ScriptedProcess, tmp_path: Path) -> None:
        factory = RecordingApiFactory()
        ctx, _ = _context(tmp_path)

        assert run_release(ctx, api_factory=factory) == Ok(None)
        assert factory.calls == []

    def test_upload_failure_is_fatal(self, proc: ScriptedProcess, tmp_path: Path) -> None:
        (tmp_path / "a.zip").write_bytes(b"zip")
        factory = RecordingApiFactory(FakeReleaseApi(failing_uploads=frozenset({"a.zip"})))
        ctx, console = _context(tmp_path, _github_config(assets="*.zip"))

        result = run_release(ctx, api_factory=factory)

        assert isinstance(result, Err)
        assert result.error.kind == "upload_failed"
        assert factory.api.closed
        assert not console.has_success()


class TestCompanionRepository:
    def test_dist_flow(self, proc: ScriptedProcess, tmp_path: Path) -> None:
        (tmp_path / "dist").mkdir()
        (tmp_path / "dist" / "index.js").write_text("main")
        config = ReleaseConfig(dist=DistConfig(repo=f"{DIST_REMOTE}#main"))
        ctx, _ = _context(tmp_path, config)

        assert run_release(ctx) == Ok(None)

        stage = tmp_path / ".stage"
        clone = proc.index("git", "clone")
        assert proc.calls[clone] == [
            "git", "clone", DIST_REMOTE, "-b", "main", "--single-branch", str(stage)
        ]
        assert (stage / "index.js").read_text() == "main"
        dist_calls = [c for c, cwd in zip(proc.calls, proc.cwds) if cwd == stage]
        assert dist_calls[0] == ["git", "add", ".", "--all"]
        assert ["git", "push", DIST_REMOTE] in dist_calls
        assert dist_calls[-1] == ["git", "push", "--follow-tags", DIST_REMOTE]
        assert ctx.runtime.get_flag(DIST_TAG_SET)

    def test_failed_dist_tag_skips_tag_push(self, proc: ScriptedProcess, tmp_path: Path) -> None:
        stage = tmp_path / ".stage"
        ctx, console = _context(tmp_path, ReleaseConfig(dist=DistConfig(repo=DIST_REMOTE)))
        proc.on("git", "tag", returncode=128, stderr="already exists")

        assert run_release(ctx) == Ok(None)

        assert not ctx.runtime.get_flag(DIST_TAG_SET)
        assert not any(
            call[:3] == ["git", "push", "--follow-tags"]
            for call, cwd in zip(proc.calls, proc.cwds)
            if cwd == stage
        )
        assert console.has_warning()

    def test_clone_failure_is_fatal(self, proc: ScriptedProcess, tmp_path: Path) -> None:
        proc.on("git", "clone", returncode=128, stderr="Repository not found.")
        ctx, _ = _context(tmp_path, ReleaseConfig(dist=DistConfig(repo=DIST_REMOTE)))

        result = run_release(ctx)

        assert isinstance(result, Err)
        assert result.error.kind == "clone_failed"


class TestDryRun:
    def test_no_mutation_and_no_api_calls(self, proc: ScriptedProcess, tmp_path: Path) -> None:
        (tmp_path / "dist").mkdir()
        (tmp_path / "dist" / "a.zip").write_bytes(b"zip")
        stage = tmp_path / ".stage"
        stage.mkdir()
        config = ReleaseConfig(
            git=GitConfig(tag_name="v%s", stage_files=("package.json",)),
            github=GithubConfig(release=True, assets="dist/*.zip"),
            dist=DistConfig(repo=DIST_REMOTE),
        )
        factory = RecordingApiFactory()
        ctx, console = _context(tmp_path, config, dry_run=True)

        assert run_release(ctx, api_factory=factory) == Ok(None)

        assert not any(proc.ran(*prefix) for prefix in MUTATING)
        assert factory.api.created == []
        assert factory.api.uploaded == []
        assert factory.api.closed
        assert stage.is_dir()
        assert list(stage.iterdir()) == []
        assert console.find("$ git push (dry-run)")
        assert console.find("releases#createRelease (start) webpro/my.project")
        assert console.messages[-1] == "OK Released 1.0.0 (dry-run): workflow completed."

    def test_read_only_commands_still_run(self, proc: ScriptedProcess, tmp_path: Path) -> None:
        ctx, _ = _context(tmp_path, dry_run=True)

        run_release(ctx)

        assert proc.ran("git", "describe")
        assert proc.ran("git", "log")
        assert ctx.runtime.get_option(CHANGELOG) == "* Add feature (abc1234)"
