"""Release orchestration.

Sequence of one release run:

    validate repo -> validate clean working dir -> remote url -> API client
    -> previous version -> detect changes -> stage -> commit -> tag -> push
    -> push tags -> changelog -> remote release -> asset upload
    -> companion (dist) repository

Each step starts only after the previous one finished. The first fatal
error stops the run and is returned; soft failures are logged by the step
itself. The release API client is built once, before any mutation, and
closed when the run ends.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TypeAlias

from relkit.core.result import Err, Ok, Result
from relkit.core.runtime import DIST_TAG_SET, TAG_SET, VERSION
from relkit.git.remote import RepoIdentity, parse_repo
from relkit.git.workflow import GitWorkflow, split_clone_spec
from relkit.release.api import ReleaseApi, build_release_api, get_token
from relkit.release.changelog import ChangelogGenerator
from relkit.release.context import ReleaseContext
from relkit.release.errors import ReleaseError
from relkit.release.publisher import ReleasePublisher
from relkit.release.retry import RetryingReleaseApi

__all__ = ["ApiFactory", "run_release"]

ApiFactory: TypeAlias = Callable[[RepoIdentity, str | None], ReleaseApi]

SOURCE_REPO = "src"
DIST_REPO = "dist"


def _setup_api(
    ctx: ReleaseContext, remote_url: str, api_factory: ApiFactory
) -> Result[ReleaseApi | None, ReleaseError]:
    github = ctx.config.github
    if not github.release:
        return Ok(None)

    parsed = parse_repo(remote_url)
    if isinstance(parsed, Err):
        return parsed

    token = get_token(github.token_ref)
    if token is None:
        ctx.log.warn(
            f"Environment variable {github.token_ref} is not set; "
            "release API calls will be unauthenticated."
        )
    return Ok(RetryingReleaseApi(api_factory(parsed.value, token), ctx.log))


def _release_source(
    ctx: ReleaseContext, git: GitWorkflow, remote_url: str, api: ReleaseApi | None
) -> Result[None, ReleaseError]:
    config = ctx.config
    version = ctx.version

    git.resolve_previous_version(config.git.tag_name)
    # After a passed clean check the source repository never has changes
    git.has_changes(SOURCE_REPO, warn=not config.git.require_clean)
    git.status()

    git.stage(config.git.stage_files)
    if config.git.stage_all:
        git.stage_dir()
    git.commit(config.git.commit_message, version)
    git.tag(version, config.git.tag_name, config.git.tag_annotation)

    pushed = git.push(remote_url, config.git.push_repo)
    if isinstance(pushed, Err):
        return pushed
    if ctx.runtime.get_flag(TAG_SET):
        git.push_tags(version, config.git.push_repo)

    changelog = ChangelogGenerator(ctx.executor, git, ctx.log, ctx.runtime).get_changelog(
        config.git.changelog_command, config.git.tag_name
    )
    if isinstance(changelog, Err):
        return changelog

    if api is None:
        return Ok(None)

    publisher = ReleasePublisher(api, ctx.log, ctx.runtime, root=ctx.root, dry_run=ctx.dry_run)
    released = publisher.release(config.github, remote_url, config.git.tag_name)
    if isinstance(released, Err):
        return released
    if config.github.assets:
        uploaded = publisher.upload_assets(remote_url, config.github.assets)
        if isinstance(uploaded, Err):
            return uploaded
    return Ok(None)


def _release_dist(ctx: ReleaseContext, git: GitWorkflow) -> Result[None, ReleaseError]:
    dist = ctx.config.dist
    if dist.repo is None:
        return Ok(None)

    ctx.log.console.header(f"Companion repository {dist.repo}")
    stage_dir = ctx.root / dist.stage_dir
    cloned = git.clone(dist.repo, stage_dir)
    if isinstance(cloned, Err):
        return cloned

    copied = ctx.executor.copy_files(Path(dist.base_dir), dist.files, stage_dir)
    if isinstance(copied, Err):
        return Err(
            ReleaseError(
                kind="copy_failed",
                message=f"Could not copy {dist.base_dir} into {dist.stage_dir}",
                hint=copied.error.details,
            )
        )
    ctx.log.debug(f"copied {copied.value} file(s) into {stage_dir}")

    dist_git = GitWorkflow(ctx.executor.with_cwd(stage_dir), ctx.log, ctx.runtime, force=ctx.force)
    dist_git.stage_dir()
    dist_git.has_changes(DIST_REPO)
    dist_git.commit(dist.commit_message, ctx.version)
    dist_git.tag(ctx.version, dist.tag_name, dist.tag_annotation, flag=DIST_TAG_SET)

    dist_url, _ = split_clone_spec(dist.repo)
    pushed = dist_git.push(dist_url, dist_url)
    if isinstance(pushed, Err):
        return pushed
    if ctx.runtime.get_flag(DIST_TAG_SET):
        dist_git.push_tags(ctx.version, dist_url)
    return Ok(None)


def run_release(
    ctx: ReleaseContext, *, api_factory: ApiFactory = build_release_api
) -> Result[None, ReleaseError]:
    """Run a complete release.

    Args:
        ctx: Release context; ``ctx.runtime`` is populated along the way
        api_factory: Builds the release API client for the remote repository

    Returns:
        Ok(None) when the workflow completed, Err with the first fatal error
    """
    ctx.runtime.set_option(VERSION, ctx.version)
    mode = " (dry-run)" if ctx.dry_run else ""
    ctx.log.console.header(f"Release {ctx.version}{mode}")

    git = GitWorkflow(ctx.executor, ctx.log, ctx.runtime, force=ctx.force)

    checked = git.is_git_repo()
    if isinstance(checked, Err):
        return checked
    clean = git.is_working_dir_clean(ctx.config.git.require_clean)
    if isinstance(clean, Err):
        return clean

    remote = git.get_remote_url()
    if isinstance(remote, Err):
        return remote
    remote_url = remote.value

    api_result = _setup_api(ctx, remote_url, api_factory)
    if isinstance(api_result, Err):
        return api_result
    api = api_result.value

    try:
        result = _release_source(ctx, git, remote_url, api)
        if isinstance(result, Err):
            return result
        result = _release_dist(ctx, git)
        if isinstance(result, Err):
            return result
    finally:
        if api is not None:
            api.close()

    ctx.log.console.success(f"Released {ctx.version}{mode}: workflow completed.")
    return Ok(None)
