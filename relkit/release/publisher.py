"""Remote release publication.

Creates the remote release for the pushed tag and uploads asset files to it.
Both operations are skipped entirely under dry-run.

Runtime options:
    reads ``version``, ``changelog``
    writes ``github_release_id`` (release)
    reads ``github_release_id`` (upload_assets)
"""

from __future__ import annotations

import glob
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from relkit.core.config import GithubConfig
from relkit.core.result import Err, Ok, Result
from relkit.core.runtime import CHANGELOG, RELEASE_ID, VERSION, RuntimeOptions
from relkit.core.templating import render
from relkit.git.remote import parse_repo
from relkit.output.log import ReleaseLog
from relkit.release.api import (
    ApiError,
    CreateReleaseParams,
    ReleaseApi,
    UploadAssetParams,
    UploadedAsset,
)
from relkit.release.errors import ReleaseError

__all__ = ["ReleasePublisher", "find_assets"]


def find_assets(pattern: str, root: Path) -> list[Path]:
    """Resolve an asset glob relative to ``root``; resolved anew on every call."""
    matches = sorted(glob.glob(pattern, root_dir=root, recursive=True))
    paths = [root / m for m in matches]
    return [p for p in paths if p.is_file()]


class ReleasePublisher:
    """Release creation and asset upload.

    Attributes:
        api: Release API client (usually wrapped in RetryingReleaseApi)
        log: Release log
        runtime: Runtime option store
        root: Directory asset globs are resolved against
        dry_run: Skip every remote call when True
    """

    def __init__(
        self,
        api: ReleaseApi,
        log: ReleaseLog,
        runtime: RuntimeOptions,
        *,
        root: Path,
        dry_run: bool = False,
    ) -> None:
        self.api = api
        self.log = log
        self.runtime = runtime
        self.root = root
        self.dry_run = dry_run

    def release(
        self, config: GithubConfig, remote_url: str, tag_name: str
    ) -> Result[None, ReleaseError]:
        parsed = parse_repo(remote_url)
        if isinstance(parsed, Err):
            return parsed
        repo = parsed.value

        self.log.execution("releases#createRelease (start)", repo.repository, repo.owner, repo.project)
        if self.dry_run:
            return Ok(None)

        context = {"version": self.runtime.get_str(VERSION) or ""}
        params = CreateReleaseParams(
            owner=repo.owner,
            repo=repo.project,
            tag_name=render(tag_name, context),
            name=render(config.release_name, context),
            body=self.runtime.get_str(CHANGELOG),
            prerelease=config.pre_release,
            draft=config.draft,
        )
        result = self.api.create_release(params)
        if isinstance(result, Err):
            error = result.error
            return Err(
                ReleaseError(
                    kind="release_failed",
                    message=f"Could not create release {params.tag_name} on {repo.repository}",
                    hint=str(error),
                    attempts=error.attempts,
                )
            )

        created = result.value
        self.runtime.set_option(RELEASE_ID, created.id)
        self.log.execution(
            f'releases#createRelease (success) {created.html_url} {created.tag_name} "{created.name}"'
        )
        self.log.debug(created)
        return Ok(None)

    def _upload_one(self, params: UploadAssetParams) -> tuple[UploadAssetParams, Result[UploadedAsset, ApiError]]:
        return params, self.api.upload_asset(params)

    def upload_assets(self, remote_url: str, assets: str) -> Result[None, ReleaseError]:
        """Upload every file matching ``assets`` to the created release.

        Uploads run concurrently; any failed upload fails the whole batch.
        No matching file is not an error.
        """
        parsed = parse_repo(remote_url)
        if isinstance(parsed, Err):
            return parsed
        repo = parsed.value

        self.log.execution("releases#uploadAsset (start)", repo.repository, repo.owner, repo.project)
        if self.dry_run:
            return Ok(None)

        files = find_assets(assets, self.root)
        if not files:
            self.log.execution("releases#uploadAsset", "No assets found", assets, str(self.root))
            return Ok(None)

        release_id = self.runtime.get_option(RELEASE_ID)
        if not isinstance(release_id, int):
            return Err(
                ReleaseError(
                    kind="upload_failed",
                    message="No release to upload assets to.",
                    hint="Enable [github] release or create the release first.",
                )
            )

        requests = [
            UploadAssetParams(
                owner=repo.owner,
                repo=repo.project,
                release_id=release_id,
                file_path=path,
                name=path.name,
            )
            for path in files
        ]
        with ThreadPoolExecutor(max_workers=len(requests)) as pool:
            outcomes = list(pool.map(self._upload_one, requests))

        failures: list[str] = []
        for params, outcome in outcomes:
            match outcome:
                case Ok(asset):
                    self.log.execution("releases#uploadAsset (success)", asset.browser_download_url)
                case Err(error):
                    self.log.debug(error)
                    failures.append(f"{params.name}: {error}")

        if failures:
            return Err(
                ReleaseError(
                    kind="upload_failed",
                    message=f"Could not upload {len(failures)} of {len(requests)} asset(s).",
                    hint="\n".join(failures),
                )
            )
        return Ok(None)
