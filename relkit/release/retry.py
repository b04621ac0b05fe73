"""Bounded retry around the release API.

Release creation is the one retried network call: up to three attempts with
exponential backoff. Every failed attempt is logged as a warning except the
last one, which is logged as an error. The final ``ApiError`` carries the
number of attempts made.

Uploads are passed through untouched; a failed upload fails its batch.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import replace

from tenacity import RetryCallState, Retrying, retry_if_result, stop_after_attempt, wait_exponential
from tenacity.wait import wait_base

from relkit.core.result import Err, Result
from relkit.output.log import ReleaseLog
from relkit.release.api import (
    ApiError,
    CreatedRelease,
    CreateReleaseParams,
    ReleaseApi,
    UploadAssetParams,
    UploadedAsset,
)
from relkit.release.timeouts import (
    RELEASE_RETRY_ATTEMPTS,
    RELEASE_RETRY_MAX_DELAY_SECONDS,
    RELEASE_RETRY_MIN_DELAY_SECONDS,
)

__all__ = ["RetryingReleaseApi"]


def _is_err(result: object) -> bool:
    return isinstance(result, Err)


class RetryingReleaseApi:
    """ReleaseApi decorator retrying ``create_release``."""

    def __init__(
        self,
        api: ReleaseApi,
        log: ReleaseLog,
        *,
        attempts: int = RELEASE_RETRY_ATTEMPTS,
        wait: wait_base | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.api = api
        self.log = log
        self.attempts = max(1, attempts)
        self.wait = wait or wait_exponential(
            multiplier=1,
            min=RELEASE_RETRY_MIN_DELAY_SECONDS,
            max=RELEASE_RETRY_MAX_DELAY_SECONDS,
        )
        self.sleep = sleep

    def _log_attempt(self, retry_state: RetryCallState) -> None:
        outcome = retry_state.outcome
        if outcome is None or outcome.failed:
            return
        result = outcome.result()
        if not isinstance(result, Err):
            return
        attempt = retry_state.attempt_number
        log_fn = self.log.error if attempt >= self.attempts else self.log.warn
        log_fn(f"Could not create release: {result.error} (Attempt {attempt} of {self.attempts})")

    def _give_up(self, retry_state: RetryCallState) -> Result[CreatedRelease, ApiError]:
        if retry_state.outcome is None:
            return Err(ApiError(url="", status=0, message="no attempt made"))
        result: Result[CreatedRelease, ApiError] = retry_state.outcome.result()
        if isinstance(result, Err):
            return Err(replace(result.error, attempts=retry_state.attempt_number))
        return result

    def create_release(self, params: CreateReleaseParams) -> Result[CreatedRelease, ApiError]:
        retrying = Retrying(
            stop=stop_after_attempt(self.attempts),
            wait=self.wait,
            retry=retry_if_result(_is_err),
            after=self._log_attempt,
            retry_error_callback=self._give_up,
            sleep=self.sleep,
        )
        return retrying(self.api.create_release, params)

    def upload_asset(self, params: UploadAssetParams) -> Result[UploadedAsset, ApiError]:
        return self.api.upload_asset(params)

    def close(self) -> None:
        self.api.close()
