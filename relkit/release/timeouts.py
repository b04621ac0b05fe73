from __future__ import annotations

# Release API requests (create release, upload asset)
API_TIMEOUT_SECONDS = 10.0
UPLOAD_TIMEOUT_SECONDS = 5 * 60.0

# Release creation retry policy
RELEASE_RETRY_ATTEMPTS = 3
RELEASE_RETRY_MIN_DELAY_SECONDS = 1.0
RELEASE_RETRY_MAX_DELAY_SECONDS = 30.0
