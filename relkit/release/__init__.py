"""Release steps after git: changelog, remote release, asset upload.

- changelog: changelog text for the revision range since the previous tag
- api: remote release API adapter (create release, upload asset)
- retry: bounded retry decorator around the API adapter
- publisher: release creation and asset upload with dry-run handling
- pipeline: orchestration of the complete release
"""

from __future__ import annotations
