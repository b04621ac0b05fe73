"""Typed release configuration.

The configuration lives in `.release.toml` at the repository root:

    [git]
    require_clean = true
    commit_message = "Release %s"
    tag_name = "v%s"
    changelog_command = "git log --pretty=format:'* %s (%h)' [REV_RANGE]"

    [github]
    release = true
    assets = "dist/*.tar.gz"

    [dist]
    repo = "git@github.com:owner/project-dist.git#main"

Every key is optional. A missing file yields the defaults below.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_str, get_str_list, get_table

__all__ = [
    "CONFIG_FILE_NAME",
    "ConfigError",
    "DistConfig",
    "GitConfig",
    "GithubConfig",
    "ReleaseConfig",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILE_NAME = ".release.toml"

DEFAULT_COMMIT_MESSAGE = "Release %s"
DEFAULT_TAG_NAME = "%s"
DEFAULT_TAG_ANNOTATION = "Release %s"
DEFAULT_CHANGELOG_COMMAND = "git log --pretty=format:'* %s (%h)' [REV_RANGE]"
DEFAULT_TOKEN_REF = "GITHUB_TOKEN"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class GitConfig:
    """Primary repository settings."""

    require_clean: bool = True
    stage_files: tuple[str, ...] = ()
    stage_all: bool = True
    commit_message: str = DEFAULT_COMMIT_MESSAGE
    tag_name: str = DEFAULT_TAG_NAME
    tag_annotation: str = DEFAULT_TAG_ANNOTATION
    push_repo: str | None = None
    changelog_command: str | None = DEFAULT_CHANGELOG_COMMAND


@dataclass(frozen=True, slots=True)
class GithubConfig:
    """Remote release settings."""

    release: bool = False
    release_name: str = DEFAULT_COMMIT_MESSAGE
    token_ref: str = DEFAULT_TOKEN_REF
    pre_release: bool = False
    draft: bool = False
    assets: str | None = None


@dataclass(frozen=True, slots=True)
class DistConfig:
    """Companion distribution repository settings.

    The companion repository is only handled when ``repo`` is set.
    """

    repo: str | None = None
    stage_dir: str = ".stage"
    base_dir: str = "dist"
    files: tuple[str, ...] = ("**/*",)
    commit_message: str = DEFAULT_COMMIT_MESSAGE
    tag_name: str = DEFAULT_TAG_NAME
    tag_annotation: str = DEFAULT_TAG_ANNOTATION


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Main configuration container."""

    git: GitConfig = field(default_factory=GitConfig)
    github: GithubConfig = field(default_factory=GithubConfig)
    dist: DistConfig = field(default_factory=DistConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ReleaseConfig:
        """Create ReleaseConfig from a mapping (parsed TOML)."""
        git: StrDict = get_table(data, "git") or {}
        github: StrDict = get_table(data, "github") or {}
        dist: StrDict = get_table(data, "dist") or {}

        return cls(
            git=GitConfig(
                require_clean=get_bool(git, "require_clean", True),
                stage_files=get_str_list(git, "stage_files") or (),
                stage_all=get_bool(git, "stage_all", True),
                commit_message=get_str(git, "commit_message") or DEFAULT_COMMIT_MESSAGE,
                tag_name=get_str(git, "tag_name") or DEFAULT_TAG_NAME,
                tag_annotation=get_str(git, "tag_annotation") or DEFAULT_TAG_ANNOTATION,
                push_repo=get_str(git, "push_repo"),
                # An explicit empty string disables changelog generation.
                changelog_command=(
                    get_str(git, "changelog_command")
                    if "changelog_command" in git
                    else DEFAULT_CHANGELOG_COMMAND
                ),
            ),
            github=GithubConfig(
                release=get_bool(github, "release", False),
                release_name=get_str(github, "release_name") or DEFAULT_COMMIT_MESSAGE,
                token_ref=get_str(github, "token_ref") or DEFAULT_TOKEN_REF,
                pre_release=get_bool(github, "pre_release", False),
                draft=get_bool(github, "draft", False),
                assets=get_str(github, "assets"),
            ),
            dist=DistConfig(
                repo=get_str(dist, "repo"),
                stage_dir=get_str(dist, "stage_dir") or ".stage",
                base_dir=get_str(dist, "base_dir") or "dist",
                files=get_str_list(dist, "files") or ("**/*",),
                commit_message=get_str(dist, "commit_message") or DEFAULT_COMMIT_MESSAGE,
                tag_name=get_str(dist, "tag_name") or DEFAULT_TAG_NAME,
                tag_annotation=get_str(dist, "tag_annotation") or DEFAULT_TAG_ANNOTATION,
            ),
        )

    def with_overrides(
        self,
        *,
        require_clean: bool | None = None,
        github_release: bool | None = None,
    ) -> ReleaseConfig:
        """Return a copy with CLI flag overrides applied (None keeps the file value)."""
        config = self
        if require_clean is not None:
            config = replace(config, git=replace(config.git, require_clean=require_clean))
        if github_release is not None:
            config = replace(config, github=replace(config.github, release=github_release))
        return config


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load and parse release configuration from a TOML file.

    Args:
        path: Path to `.release.toml`

    Returns:
        Ok(ReleaseConfig) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(ReleaseConfig.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load config from file, or return the defaults if the file doesn't exist.

    A file that exists but cannot be parsed is still an error.
    """
    if not path.exists():
        return Ok(ReleaseConfig())
    return load_config(path)
