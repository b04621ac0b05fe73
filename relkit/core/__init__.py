"""Core domain types and logic."""

from .config import ConfigError, ReleaseConfig, load_config
from .errors import ErrorCode
from .result import Err, Ok, Result
from .runtime import RuntimeOptions
from .templating import extract_version, render

__all__ = [
    # config
    "ConfigError",
    "ReleaseConfig",
    "load_config",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
    # runtime
    "RuntimeOptions",
    # templating
    "extract_version",
    "render",
]
