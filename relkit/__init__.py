"""relkit: single-command release automation for git repositories."""

__version__ = "0.3.0"
