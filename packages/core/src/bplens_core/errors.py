"""Exceptions raised while resolving models and reading diagnostic reports."""

from __future__ import annotations


class BplensError(Exception):
    """Base class for recoverable bplens_core failures.

    The message is shown to the user as-is on the error screen.
    """


class ConfigError(BplensError):
    """The configuration is missing, malformed, or points at a path that does not exist."""


class DiagnosticLoadError(BplensError):
    """A diagnostic report is missing or cannot be parsed."""
