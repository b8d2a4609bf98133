"""Exception types raised while building installer scripts."""

from __future__ import annotations


class InnoBundlerError(Exception):
    """Base class for fatal installer build errors."""


class ConfigurationError(InnoBundlerError):
    """Raised when the project descriptor cannot be resolved into a configuration."""


class ScriptSynthesisError(InnoBundlerError):
    """Raised when staging assets or writing the script fails."""
