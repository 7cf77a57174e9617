"""
Custom exceptions for buscat.

Components raise these; only the CLI entry point turns them into exit codes.
"""


class BuscatError(Exception):
    """Base class for all errors that terminate a buscat invocation."""


class ConfigError(BuscatError):
    """Raised when the command line does not describe a valid invocation."""


class TransportError(BuscatError):
    """Raised when connecting, publishing or subscribing fails."""

    def __init__(self, message: str, cause: Exception = None):
        self.cause = cause
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
