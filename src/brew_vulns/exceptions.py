# brew_vulns/exceptions.py

from typing import Any, Dict, Optional


class BrewVulnsError(Exception):
    """
    Base exception for all brew-vulns errors.

    Attributes:
        message: Human readable description of the error
        code: Optional machine readable error code
        details: Optional dictionary with extra context
    """

    def __init__(self, message: str, code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


class ProcessError(BrewVulnsError):
    """Raised when an external process fails."""


class ExternalCommandError(ProcessError):
    """
    Raised when a brew command exits with a non-zero status.

    The exit status is kept on the exception so callers can report it.
    """

    def __init__(self, message: str, exit_status: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.exit_status = exit_status


class FileSystemError(BrewVulnsError):
    """Raised for missing files or unreadable paths."""


class ManifestNotFoundError(FileSystemError):
    """Raised when a Brewfile does not exist."""


class ValidationError(BrewVulnsError):
    """Raised when input or output data is invalid."""


class MalformedDataError(ValidationError):
    """Raised when brew output cannot be parsed into the expected schema."""
