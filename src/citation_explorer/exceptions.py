"""
Exceptions
==========

Error taxonomy for network construction and paper retrieval.

- FetchError: a single paper could not be retrieved
    - NotFoundError: the repository has no such paper
    - TransportError: non-success status, timeout or unreachable host
    - MalformedRecordError: payload is missing required fields
- RootUnavailableError: the root paper could not be fetched (fatal)
- BuildCancelledError: a build was abandoned by its caller
- ConfigError: invalid configuration value
- UnsupportedOperationError: the paper repository lacks an optional capability
"""

from typing import Optional


class CitationExplorerError(Exception):
    """Base class for all citation explorer errors."""


class ConfigError(CitationExplorerError):
    """Raised when a configuration value cannot be parsed."""


class FetchError(CitationExplorerError):
    """A paper could not be fetched from the repository."""

    def __init__(self, identifier: str, message: str) -> None:
        super().__init__(f"{identifier}: {message}")
        self.identifier = identifier
        self.message = message


class NotFoundError(FetchError):
    """The repository does not know the requested identifier."""

    def __init__(self, identifier: str) -> None:
        super().__init__(identifier, "paper not found")


class TransportError(FetchError):
    """The repository returned a non-success status or was unreachable."""

    def __init__(self, identifier: str, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(identifier, message)
        self.status_code = status_code


class MalformedRecordError(FetchError):
    """Fetched data is missing fields required to build a PaperRecord."""


class RootUnavailableError(CitationExplorerError):
    """The root paper of a network build could not be fetched."""

    def __init__(self, identifier: str, cause: FetchError) -> None:
        super().__init__(f"Root paper {identifier} is unavailable: {cause.message}")
        self.identifier = identifier
        self.cause = cause


class BuildCancelledError(CitationExplorerError):
    """A network build was cancelled before it completed."""


class UnsupportedOperationError(CitationExplorerError):
    """The paper repository does not provide the requested operation."""
