"""Error types raised by the bundling engine.

Every error carries the build ``phase`` it was raised in so callers can
report where a build stopped. None of them are retried: they are
deterministic functions of the input files and the configuration.
"""

from __future__ import annotations

from typing import Optional


class BundlerError(Exception):
    """Base class for all bundling failures."""

    phase = "build"


class OutOfRootError(BundlerError, ValueError):
    """Raised when a path or URL resolves outside the project root."""

    phase = "ingest"

    def __init__(self, root: str, path: str) -> None:
        super().__init__(f"{path} is outside of the project root {root}")
        self.root = root
        self.path = path


class MissingDependencyError(BundlerError):
    """Raised when a reference points to a document that was never ingested."""

    phase = "graph"

    def __init__(self, source: Optional[str], target: str) -> None:
        if source:
            message = f"{source} references missing document {target}"
        else:
            message = f"Entrypoint {target} was not found in the project files"
        super().__init__(message)
        self.source = source
        self.target = target


class StrategyConflictError(BundlerError):
    """Raised when the bundle configuration cannot produce a valid partition."""

    phase = "strategy"


class MalformedDocumentError(BundlerError):
    """Raised by the parser collaborator for content it cannot handle."""

    phase = "parse"

    def __init__(self, message: str, url: Optional[str] = None) -> None:
        super().__init__(message)
        self.url = url

    def __str__(self) -> str:
        message = super().__str__()
        if self.url:
            return f"{self.url}: {message}"
        return message


class SerializationError(BundlerError):
    """Raised when a merged bundle tree cannot be serialized."""

    phase = "serialize"

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to serialize bundle {url}: {reason}")
        self.url = url


class BuildInProgressError(BundlerError, RuntimeError):
    """Raised on external store mutation while a build owns the store."""

    phase = "store"


class IngestionAbortedError(BundlerError):
    """Raised when a build is requested after ingestion was aborted."""

    phase = "ingest"
