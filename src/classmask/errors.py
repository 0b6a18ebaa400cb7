# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Error taxonomy for class obfuscation runs."""

from pathlib import Path


class ObfuscationError(RuntimeError):
    """Represent any obfuscation pipeline failure."""


class ConfigError(ObfuscationError):
    """Represent invalid obfuscation configuration."""


class ArtifactIOError(ObfuscationError):
    """Represent a missing or unreadable artifact path."""


class ArtifactNotFoundError(ArtifactIOError):
    """Represent an absent artifact root."""


class MappingError(ObfuscationError):
    """Represent a mapping table invariant violation."""


class MappingLoadError(ObfuscationError):
    """Represent a corrupt or unreadable persisted mapping."""


class RewriteError(ObfuscationError):
    """Represent a rewrite failure for one artifact file.

    Args:
        kind: Artifact kind being rewritten.
        path: File that failed.
        message: Failure detail.
    """

    def __init__(self, kind: str, path: Path, message: str) -> None:
        super().__init__(f"{kind} rewrite failed for {path}: {message}")
        self.kind = kind
        self.path = path


class PipelineError(ObfuscationError):
    """Represent a run-stopping failure.

    Args:
        state: Pipeline state that was being entered when the run failed.
        message: Failure detail.
        severity: Severity tag reported to the caller.
    """

    def __init__(self, state: str, message: str, severity: str = "fatal") -> None:
        super().__init__(message)
        self.state = state
        self.severity = severity
