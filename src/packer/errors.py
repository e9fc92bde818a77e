"""Exception types raised while packing external modules."""

from __future__ import annotations

from typing import List


class PackError(Exception):
    """Base class for packing failures."""


class ConfigError(PackError):
    """Raised when configuration values are invalid."""


class ReportContractError(PackError):
    """Raised when the compilation report violates the bundler contract."""


class ManifestError(PackError):
    """Raised when the project manifest is missing or cannot be parsed."""


class ArtifactError(PackError):
    """Failure scoped to a single artifact's materialization.

    The original exception is kept as ``__cause__``.
    """

    def __init__(self, output_path: str, phase: str, message: str):
        self.output_path = output_path
        self.phase = phase
        super().__init__(f"[{output_path}] {phase} failed: {message}")


class MaterializationError(PackError):
    """Raised after all artifacts ran when one or more of them failed."""

    def __init__(self, failures: List[ArtifactError]):
        self.failures = list(failures)
        lines = "; ".join(str(f) for f in self.failures)
        super().__init__(f"{len(self.failures)} artifact(s) failed to materialize: {lines}")
