"""Data models shared by the packing phases."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from constants import Constants


@dataclass(frozen=True)
class ExternalRef:
    """An external package referenced by one artifact.

    ``origin`` is the raw request of the first-party import that pulled the
    package in, or None for a first-level import.
    """
    external: str
    origin: Optional[str] = None

    @property
    def key(self) -> str:
        """Composite value key used for de-duplication."""
        return f"{self.origin or ''}\0{self.external}"


@dataclass(frozen=True)
class PackConfig:
    """Immutable configuration passed to every packing phase."""
    project_root: str
    manifest_path: str
    staging_dir: str
    enabled: bool = True
    max_buffer: int = Constants.DEFAULT_MAX_BUFFER
    timeout: Optional[float] = Constants.DEFAULT_TIMEOUT
    workers: int = Constants.DEFAULT_WORKERS
    verbose: bool = False
    npm_command: str = Constants.NPM_COMMAND


@dataclass
class ProjectManifest:
    """The project's own declared dependencies."""
    path: str
    dependencies: Dict[str, str] = field(default_factory=dict)
    dev_dependencies: Dict[str, str] = field(default_factory=dict)


@dataclass
class ArtifactPlan:
    """Resolved dependencies and manifest for one artifact."""
    output_path: str
    dependencies: List[str]
    manifest: Dict[str, Dict[str, str]]


@dataclass
class PackResult:
    """Outcome of a packing run."""
    composite: List[str] = field(default_factory=list)
    artifacts: List[ArtifactPlan] = field(default_factory=list)
    skipped: bool = False

    def to_dict(self) -> Dict[str, object]:
        """JSON-serializable view of the plan."""
        return {
            "composite": list(self.composite),
            "artifacts": {plan.output_path: plan.manifest for plan in self.artifacts},
        }
