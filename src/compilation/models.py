"""Data models for the bundler's compilation report."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(eq=False)
class ModuleDescriptor:
    """A node in one compilation's module graph.

    ``issuer`` links to the module that imported this one, forming a chain
    back to an entry point.
    """
    identifier: str
    raw_request: Optional[str] = None
    issuer: Optional["ModuleDescriptor"] = None


@dataclass
class Chunk:
    """An emitted chunk and the modules it contains."""
    name: Optional[str]
    modules: List[ModuleDescriptor] = field(default_factory=list)


@dataclass
class CompileResult:
    """One compiled artifact: its output directory and module graph."""
    output_path: str
    chunks: List[Chunk] = field(default_factory=list)


@dataclass
class CompilationReport:
    """Ordered per-artifact compile results of one build invocation."""
    results: List[CompileResult] = field(default_factory=list)
