"""Package manager clients.

- npm.py: dependency graph query, install and prune through the npm CLI
"""

from .npm import NpmClient

__all__ = ["NpmClient"]
