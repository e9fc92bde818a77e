"""npm command-line client used by the packing phases."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from common.process import run_command
from constants import Constants

logger = logging.getLogger(__name__)


class NpmClient:
    """Thin wrapper around the npm CLI.

    Every call blocks until npm exits; failures propagate as
    ``common.process.CommandError`` with npm's stderr attached.
    """

    def __init__(
        self,
        npm_command: str = Constants.NPM_COMMAND,
        max_buffer: int = Constants.DEFAULT_MAX_BUFFER,
        timeout: Optional[float] = Constants.DEFAULT_TIMEOUT,
    ):
        self.npm_command = npm_command
        self.max_buffer = max_buffer
        self.timeout = timeout

    def _run(self, args: List[str], cwd: str) -> str:
        return run_command([self.npm_command] + list(args), cwd, self.max_buffer, self.timeout)

    def list_dependency_graph(self, cwd: str) -> Dict[str, Any]:
        """Return the production dependency tree of cwd, one level deep.

        Raises:
            CommandError: If npm exits non-zero or the output exceeds max_buffer.
            json.JSONDecodeError: If npm does not print valid JSON.
        """
        return json.loads(self._run(Constants.NPM_LS_ARGS, cwd))

    def install(self, packages: List[str], cwd: str) -> None:
        """Install packages into cwd and save them to its package.json."""
        logger.debug("npm install in %s: %s", cwd, packages)
        self._run(Constants.NPM_INSTALL_ARGS + list(packages), cwd)

    def prune(self, cwd: str) -> None:
        """Remove packages in cwd/node_modules not reachable from cwd/package.json."""
        self._run(Constants.NPM_PRUNE_ARGS, cwd)
