"""Blocking subprocess helper with bounded output capture.

Output is spooled to temporary files rather than pipes so that a misbehaving
command cannot grow memory without limit; stdout larger than ``max_buffer``
bytes is rejected before it is read back.
"""
from __future__ import annotations

import logging
import subprocess
import tempfile
from typing import List, Optional

from common.logging_utils import extra_context, is_debug_enabled, Timer

logger = logging.getLogger(__name__)

# stderr is only kept for diagnostics
_STDERR_TAIL_BYTES = 8 * 1024


class CommandError(Exception):
    """Raised when an external command exits with a non-zero status."""

    def __init__(self, cmd: List[str], returncode: int, stderr: str = "", message: Optional[str] = None):
        self.cmd = list(cmd)
        self.returncode = returncode
        self.stderr = stderr
        if message is None:
            message = f"Command '{' '.join(self.cmd)}' failed with exit code {returncode}"
            if stderr.strip():
                message = f"{message}: {stderr.strip()}"
        super().__init__(message)


class OutputLimitExceeded(CommandError):
    """Raised when a command writes more than the allowed amount to stdout."""

    def __init__(self, cmd: List[str], size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(
            cmd,
            0,
            message=(
                f"Command '{' '.join(cmd)}' produced {size} bytes of output, "
                f"exceeding the limit of {limit} bytes"
            ),
        )


def _read_tail(handle, limit: int) -> str:
    handle.seek(0, 2)
    size = handle.tell()
    handle.seek(max(0, size - limit))
    return handle.read().decode("utf-8", errors="replace")


def run_command(
    cmd: List[str],
    cwd: str,
    max_buffer: int,
    timeout: Optional[float] = None,
) -> str:
    """Run a command to completion and return its decoded stdout.

    Args:
        cmd: Command tokens, e.g. ["npm", "prune"].
        cwd: Working directory for the command.
        max_buffer: Maximum number of stdout bytes accepted.
        timeout: Optional timeout in seconds.

    Returns:
        The command's stdout decoded as UTF-8.

    Raises:
        CommandError: If the command exits non-zero.
        OutputLimitExceeded: If stdout exceeds max_buffer bytes.
        subprocess.TimeoutExpired: If the timeout elapses.
    """
    with tempfile.TemporaryFile() as out, tempfile.TemporaryFile() as err, Timer() as t:
        if is_debug_enabled(logger):
            logger.debug(
                "Running command",
                extra=extra_context(event="process_start", component="process", target=" ".join(cmd), cwd=cwd),
            )
        completed = subprocess.run(  # noqa: S603
            cmd,
            cwd=cwd,
            stdout=out,
            stderr=err,
            timeout=timeout,
            check=False,
        )
        if completed.returncode != 0:
            raise CommandError(cmd, completed.returncode, _read_tail(err, _STDERR_TAIL_BYTES))

        out.seek(0, 2)
        size = out.tell()
        if size > max_buffer:
            raise OutputLimitExceeded(cmd, size, max_buffer)
        out.seek(0)
        stdout = out.read().decode("utf-8")

        if is_debug_enabled(logger):
            logger.debug(
                "Command finished",
                extra=extra_context(
                    event="process_exit",
                    component="process",
                    target=" ".join(cmd),
                    outcome="success",
                    duration_ms=t.duration_ms(),
                ),
            )
        return stdout
