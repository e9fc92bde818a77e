"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    PACKAGE_MANAGER_ERROR = 2
    ARTIFACT_ERROR = 3


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    PACKAGE_JSON_FILE = "package.json"
    NODE_MODULES_DIR = "node_modules"
    DEFAULT_PACKAGE_PATH = "./package.json"
    DEFAULT_OUTPUT_PATH = ".webpack"
    STAGING_DIR_NAME = "dependencies"
    CONFIG_SECTION = "include_modules"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    ENV_LOG_LEVEL = "EXTERNPACK_LOG_LEVEL"

    # Captured subprocess output limit (bytes) and optional timeout (seconds)
    DEFAULT_MAX_BUFFER = 200 * 1024
    DEFAULT_TIMEOUT = None
    DEFAULT_WORKERS = 1

    NPM_COMMAND = "npm"
    NPM_LS_ARGS = ["ls", "--prod", "--json", "--depth=1"]
    NPM_INSTALL_ARGS = ["install", "--save"]
    NPM_PRUNE_ARGS = ["prune"]

    # Node.js core modules; never shipped in node_modules
    NODE_BUILTIN_MODULES = frozenset([
        "assert", "async_hooks", "buffer", "child_process", "cluster",
        "console", "constants", "crypto", "dgram", "diagnostics_channel",
        "dns", "domain", "events", "fs", "http", "http2", "https",
        "inspector", "module", "net", "os", "path", "perf_hooks", "process",
        "punycode", "querystring", "readline", "repl", "stream",
        "string_decoder", "sys", "timers", "tls", "trace_events", "tty",
        "url", "util", "v8", "vm", "wasi", "worker_threads", "zlib",
    ])
    NODE_BUILTIN_PREFIX = "node:"
