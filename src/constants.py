"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    CONFIG_ERROR = 1
    SERVER_ERROR = 2


class TransportModes(Enum):
    """Transports the MCP server can expose.

    Args:
        Enum (string): Transport selector values.
    """

    STDIO = "stdio"
    HTTP = "http"
    BOTH = "both"


class DownloadPeriods(Enum):
    """Fixed periods accepted by the download counts service."""

    LAST_DAY = "last-day"
    LAST_WEEK = "last-week"
    LAST_MONTH = "last-month"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    SERVER_NAME = "npm-context-mcp"

    REGISTRY_URL_NPM = "https://registry.npmjs.org"
    # relative to REGISTRY_URL_NPM
    REGISTRY_SEARCH_PATH = "/-/v1/search"
    DOWNLOADS_URL_NPM = "https://api.npmjs.org/downloads/point"
    RAW_CONTENT_BASE = "https://raw.githubusercontent.com"
    BUNDLE_SIZE_URL = "https://bundlephobia.com/api/size"
    QUALITY_URL_NPMS = "https://api.npms.io/v2/package"

    SUPPORTED_TRANSPORTS = [m.value for m in TransportModes]
    DOWNLOAD_PERIODS = [p.value for p in DownloadPeriods]
    DEFAULT_DOWNLOAD_PERIOD = DownloadPeriods.LAST_MONTH.value
    README_BRANCHES = ("main", "master")
    README_FILE = "README.md"
    SEARCH_DEFAULT_LIMIT = 20
    SEARCH_MAX_LIMIT = 250
    RECENT_VERSIONS_SHOWN = 10

    LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"
    LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    HTTP_RETRY_MAX = 3
    HTTP_RETRY_BASE_DELAY_SEC = 0.3

    DEFAULT_TRANSPORT = TransportModes.STDIO.value
    DEFAULT_HOST = "127.0.0.1"
    DEFAULT_PORT = 3000
    ENV_TRANSPORT = "NPM_CONTEXT_TRANSPORT"
    ENV_PORT = "NPM_CONTEXT_PORT"
    ENV_HOST = "NPM_CONTEXT_HOST"
    ENV_LOG_LEVEL = "NPM_CONTEXT_LOG_LEVEL"
