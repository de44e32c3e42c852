"""Argument parsing functionality for the npm context MCP server."""

import argparse
from constants import Constants


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="npm-context-mcp",
        description=(
            "npm context MCP server - README, versions, dependencies, downloads, "
            "size and quality of npm packages for AI agents"
        ),
        add_help=True,
    )

    parser.add_argument("--transport",
                        dest="TRANSPORT",
                        help=f"Transport(s) to expose (default: ${Constants.ENV_TRANSPORT} or stdio)",
                        action="store",
                        type=str.lower,
                        choices=Constants.SUPPORTED_TRANSPORTS)
    parser.add_argument("--host",
                        dest="HOST",
                        help=f"HTTP bind host (default: ${Constants.ENV_HOST} or {Constants.DEFAULT_HOST})",
                        action="store",
                        type=str)
    parser.add_argument("--port",
                        dest="PORT",
                        help=f"HTTP listener port (default: ${Constants.ENV_PORT} or {Constants.DEFAULT_PORT})",
                        action="store",
                        type=str)
    parser.add_argument("--request-timeout",
                        dest="REQUEST_TIMEOUT",
                        help=f"Timeout in seconds for each upstream request (default: {Constants.REQUEST_TIMEOUT})",
                        action="store",
                        type=float)
    parser.add_argument("--registry-url",
                        dest="REGISTRY_URL",
                        help=f"npm registry base URL (default: {Constants.REGISTRY_URL_NPM})",
                        action="store",
                        type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=Constants.LOG_LEVELS)
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file (default: stderr)",
                        action="store",
                        type=str)
    parser.add_argument("-v", "--version",
                        dest="SHOW_VERSION",
                        help="Print the version and exit",
                        action="store_true")

    return parser.parse_args(argv)
