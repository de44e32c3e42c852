"""npm context MCP server entry point.

    Returns:
        int: Exit code
"""
import logging
import sys

from args import parse_args
from cli_config import ConfigError, apply_runtime_overrides, load_server_config
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from constants import Constants, ExitCodes

__version__ = "1.0.0"

logger = logging.getLogger(__name__)


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    if args.SHOW_VERSION:
        print(f"{Constants.SERVER_NAME} {__version__}")
        return ExitCodes.SUCCESS.value

    configure_logging(args.LOG_LEVEL, args.LOG_FILE)

    try:
        config = load_server_config(args)
        apply_runtime_overrides(args)
    except ConfigError as exc:
        logger.error("Invalid configuration: %s", exc)
        return ExitCodes.CONFIG_ERROR.value

    # Imported late so --help and --version work without the MCP SDK loaded.
    from cli_mcp import registry_summary, run_mcp_server  # pylint: disable=import-outside-toplevel

    if is_debug_enabled(logger):
        logger.debug(
            "Starting server",
            extra=extra_context(
                event="function_entry",
                component="cli",
                action="main",
                transport=config.transport,
                **registry_summary(),
            ),
        )

    try:
        run_mcp_server(config)
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    except OSError as exc:
        logger.error("Failed to start server: %s", exc)
        return ExitCodes.SERVER_ERROR.value
    except SystemExit as exc:
        # uvicorn exits on bind failures
        if exc.code not in (None, 0):
            logger.error("Server terminated with status %s", exc.code)
            return ExitCodes.SERVER_ERROR.value
    return ExitCodes.SUCCESS.value


if __name__ == "__main__":
    sys.exit(main())
