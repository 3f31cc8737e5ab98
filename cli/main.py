"""CLI entry point."""

import os
import sys
from typing import Optional, Sequence

from common.logging_config import DebugLog, setup_logging
from cli.commands import close_client, dispatch
from cli.constants import HELP_TEXT
from cli.parser import ParseError, parse_command


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for CLI."""
    args = list(sys.argv[1:] if argv is None else argv)

    debug = '--debug' in args
    if debug:
        args.remove('--debug')

    log_level = 'DEBUG' if debug else os.getenv('LOG_LEVEL', 'WARNING')
    logger = setup_logging('cli', log_level=log_level)

    if debug:
        logger.info("Debug logging enabled")

    try:
        cmd = parse_command(args)
    except ParseError as e:
        print(f"Error: {e}\n\n{HELP_TEXT}", file=sys.stderr)
        return 2

    try:
        result = dispatch(cmd, log=DebugLog(logger, debug_mode=debug))
    except Exception as e:
        logger.error(f"CLI error: {e}", exc_info=True)
        raise
    finally:
        close_client()

    print(result)
    return 1 if result.startswith(("Error", "Upload failed")) else 0


if __name__ == "__main__":
    sys.exit(main())
