"""
Command-line entry point for oncalldash.

Sets up file logging (the terminal belongs to the TUI), loads the optional
configuration file and runs the Textual app.

Exit codes:
  0 - clean quit
  1 - the app failed to start or crashed
  2 - invalid command line or configuration file
"""

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__, get_log_path
from .config import ConfigManager
from .errors import ConfigError

logger = logging.getLogger("oncalldash")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="oncalldash", description="On-call terminal dashboard")
    parser.add_argument("--config", help="Optional YAML config file with overrides")
    parser.add_argument("--log-level", help="Log level (DEBUG, INFO, WARNING, ...)")
    parser.add_argument("--log-file", help="Log file path (default: XDG data dir)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def setup_logging(level: str, file_path: Optional[str]) -> None:
    logging.basicConfig(
        filename=file_path or get_log_path(),
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(levelname)s - %(message)s',
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config_manager = ConfigManager(args.config)
    except ConfigError as e:
        print(f"oncalldash: {e}", file=sys.stderr)
        return 2

    setup_logging(
        args.log_level or config_manager.get_log_level(),
        args.log_file or config_manager.get_custom_log_path(),
    )
    logger.info(f"oncalldash {__version__} starting")

    from .textual_app import run

    try:
        run(config_manager.get_config())
    except Exception as e:
        logger.error(f"oncalldash failed: {e}", exc_info=True)
        print(f"oncalldash: {e}", file=sys.stderr)
        return 1
    logger.info("oncalldash exited")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
