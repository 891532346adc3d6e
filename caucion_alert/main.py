"""
Main entry point for the Caución Rate Alert system.
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from .orchestrator import ApplicationOrchestrator
from .utils.logging import get_logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="caucion-alert",
        description="Watch caución rates and alert over WhatsApp.",
    )
    parser.add_argument(
        "config_path",
        nargs="?",
        default=None,
        help="Path to a YAML or JSON configuration file",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single market-hours-gated scan and exit",
    )
    return parser


async def async_main(config_path: Optional[str] = None, once: bool = False) -> bool:
    """Async main application entry point."""
    logger = get_logger("main")
    logger.info(
        "Starting Caución Rate Alert",
        extra={"config_path": config_path, "once": once},
    )

    orchestrator = ApplicationOrchestrator(config_path)
    if once:
        return await orchestrator.run_once()
    return await orchestrator.run()


def main(argv: Optional[List[str]] = None):
    """Main application entry point."""
    args = build_parser().parse_args(argv)

    try:
        ok = asyncio.run(async_main(args.config_path, once=args.once))
    except KeyboardInterrupt:
        print("\nShutdown requested by user")
        return
    except Exception as e:
        print(f"Fatal error: {e}")
        sys.exit(1)

    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
