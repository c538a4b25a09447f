"""Command line entry point for the APC InRow exporter."""

import argparse
import logging
import sys
from typing import List, Optional

import uvicorn
from dotenv import load_dotenv
from pydantic import ValidationError

from inrow_exporter import EXPORTER_NAME, __version__
from inrow_exporter.config import Settings
from inrow_exporter.main import create_app
from inrow_exporter.utils.log import configure_logging

logger = logging.getLogger(__name__)

# flag dest -> Settings field
FLAG_SETTINGS = {
    "listen_address": "LISTEN_ADDRESS",
    "path": "METRICS_PATH",
    "targets": "SNMP_TARGETS",
    "community": "SNMP_COMMUNITY",
    "log_level": "LOG_LEVEL",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=EXPORTER_NAME,
        description="Prometheus exporter for APC InRow cooling units",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Every flag can also be set through the environment or a .env file
(LISTEN_ADDRESS, METRICS_PATH, SNMP_TARGETS, SNMP_COMMUNITY, LOG_LEVEL,
SNMP_PORT, SNMP_TIMEOUT, SNMP_RETRIES, SNMP_MAX_WORKERS).

Example:
  apc-inrow-exporter --targets 10.0.0.10,10.0.0.11 --community public
        """
    )
    parser.add_argument("--version", action="store_true", help="Print version information.")
    parser.add_argument("--listen-address", help="Address on which to expose metrics. (default: :9335)")
    parser.add_argument("--path", help="Path under which to expose metrics. (default: /metrics)")
    parser.add_argument("--targets", help="Comma-separated targets to scrape.")
    parser.add_argument("--community", help="SNMP community.")
    parser.add_argument("--log-level", help="Logging level. (default: INFO)")
    return parser


def version_text() -> str:
    return f"{EXPORTER_NAME}\nVersion: {__version__}"


def load_settings(args: argparse.Namespace) -> Settings:
    """Environment and .env settings, overridden by any flag given on the command line."""
    overrides = {
        field: getattr(args, dest)
        for dest, field in FLAG_SETTINGS.items()
        if getattr(args, dest) is not None
    }
    return Settings(**overrides)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(version_text())
        return 0

    load_dotenv()
    try:
        settings = load_settings(args)
    except ValidationError as e:
        parser.error(str(e))

    configure_logging(settings.LOG_LEVEL)

    app = create_app(settings)
    logger.info(f"Listening for {settings.METRICS_PATH} on {settings.LISTEN_ADDRESS}")

    try:
        uvicorn.run(
            app,
            host=settings.bind_host,
            port=settings.bind_port,
            log_config=None,
        )
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    except Exception as e:
        logger.error(f"Failed to start server on {settings.LISTEN_ADDRESS}: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
