"""ghrelay entry point: load config, set up logging, serve webhooks.

Usage: ghrelay [--config PATH] [--check]
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from ghrelay.config import AppConfig, ConfigError, load_config
from ghrelay.logging import RelayLogging
from ghrelay.webhook.server import run_webhook_server


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        prog="ghrelay",
        description="ghrelay - turn GitHub webhooks into automation workflow dispatches",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=Path("config.yaml"),
        help="Path to YAML config file",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only load and validate config, then exit",
    )
    return parser.parse_args(argv)


def run_relay(config: AppConfig) -> None:
    """Log the effective config and run the webhook server."""
    log = logging.getLogger("ghrelay.main")
    log.info("Configuration: %s", json.dumps(config.summary(), indent=2))
    run_webhook_server(config)


def main(argv: list[str] | None = None) -> int:
    """Entry point for ghrelay."""
    args = parse_args(argv)
    config_path = args.config
    if not config_path.is_file() and config_path == Path("config.yaml"):
        if Path("config.example.yaml").is_file():
            config_path = Path("config.example.yaml")
            logging.basicConfig(level=logging.INFO)
            logging.getLogger("ghrelay.main").warning("config.yaml not found, using config.example.yaml")

    config = load_config(config_path)
    log = RelayLogging(config.logging).setup()

    try:
        config.validate_startup()
    except ConfigError as e:
        for problem in e.problems:
            log.error("Configuration invalid: %s", problem)
        return 1

    if args.check:
        print("Config OK:", config.workflow.target_label, config.github.app_id)
        return 0

    try:
        run_relay(config)
    except KeyboardInterrupt:
        return 0
    except Exception as e:
        log.exception("Fatal error: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
