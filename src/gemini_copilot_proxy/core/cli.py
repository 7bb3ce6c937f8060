"""
Command-line entry point for the gateway.
"""

from __future__ import annotations

import argparse
import logging

import uvicorn

from gemini_copilot_proxy.core.app.application_factory import build_app
from gemini_copilot_proxy.core.common.logging_utils import (
    configure_logging_with_environment_tagging,
    install_api_key_redaction_filter,
    redact,
)
from gemini_copilot_proxy.core.config.app_config import AppConfig, load_config


def build_cli_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Serve the Gemini API on top of GitHub Copilot"
    )
    parser.add_argument(
        "--config",
        dest="config_file",
        metavar="PATH",
        default=None,
        help="Path to a YAML configuration file",
    )
    return parser


def _configure_logging(cfg: AppConfig) -> None:
    configure_logging_with_environment_tagging(
        level=getattr(logging, cfg.logging.level.value),
        log_file=cfg.logging.log_file,
    )
    secrets = [cfg.copilot.token] if cfg.copilot.token else []
    install_api_key_redaction_filter(secrets)


def main(argv: list[str] | None = None) -> None:
    """Load configuration, configure logging and run the server."""
    args = build_cli_parser().parse_args(argv)
    cfg = load_config(args.config_file)

    _configure_logging(cfg)

    if not cfg.copilot.token:
        logging.warning(
            "COPILOT_TOKEN is not set; generateContent calls will fail with 401"
        )
    else:
        logging.info("Using Copilot token %s", redact(cfg.copilot.token))

    app = build_app(cfg)

    logging.info(f"Starting uvicorn on {cfg.host}:{cfg.port}")
    try:
        uvicorn.run(app, host=cfg.host, port=cfg.port)
    except Exception as e:
        logging.exception("Uvicorn failed to start: %s", e)
        raise


if __name__ == "__main__":
    main()
