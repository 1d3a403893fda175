#!/usr/bin/env python3
"""
klayr-reg command line entry point
"""

import asyncio
import json
import os
import sys

from dotenv import dotenv_values

from klayr_reg.cli.parser import parse_args
from klayr_reg.cli.prompts import collect_missing
from klayr_reg.config.settings import (
    config_file_source,
    environment_source,
    first_value,
    load_json,
    resolve_settings,
)
from klayr_reg.errors.exceptions import ConfigurationError
from klayr_reg.log_utils import setup_logging
from klayr_reg.registration import run_registration

BANNER = "Klayr-REG"

_FLOW_MESSAGES = {
    "register-sidechain": "Sidechain registration completed!",
    "register-mainchain": "Mainchain registration completed!",
}


def build_settings(args, environ, dotenv_path=".env"):
    """Resolve settings from command line, config file, environment, .env file and, last, the operator."""
    cli_source = {k: v for k, v in vars(args).items() if k not in ("config", "no_prompt")}
    env_source = environment_source(environ)
    dotenv_source = environment_source(dotenv_values(dotenv_path))
    config_path = args.config or first_value([env_source, dotenv_source], "config")
    sources = [cli_source, config_file_source(load_json(config_path)), env_source, dotenv_source]

    settings = resolve_settings(sources)
    if args.no_prompt:
        return settings
    return resolve_settings(sources + [collect_missing(settings)])


def main(argv=None, environ=None, dotenv_path=".env") -> int:
    args = parse_args(argv)
    environ = os.environ if environ is None else environ

    print(f"\n{BANNER}\n")
    try:
        settings = build_settings(args, environ, dotenv_path)
    except ConfigurationError as e:
        print(f"Configuration error: {e.message}", file=sys.stderr)
        return 1

    logger = setup_logging(
        level="DEBUG" if settings.verbose else "INFO",
        log_file=settings.log_file,
        enable_structured=settings.log_json,
    )
    logger.debug("Options used for run command:")
    logger.debug(json.dumps(settings.masked()))

    try:
        report = asyncio.run(run_registration(settings))
    except KeyboardInterrupt:
        logger.info("Received interrupt signal, aborting")
        return 1
    except Exception as e:
        logger.critical(f"Fatal error: {e}", exc_info=True)
        return 1

    for result in report.results:
        if result.succeeded:
            print(f"{_FLOW_MESSAGES[result.direction]} Tx ID: {result.transaction_id}")
            for warning in result.warnings:
                print(f"Warning: {warning.reason}")

    if report.exit_code == 0:
        print("\nKlayr-REG Executed Successfully!")
    return report.exit_code


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
