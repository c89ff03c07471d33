"""CLI entrypoint: Wazuh active response that matches added files against MISP."""

import argparse
import asyncio
import json
import logging
import sys
from typing import Optional

from misp_match.client import MISPSearchClient
from misp_match.config import MatchConfig, load_config
from misp_match.errors import MatchError, NetworkError, ResponseParseError
from misp_match.extractor import extract_file_name, read_full_log
from misp_match.logging_setup import setup_logging
from misp_match.models import OutboundAlert, SearchResponse
from misp_match.projector import build_alert

logger = logging.getLogger("misp_match.cli")


async def run_pipeline(line: str, config: MatchConfig) -> Optional[OutboundAlert]:
    """
    Run one alert through extraction, MISP search and projection.

    Args:
        line: Raw Wazuh alert JSON read from stdin
        config: Pipeline configuration

    Returns:
        The outbound alert, or None when there is nothing to report
        (no file name in the log, or no matching MISP event)

    Raises:
        MatchError: On any fatal input, network, parse or projection error
    """
    logger.debug(f"jsonInput: {line}")
    full_log = read_full_log(line)
    logger.info("successfully parsed wazuh input")

    filename, found = extract_file_name(full_log)
    if not found:
        logger.info("extract filename failed")
        return None
    logger.info(f"filename found: {filename}")

    client = MISPSearchClient(config)
    try:
        body = await client.search(filename)
    except NetworkError as e:
        logger.error(f"misp request failed: {e}")
        raise
    finally:
        await client.close()

    try:
        result = SearchResponse.from_json(body)
    except ResponseParseError as e:
        logger.error(f"could not parse misp response: {e}")
        raise

    if result.is_empty():
        logger.info("no matching attribute found for the given filename")
        return None

    return await build_alert(result)


def format_alert(alert: OutboundAlert) -> str:
    """Serialize an alert as a single compact JSON line."""
    return json.dumps(alert, sort_keys=True, separators=(",", ":"))


def main() -> None:
    """Main CLI entrypoint."""
    parser = argparse.ArgumentParser(
        description="Match a Wazuh file-added alert against MISP"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to TOML config file (default: $MISP_MATCH_CONFIG or ~/.misp_match/conf.toml)",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Override the diagnostics log file",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    args = parser.parse_args()

    try:
        config = load_config(args.config)
    except MatchError as e:
        print(f"misp-match: {e}", file=sys.stderr)
        sys.exit(1)

    if args.log_file:
        config.log_file = args.log_file
    if args.debug:
        config.debug = True

    setup_logging(config.log_file, debug=config.debug)
    logger.info("match-indicator started")

    line = sys.stdin.readline()

    try:
        alert = asyncio.run(run_pipeline(line, config))
    except MatchError as e:
        logger.error(f"{type(e).__name__}: {e}")
        sys.exit(1)

    if alert is not None:
        print(format_alert(alert))

    sys.exit(0)


if __name__ == "__main__":
    main()
