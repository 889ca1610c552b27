#!/usr/bin/env python3
"""Zentro Oracle Feed.

Polls an on-chain oracle account, decodes its price record and reports each
quote, flagging stale ones.

Configure via CLI flags or environment variables (CLI takes precedence).
"""

import argparse
import asyncio
import logging
import os
import sys

from .src.errors import OracleError
from .src.formatting import format_price
from .src.OracleFeed import DEFAULT_UPDATE_INTERVAL_MS, OracleFeed
from .src.Quote import Quote
from .src.readers import AccountReader, RpcAccountReader
from .src.staleness import DEFAULT_MAX_AGE_MS

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

DEFAULT_RPC_URL = "http://localhost:8899"


def make_reporter(max_age_ms: int):
    """Build a subscriber callback that logs each quote.

    :param max_age_ms: Quotes older than this are reported as stale.
    :returns: Callback suitable for OracleFeed.subscribe().
    """

    def report(quote: Quote) -> None:
        line = (
            f"price={format_price(quote.price)} "
            f"confidence={quote.confidence:.2%} status={quote.status.value}"
        )
        if quote.is_stale(max_age_ms):
            logger.warning(f"Stale quote: {line} (timestamp={quote.timestamp})")
        else:
            logger.info(f"Quote: {line}")

    return report


async def run_once(reader: AccountReader, account: str, max_age_ms: int) -> None:
    """Read the account a single time and report the quote."""
    feed = OracleFeed(reader, account)
    try:
        quote = await feed.get_current_price()
        make_reporter(max_age_ms)(quote)
    finally:
        await reader.close_shared_client()


async def run_feed(
    reader: AccountReader, account: str, interval_ms: int, max_age_ms: int
) -> None:
    """Initialize the feed and poll until cancelled."""
    feed = OracleFeed(reader, account, update_interval_ms=interval_ms)
    feed.subscribe("cli", make_reporter(max_age_ms))
    try:
        # First tick runs inside the polling task
        await feed.initialize(immediate=True)
        await asyncio.Event().wait()
    finally:
        await feed.close()
        await reader.close_shared_client()


def main() -> None:
    """Main entry point for the Zentro Oracle CLI."""
    parser = argparse.ArgumentParser(
        description="Zentro Oracle: on-chain price feed monitor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Poll a devnet oracle account every 10 seconds
  python -m zentro_oracle.main --account <ADDRESS> \\
      --rpc-url https://api.devnet.solana.com --interval 10000

  # Print the current quote and exit
  python -m zentro_oracle.main --account <ADDRESS> --once

Environment variables (CLI args take precedence):
  ORACLE_ACCOUNT, RPC_URL, UPDATE_INTERVAL_MS, MAX_AGE_MS, COMMITMENT
""",
    )

    parser.add_argument(
        "--account",
        type=str,
        help="Oracle account address",
        default=os.environ.get("ORACLE_ACCOUNT"),
    )

    parser.add_argument(
        "--rpc-url",
        dest="rpc_url",
        type=str,
        help=f"Ledger JSON-RPC endpoint (default: {DEFAULT_RPC_URL})",
        default=os.environ.get("RPC_URL") or DEFAULT_RPC_URL,
    )

    parser.add_argument(
        "--interval",
        type=int,
        help=f"Polling interval in ms (default: {DEFAULT_UPDATE_INTERVAL_MS})",
        default=int(os.environ.get("UPDATE_INTERVAL_MS") or DEFAULT_UPDATE_INTERVAL_MS),
    )

    parser.add_argument(
        "--max-age",
        dest="max_age",
        type=int,
        help=f"Quote age in ms after which it is reported stale (default: {DEFAULT_MAX_AGE_MS})",
        default=int(os.environ.get("MAX_AGE_MS") or DEFAULT_MAX_AGE_MS),
    )

    parser.add_argument(
        "--commitment",
        type=str,
        help="Commitment level for account reads (default: confirmed)",
        default=os.environ.get("COMMITMENT") or "confirmed",
    )

    parser.add_argument(
        "--once",
        action="store_true",
        help="Print the current quote and exit",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if not args.account:
        parser.error("An oracle account address is required (--account or ORACLE_ACCOUNT)")

    if args.interval < 1:
        parser.error("--interval must be at least 1 ms")

    if args.max_age < 0:
        parser.error("--max-age must not be negative")

    reader = RpcAccountReader(args.rpc_url, commitment=args.commitment)

    logger.info("=" * 60)
    logger.info("Zentro Oracle Feed")
    logger.info("=" * 60)
    logger.info(f"Account:           {args.account}")
    logger.info(f"RPC URL:           {args.rpc_url}")
    logger.info(f"Commitment:        {args.commitment}")
    logger.info(f"Interval:          {args.interval}ms")
    logger.info(f"Max Age:           {args.max_age}ms")
    logger.info("=" * 60)

    try:
        if args.once:
            asyncio.run(run_once(reader, args.account, args.max_age))
        else:
            asyncio.run(run_feed(reader, args.account, args.interval, args.max_age))
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    except OracleError as e:
        logger.error(f"Oracle error: {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
