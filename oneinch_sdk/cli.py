"""
OneInch SDK - CLI.

============================================================
RESPONSIBILITY
============================================================
Command-line access to common 1inch reads.

- argparse subcommands: quote, price, balances, search
- Decoded JSON result on stdout, logs on stderr
- Exit codes: 0 success, 1 API/transport failure, 2 configuration

============================================================
USAGE
============================================================
oneinch quote 1 0xA0b8...eB48 0xC02a...6Cc2 1000000
oneinch price 1 0xC02a...6Cc2 --currency USD
oneinch balances 1 0xd8dA...6045
oneinch search 1 usdc --limit 5

============================================================
"""

import argparse
import json
import logging
import sys
from typing import Any, List, Optional

from oneinch_sdk.client import OneInchClient
from oneinch_sdk.config import ClientConfig
from oneinch_sdk.exceptions import ConfigurationError, OneInchError


logger = logging.getLogger(__name__)


# ============================================================
# LOGGING SETUP
# ============================================================

def setup_logging(level: str = "WARNING", log_format: str = "text") -> logging.Logger:
    """
    Set up logging on stderr.

    Args:
        level: Log level
        log_format: Output format (json or text)

    Returns:
        Package logger
    """
    log_level = getattr(logging, level.upper(), logging.WARNING)

    if log_format == "json":
        formatter = logging.Formatter(
            json.dumps({
                "timestamp": "%(asctime)s",
                "level": "%(levelname)s",
                "logger": "%(name)s",
                "message": "%(message)s",
            })
        )
    else:
        formatter = logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = [handler]

    return logging.getLogger("oneinch_sdk")


# ============================================================
# CLI ARGUMENT PARSER
# ============================================================

def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="oneinch",
        description="Query the 1inch aggregation API",
    )

    parser.add_argument(
        "--api-key",
        type=str,
        default=None,
        help="API key (default: ONEINCH_API_KEY from environment or .env)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds to wait for the result (default: no limit)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    parser.add_argument(
        "--log-format",
        type=str,
        choices=["json", "text"],
        default="text",
        help="Logging format (default: text)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    quote = commands.add_parser("quote", help="Quote a swap")
    quote.add_argument("chain_id", type=int)
    quote.add_argument("src", help="Source token address")
    quote.add_argument("dst", help="Destination token address")
    quote.add_argument("amount", help="Amount in minimal units")

    price = commands.add_parser("price", help="Token prices")
    price.add_argument("chain_id", type=int)
    price.add_argument("addresses", nargs="*", help="Token addresses (default: whitelist)")
    price.add_argument("--currency", type=str, default=None, help="Fiat currency code, e.g. USD")

    balances = commands.add_parser("balances", help="Wallet token balances")
    balances.add_argument("chain_id", type=int)
    balances.add_argument("wallet", help="Wallet address")

    search = commands.add_parser("search", help="Search tokens")
    search.add_argument("chain_id", type=int)
    search.add_argument("query")
    search.add_argument("--limit", type=int, default=None)

    return parser


def run_command(client: OneInchClient, args: argparse.Namespace) -> Any:
    """Execute the selected subcommand and return its decoded result."""
    if args.command == "quote":
        call = client.swap.get_quote(args.chain_id, args.src, args.dst, args.amount)
    elif args.command == "price":
        call = client.price.get_prices(args.chain_id, args.addresses, currency=args.currency)
    elif args.command == "balances":
        call = client.balance.get_balances(args.chain_id, args.wallet)
    elif args.command == "search":
        call = client.token.search_tokens(args.chain_id, args.query, limit=args.limit)
    else:
        raise ValueError(f"Unknown command: {args.command}")
    return call.get(timeout=args.timeout)


# ============================================================
# MAIN ENTRY POINT
# ============================================================

def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        argv: Command line arguments (default: sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level, args.log_format)

    try:
        client = OneInchClient(config=ClientConfig.from_env(api_key=args.api_key))
    except ConfigurationError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 2

    try:
        result = run_command(client, args)
    except OneInchError as e:
        print(json.dumps(e.to_dict(), indent=2), file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    finally:
        client.close()

    print(json.dumps(result, indent=2))
    return 0


# ============================================================
# MODULE EXECUTION
# ============================================================

if __name__ == "__main__":
    sys.exit(main())
