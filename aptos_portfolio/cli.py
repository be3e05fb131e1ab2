"""Command-line interface for the Aptos portfolio aggregator."""
from __future__ import annotations

import argparse
import asyncio
import json
import sys

from .addresses import InvalidAddressError, validate_address
from .config import AppConfig, load_config
from .logging_setup import configure_logging
from .server import run_server
from .services import PortfolioAggregator


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="aptos-portfolio",
        description="Aptos wallet and DeFi portfolio aggregator",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    serve_parser = sub.add_parser("serve", help="Run the portfolio HTTP API")
    serve_parser.add_argument("--host", default=None, help="Bind host (overrides config)")
    serve_parser.add_argument(
        "--port", type=int, default=None, help="Bind port (overrides config)"
    )

    portfolio_parser = sub.add_parser(
        "portfolio", help="Print one wallet's portfolio as JSON"
    )
    portfolio_parser.add_argument("address", help="Aptos account address")

    return parser


async def _print_portfolio(config: AppConfig, address: str) -> None:
    aggregator = PortfolioAggregator.from_config(config)
    portfolio = await aggregator.build_portfolio(address)
    json.dump(portfolio.to_dict(), sys.stdout, indent=2)
    sys.stdout.write("\n")


def main(argv: list[str] | None = None) -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    configure_logging(args.log_level)
    config = load_config(args.config)

    if args.command == "serve":
        run_server(config, host=args.host, port=args.port)
    elif args.command == "portfolio":
        try:
            address = validate_address(args.address)
        except InvalidAddressError as e:
            parser.error(str(e))
        asyncio.run(_print_portfolio(config, address))


if __name__ == "__main__":
    main()
