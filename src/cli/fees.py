"""CLI entry point for annual fee maintenance.

Usage:
    python -m src.cli.fees generate --year 2025 --amount 300 --description "Annual HOA Fee"
    python -m src.cli.fees bulk-update --year 2025 --amount 325
    python -m src.cli.fees repair

Exit Codes:
    0 - Success
    1 - Failure: invalid arguments or the operation reported failure

Logging:
    LOG_LEVEL controls verbosity; output goes to stdout only
"""

import argparse
import asyncio
import logging
import sys
from decimal import Decimal, InvalidOperation

from dotenv import load_dotenv
from sqlalchemy.exc import SQLAlchemyError

from src.services.logging import setup_logging

logger = logging.getLogger(__name__)


def _amount(value: str) -> Decimal:
    try:
        return Decimal(value)
    except InvalidOperation as e:
        raise argparse.ArgumentTypeError(f"invalid amount: {value!r}") from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="python -m src.cli.fees", description="Annual fee maintenance")
    sub = parser.add_subparsers(dest="command", required=True)

    generate = sub.add_parser("generate", help="Create annual fees for every homeowner household")
    generate.add_argument("--year", type=int, required=True)
    generate.add_argument("--amount", type=_amount, default=None, help="Default: DEFAULT_ANNUAL_FEE_AMOUNT")
    generate.add_argument("--description", default="Annual HOA Fee")

    bulk = sub.add_parser("bulk-update", help="Change the amount of unpaid annual fees")
    bulk.add_argument("--year", type=int, required=True)
    bulk.add_argument("--amount", type=_amount, required=True)

    sub.add_parser("repair", help="Re-link fees whose primary member is missing")
    return parser


async def run(args: argparse.Namespace, session_factory) -> dict:
    """Execute one subcommand against a fresh session."""
    from src.config.settings import get_settings
    from src.services.fee_service import FeeService
    from src.services.repair_service import RepairService

    async with session_factory() as session:
        if args.command == "generate":
            amount = args.amount if args.amount is not None else get_settings().default_annual_fee_amount
            return await FeeService(session).generate_annual_fees(args.year, amount, args.description)
        if args.command == "bulk-update":
            return await FeeService(session).bulk_update_annual_fee_amount(args.year, args.amount)
        return await RepairService(session).repair_obligation_links()


async def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for the fee maintenance CLI.

    Returns:
        Exit code: 0 for success, 1 for failure
    """
    load_dotenv()
    from src.config.settings import get_settings

    setup_logging(get_settings().log_level)
    args = build_parser().parse_args(argv)

    try:
        from src.services import AsyncSessionLocal

        result = await run(args, AsyncSessionLocal)
    except KeyboardInterrupt:
        logger.warning("%s interrupted by user", args.command)
        return 1
    except SQLAlchemyError as e:
        logger.error("%s failed: %s", args.command, e, exc_info=True)
        return 1

    logger.info(result["message"])
    return 0 if result["success"] else 1


if __name__ == "__main__":
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
