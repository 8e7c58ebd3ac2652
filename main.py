"""
Main entry point for NYC property records.
Supports modes:
  --transactions: Print the normalized ACRIS transaction history for --bbl
  --tax: Print the DOF tax history for --bbl
  --report: Print the plain-text property report for --bbl
  --web: Start web server
"""
import argparse
import json
import os
import sys

from loguru import logger

from src.models.acris import TransactionsResult
from src.models.valuation import TaxHistoryResult
from src.services.property_report import build_property_report, format_currency, format_percent
from src.services.tax_history_service import TaxHistoryService
from src.services.transaction_service import TransactionService
from src.utils.bbl import parse_bbl
from src.utils.logging_config import SHORT_CONSOLE_FORMAT, configure_logger
from src.utils.time import format_mmddyyyy


def configure_cli_logging() -> None:
    """Short console lines plus a daily file; stdout is reserved for command output."""
    configure_logger(
        "nyc_property_{time:YYYY-MM-DD}.log",
        console_format=SHORT_CONSOLE_FORMAT,
        rotation="00:00",  # Rotate at midnight daily
        retention="30 days",
    )


def _print_json(result: TransactionsResult | TaxHistoryResult) -> None:
    print(json.dumps(result.model_dump(mode="json"), indent=2))


def handle_transactions(bbl: str, as_json: bool, dsn: str | None) -> int:
    result = TransactionService.from_pg(dsn).get_transactions(bbl)
    if as_json:
        _print_json(result)
        return 0 if result.ok else 1
    if result.error:
        logger.error(result.error)
        return 1
    if not result.data:
        print(f"No transactions with a recorded amount for BBL {bbl}")
        return 0

    for txn in result.data:
        print(
            f"{format_mmddyyyy(txn.document_date):<10}  {txn.document_type or '':<6}  "
            f"{format_currency(txn.document_amount):>14}  {txn.document_id}"
        )
        print(f"    {txn.party1_type}: {', '.join(txn.from_party)}")
        print(f"    {txn.party2_type}: {', '.join(txn.to_party)}")
    return 0


def handle_tax(bbl: str, as_json: bool, dsn: str | None, strict_year_gaps: bool) -> int:
    result = TaxHistoryService.from_pg(dsn, strict_year_gaps=strict_year_gaps).get_tax_history(bbl)
    if as_json:
        _print_json(result)
        return 0 if result.ok else 1
    if result.error:
        logger.error(result.error)
        return 1

    print(f"{'Year':<8}  {'Taxable':>14}  {'Rate':>8}  {'Tax':>12}  {'YoY':>8}")
    for row in result.data:
        rate = f"{row.tax_rate:.3f}%" if row.tax_rate is not None else "N/A"
        print(
            f"{row.year:<8}  {format_currency(row.taxable):>14}  {rate:>8}  "
            f"{format_currency(row.property_tax):>12}  {format_percent(row.yoy_change):>8}"
        )
    return 0


def handle_report(bbl: str, dsn: str | None) -> int:
    key = parse_bbl(bbl)
    transactions = TransactionService.from_pg(dsn).get_transactions(key)
    tax_history = TaxHistoryService.from_pg(dsn).get_tax_history(key)
    for result in (transactions, tax_history):
        if result.error:
            logger.warning(result.error)
    print(build_property_report(key, transactions.data, tax_history.data), end="")
    return 0


def handle_web(port: int):
    """Start the FastAPI web server (app/web)."""
    import uvicorn

    logger.info(f"Starting FastAPI Web Server (app/web) on port {port}...")
    logger.info(f"Local Access: http://localhost:{port}")
    uvicorn.run(
        "app.web.main:app",
        host="0.0.0.0",
        port=port,
        reload=False,
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="NYC property records (ACRIS + DOF)")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--transactions", action="store_true", help="Print transaction history for --bbl")
    group.add_argument("--tax", action="store_true", help="Print tax history for --bbl")
    group.add_argument("--report", action="store_true", help="Print the plain-text property report for --bbl")
    group.add_argument("--web", action="store_true", help="Start web server")
    parser.add_argument("--bbl", type=str, default=None,
                        help="Borough-block-lot, e.g. 1-13-1 or 1000130001")
    parser.add_argument("--json", action="store_true", help="Emit JSON instead of a table")
    parser.add_argument("--dsn", type=str, default=None,
                        help="PostgreSQL DSN (defaults to NYC_PG_DSN env var)")
    parser.add_argument("--strict-year-gaps", action="store_true",
                        help="Leave year-over-year change empty across missing fiscal years")
    parser.add_argument("--port", type=int, default=int(os.getenv("WEB_PORT", "8080")),
                        help="Port for web server (default 8080 or WEB_PORT env var)")

    args = parser.parse_args(argv)
    if not args.web and not args.bbl:
        parser.error("--bbl is required for --transactions, --tax and --report")

    configure_cli_logging()

    if args.transactions:
        return handle_transactions(args.bbl, args.json, args.dsn)
    if args.tax:
        return handle_tax(args.bbl, args.json, args.dsn, args.strict_year_gaps)
    if args.report:
        try:
            return handle_report(args.bbl, args.dsn)
        except ValueError as e:
            logger.error(str(e))
            return 1
    handle_web(args.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
