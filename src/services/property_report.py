"""Plain-text property information report (transactions and tax history)."""

from __future__ import annotations

from typing import Sequence

from src.models.acris import Transaction
from src.models.valuation import TaxRow
from src.utils.bbl import BBL
from src.utils.time import format_mmddyyyy

WIDTH = 80
_DOMESTIC = {"US", "USA"}


def format_currency(value: float | None) -> str:
    if value is None:
        return "N/A"
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.0f}"


def format_percent(value: float | None, digits: int = 2) -> str:
    if value is None:
        return "N/A"
    return f"{value * 100:+.{digits}f}%"


def _section(title: str) -> list[str]:
    return [title, "-" * WIDTH]


def _transaction_lines(transactions: Sequence[Transaction]) -> list[str]:
    lines = _section("TRANSACTION HISTORY (ALL TRANSACTIONS)")
    lines.append(f"Total Transactions: {len(transactions)}")
    lines.append("")
    for n, txn in enumerate(transactions, start=1):
        lines.append(f"Transaction #{n}:")
        if txn.document_date:
            lines.append(f"  Date: {format_mmddyyyy(txn.document_date)}")
        if txn.document_id:
            lines.append(f"  Document ID: {txn.document_id}")
        if txn.document_type:
            lines.append(f"  Type: {txn.doc_type_description or txn.document_type}")
        if txn.class_code_description:
            lines.append(f"  Class: {txn.class_code_description}")
        if txn.document_amount > 0:
            lines.append(f"  Amount: {format_currency(txn.document_amount)}")
        if txn.categories:
            lines.append(f"  Category: {', '.join(txn.categories)}")
        lines.append(f"  From Party ({txn.party1_type}): {', '.join(txn.from_party)}")
        lines.append(f"  To Party ({txn.party2_type}): {', '.join(txn.to_party)}")

        if txn.party_details:
            lines.append("  Detailed Party Information:")
            for party in txn.party_details:
                lines.append(f"    - {party.type or 'Party'}: {party.name}")
                if party.address_line:
                    lines.append(f"      Address: {party.address_line}")
                if party.country and party.country.upper() not in _DOMESTIC:
                    lines.append(f"      Country: {party.country}")
        lines.append("")
    return lines


def _tax_lines(tax_rows: Sequence[TaxRow]) -> list[str]:
    lines = _section("TAX HISTORY (ALL YEARS)")
    lines.append(f"Total Tax Years: {len(tax_rows)}")
    lines.append("")
    for row in tax_rows:
        lines.append(f"Tax Year: {row.year}")
        lines.append(f"  Market Value: {format_currency(row.market_value)}")
        lines.append(f"  Assessed Value: {format_currency(row.assessed_value)}")
        lines.append(f"  Taxable Value: {format_currency(row.taxable)}")
        lines.append(f"  Tax Rate: {f'{row.tax_rate:.3f}%' if row.tax_rate is not None else 'N/A'}")
        lines.append(f"  Property Tax: {format_currency(row.property_tax)}")
        lines.append(f"  Change vs Prior Year: {format_percent(row.yoy_change)}")
        lines.append("")
    return lines


def build_property_report(
    bbl: BBL | str,
    transactions: Sequence[Transaction] | None = None,
    tax_rows: Sequence[TaxRow] | None = None,
) -> str:
    """Render transactions and tax rows as an 80-column text report. Empty sections are omitted."""
    lines = ["=" * WIDTH, "PROPERTY INFORMATION REPORT", "=" * WIDTH, ""]
    lines += _section("BASIC INFORMATION")
    lines.append(f"BBL (Borough-Block-Lot): {bbl}")
    if isinstance(bbl, BBL):
        lines.append(f"Borough: {bbl.borough_name}")
    lines.append("")

    if tax_rows:
        lines += _tax_lines(tax_rows)
    if transactions:
        lines += _transaction_lines(transactions)

    lines += ["=" * WIDTH, "END OF REPORT", "=" * WIDTH]
    return "\n".join(lines) + "\n"
