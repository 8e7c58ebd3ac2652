"""
Tax history derivation.

Turns DOF valuation snapshots (newest fiscal year first) into display rows
with the statutory rate, the base tax and the change against the next-older
row. Missing data never raises; it only produces null fields.
"""

from __future__ import annotations

from typing import Protocol, Sequence

from loguru import logger

from src.exceptions import InvalidBBLError, ValuationFetchError
from src.models.valuation import TaxHistoryResult, TaxRow, ValuationSnapshot
from src.services.tax_rates import TaxRateTable, leading_int
from src.utils.bbl import BBL, parse_bbl


class ValuationFetcher(Protocol):
    def get_valuations(self, bbl: BBL) -> Sequence[ValuationSnapshot]: ...


def format_tax_year(year: str | None) -> str:
    """Fiscal year label: "2024" -> "2023/24"."""
    if not year:
        return "N/A"
    fy = leading_int(year)
    if fy is None:
        return year
    return f"{fy - 1}/{fy % 100:02d}"


def format_assessment_year(year: str | None) -> str:
    """Assessment period label: "2024" -> "2023 - 2024"."""
    if not year:
        return "N/A"
    fy = leading_int(year)
    if fy is None:
        return year
    return f"{fy - 1} - {fy}"


def base_tax(snapshot: ValuationSnapshot, rate_table: TaxRateTable) -> tuple[float | None, float | None]:
    """Return (rate, tax) for a snapshot; either may be None."""
    rate = rate_table.get_rate(snapshot.year, snapshot.tax_class)
    if rate is None or snapshot.taxable_value is None:
        return rate, None
    return rate, snapshot.taxable_value * rate / 100


def yoy_change(current: float | None, previous: float | None) -> float | None:
    if current is None or previous is None or previous == 0:
        return None
    return (current - previous) / previous


def derive_tax_history(
    snapshots: Sequence[ValuationSnapshot],
    rate_table: TaxRateTable | None = None,
    strict_year_gaps: bool = False,
) -> list[TaxRow]:
    """
    One TaxRow per snapshot, same order.

    Year-over-year change compares position i against position i+1. When the
    two are not consecutive fiscal years a warning is logged; with
    ``strict_year_gaps`` the change for that pair is left null instead.
    """
    rates = rate_table or TaxRateTable()
    computed = [base_tax(s, rates) for s in snapshots]

    rows: list[TaxRow] = []
    for i, snapshot in enumerate(snapshots):
        rate, tax = computed[i]
        change = None
        if i + 1 < len(snapshots):
            older = snapshots[i + 1]
            cur_fy, prev_fy = leading_int(snapshot.year), leading_int(older.year)
            gap = cur_fy is not None and prev_fy is not None and cur_fy - prev_fy != 1
            if gap:
                logger.warning(
                    "Non-consecutive fiscal years {} -> {} in valuation history",
                    older.year,
                    snapshot.year,
                )
            if not (gap and strict_year_gaps):
                change = yoy_change(tax, computed[i + 1][1])

        rows.append(
            TaxRow(
                year=format_tax_year(snapshot.year),
                raw_year=snapshot.year,
                market_value=snapshot.market_value,
                assessed_value=snapshot.assessed_value,
                taxable=snapshot.taxable_value,
                tax_rate=rate,
                property_tax=tax,
                yoy_change=change,
            )
        )
    return rows


class TaxHistoryService:
    """Caller-facing wrapper: returns rows or an error string."""

    def __init__(
        self,
        valuations: ValuationFetcher,
        rate_table: TaxRateTable | None = None,
        strict_year_gaps: bool = False,
    ) -> None:
        self.valuations = valuations
        self.rate_table = rate_table or TaxRateTable()
        self.strict_year_gaps = strict_year_gaps

    @classmethod
    def from_pg(cls, dsn: str | None = None, strict_year_gaps: bool = False) -> TaxHistoryService:
        from src.services.pg_valuation_service import PgValuationService

        return cls(PgValuationService(dsn), strict_year_gaps=strict_year_gaps)

    def fetch_snapshots(self, bbl: BBL | str) -> list[ValuationSnapshot]:
        """Validated fetch; raises InvalidBBLError or ValuationFetchError."""
        key = parse_bbl(bbl)
        try:
            return list(self.valuations.get_valuations(key))
        except Exception as e:
            logger.error("Error fetching valuation data for BBL {}: {}", key, e)
            raise ValuationFetchError(
                str(key), f"Failed to load valuation data for BBL {key}: {e}"
            ) from e

    def build_tax_history(self, bbl: BBL | str) -> list[TaxRow]:
        """Raising variant of get_tax_history; an empty history is an empty list."""
        return derive_tax_history(self.fetch_snapshots(bbl), self.rate_table, self.strict_year_gaps)

    def get_tax_history(self, bbl: BBL | str) -> TaxHistoryResult:
        try:
            snapshots = self.fetch_snapshots(bbl)
        except InvalidBBLError as e:
            logger.warning("Rejected BBL {!r}: {}", bbl, e)
            return TaxHistoryResult(error=str(e))
        except ValuationFetchError as e:
            return TaxHistoryResult(error=str(e))

        if not snapshots:
            return TaxHistoryResult(error=f"No valuation data found for BBL {parse_bbl(bbl)}")
        rows = derive_tax_history(snapshots, self.rate_table, self.strict_year_gaps)
        return TaxHistoryResult(data=rows)
