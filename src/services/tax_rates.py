"""NYC tax rate lookups keyed by fiscal year and tax class."""

from __future__ import annotations

import re
from typing import Any, Iterable, Mapping

from config.tax_rates import NYC_TAX_RATES, NYC_TAXABLE_STATUS_DATE

_LEADING_INT_RE = re.compile(r"^\s*(\d+)")


def leading_int(value: str | int | None) -> int | None:
    """Leading integer of a code or year ("2A" -> 2, "2024" -> 2024, "abc" -> None)."""
    if value is None:
        return None
    match = _LEADING_INT_RE.match(str(value))
    return int(match.group(1)) if match else None


class TaxRateTable:
    def __init__(self, rates: Iterable[Mapping[str, Any]] = NYC_TAX_RATES) -> None:
        self._by_year: dict[int, Mapping[str, Any]] = {
            int(r["fiscal_year"]): r for r in rates
        }

    @property
    def fiscal_years(self) -> list[int]:
        return sorted(self._by_year, reverse=True)

    def rates_for_year(self, fiscal_year: str | int | None) -> Mapping[str, Any] | None:
        fy = leading_int(fiscal_year)
        if fy is None:
            return None
        return self._by_year.get(fy)

    def get_rate(self, fiscal_year: str | int | None, tax_class: str | int | None) -> float | None:
        """Rate in percent, or None when the year or class has no entry."""
        entry = self.rates_for_year(fiscal_year)
        cls_num = leading_int(tax_class)
        if entry is None or cls_num is None:
            return None
        rate = entry.get(f"class{cls_num}")
        return float(rate) if rate is not None else None

    @staticmethod
    def taxable_status_date(fiscal_year: str | int | None) -> str:
        """Assessments for FY N are fixed as of January 5 of N-1."""
        fy = leading_int(fiscal_year)
        if fy is None:
            return "N/A"
        return f"{NYC_TAXABLE_STATUS_DATE}, {fy - 1}"
