from typing import Any, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, field_validator


def _num(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class ValuationSnapshot(BaseModel):
    """One fiscal-year DOF assessment record for a BBL."""
    model_config = ConfigDict(frozen=True)

    year: Optional[str] = None
    market_value: Optional[float] = None
    assessed_value: Optional[float] = None
    taxable_value: Optional[float] = None
    tax_class: Optional[str] = None

    @field_validator("year", "tax_class", mode="before")
    @classmethod
    def _coerce_str(cls, v):
        if v is None:
            return None
        return str(v).strip()

    @classmethod
    def from_dof_row(cls, row: Mapping[str, Any]) -> "ValuationSnapshot":
        """
        Map a dof_property_valuation row.

        Taxable value is the final taxable total less the final taxable
        exemption total; it is null when the row has no taxable total.
        """
        taxable_total = _num(row.get("fintxbtot"))
        taxable = None
        if taxable_total:
            taxable = taxable_total - (_num(row.get("fintxbextot")) or 0)
        return cls(
            year=row.get("year"),
            market_value=_num(row.get("finmkttot")),
            assessed_value=_num(row.get("finacttot")),
            taxable_value=taxable,
            tax_class=row.get("fintaxclass"),
        )


class TaxRow(BaseModel):
    year: str                          # display label, e.g. "2023/24"
    raw_year: Optional[str] = None
    market_value: Optional[float] = None
    assessed_value: Optional[float] = None
    taxable: Optional[float] = None
    tax_rate: Optional[float] = None   # percent
    property_tax: Optional[float] = None
    yoy_change: Optional[float] = None  # decimal fraction


class TaxHistoryResult(BaseModel):
    data: Optional[List[TaxRow]] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None
