"""
PostgreSQL Valuation Service -- read-only queries against dof_property_valuation.

One row per fiscal year per BBL (DOF final roll). Rows with no market value
are excluded so every returned snapshot is a real assessment.
"""

from __future__ import annotations

from loguru import logger
from sqlalchemy import text

from config.acris import VALUATION_TABLE
from nycdb.db import get_engine, resolve_pg_dsn
from src.exceptions import DatasetQueryError, DatasetUnavailableError
from src.models.valuation import ValuationSnapshot
from src.utils.bbl import BBL, parse_bbl
from src.utils.logging_utils import Timer, log_search


class PgValuationService:
    """Read-only service for DOF property valuation data in PostgreSQL."""

    def __init__(self, dsn: str | None = None):
        self._available = False
        self._unavailable_reason: str | None = None
        self._engine = None
        try:
            resolved = resolve_pg_dsn(dsn)
            self._engine = get_engine(resolved)
            with self._engine.connect() as conn:
                conn.execute(text(f"SELECT 1 FROM {VALUATION_TABLE} LIMIT 0"))
            self._available = True
            logger.info("PostgreSQL valuation service connected ({})", VALUATION_TABLE)
        except Exception as e:
            self._unavailable_reason = str(e)
            logger.warning(f"PostgreSQL valuation service unavailable: {e}")
            self._engine = None

    @property
    def available(self) -> bool:
        return self._available

    @property
    def unavailable_reason(self) -> str | None:
        return self._unavailable_reason

    def get_valuations(self, bbl: BBL | str) -> list[ValuationSnapshot]:
        """Snapshots for a BBL ordered by fiscal year, newest first."""
        key = parse_bbl(bbl)
        if not self._available:
            raise DatasetUnavailableError(
                f"Valuation dataset unavailable: {self._unavailable_reason or 'not connected'}"
            )
        try:
            with Timer() as t, self._engine.connect() as conn:
                rows = conn.execute(
                    text(f"""
                        SELECT year, finmkttot, finacttot, fintxbtot, fintxbextot, fintaxclass
                        FROM {VALUATION_TABLE}
                        WHERE boro = :boro
                          AND block = :block
                          AND lot = :lot
                          AND finmkttot > 0
                        ORDER BY year DESC, extracrdt DESC NULLS LAST
                    """),
                    {"boro": key.borough, "block": key.block, "lot": key.lot},
                ).mappings().all()
        except Exception as e:
            logger.opt(exception=True).error("get_valuations({}) failed: {}", key, e)
            raise DatasetQueryError(f"Valuation query failed for BBL {key}: {e}") from e

        snapshots = [ValuationSnapshot.from_dof_row(r) for r in rows]
        log_search(
            source="DOF valuation",
            query=str(key),
            results_raw=len(snapshots),
            duration_ms=t.elapsed_ms,
        )
        return snapshots
