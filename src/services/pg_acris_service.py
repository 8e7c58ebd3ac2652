"""
PostgreSQL ACRIS Service -- read-only queries against acris_documents / acris_parties.

Provides:
- Recorded documents for a BBL (most recent first)
- Parties for a set of document ids (one batched ANY(:ids) query)

Unlike the other read-only lookups these methods raise instead of returning
empty results, so callers can tell "no records" apart from "dataset down".
"""

from __future__ import annotations

from typing import Iterable, Sequence

from loguru import logger
from sqlalchemy import text

from config.acris import (
    DOCUMENTS_TABLE,
    MAX_DOCUMENTS_PER_BBL,
    MAX_PARTIES_PER_QUERY,
    PARTIES_TABLE,
)
from nycdb.db import get_engine, resolve_pg_dsn
from src.exceptions import DatasetQueryError, DatasetUnavailableError
from src.models.acris import RawDocument, RawParty
from src.utils.bbl import BBL, parse_bbl
from src.utils.logging_utils import Timer, log_search

_DOCUMENT_COLUMNS = """
    master_document_id, document_type, doc_type_description,
    document_date, recorded_date, document_amount, class_code_description,
    borough, block, lot
"""

_PARTY_COLUMNS = """
    party_document_id, party_party_type, party_name, party_party_type_description,
    party_address_1, party_address_2, party_city, party_state, party_zip,
    party_country
"""


class PgAcrisService:
    """Read-only service for ACRIS document and party data in PostgreSQL."""

    def __init__(self, dsn: str | None = None):
        self._available = False
        self._unavailable_reason: str | None = None
        self._engine = None
        try:
            resolved = resolve_pg_dsn(dsn)
            self._engine = get_engine(resolved)
            # Quick connectivity + table existence test
            with self._engine.connect() as conn:
                conn.execute(text(f"SELECT 1 FROM {DOCUMENTS_TABLE} LIMIT 0"))
                conn.execute(text(f"SELECT 1 FROM {PARTIES_TABLE} LIMIT 0"))
            self._available = True
            logger.info("PostgreSQL ACRIS service connected ({}, {})", DOCUMENTS_TABLE, PARTIES_TABLE)
        except Exception as e:
            self._unavailable_reason = str(e)
            logger.warning(f"PostgreSQL ACRIS service unavailable: {e}")
            self._engine = None

    @property
    def available(self) -> bool:
        return self._available

    @property
    def unavailable_reason(self) -> str | None:
        return self._unavailable_reason

    def _require_available(self) -> None:
        if not self._available:
            raise DatasetUnavailableError(
                f"ACRIS dataset unavailable: {self._unavailable_reason or 'not connected'}"
            )

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def get_documents(
        self,
        bbl: BBL | str,
        class_codes: Sequence[str] | None = None,
        limit: int = MAX_DOCUMENTS_PER_BBL,
    ) -> list[RawDocument]:
        """Documents recorded against a BBL, newest document_date first.

        ``class_codes`` optionally restricts to class code descriptions
        (e.g. deeds and mortgages only).
        """
        key = parse_bbl(bbl)
        self._require_available()

        where = "borough = :borough AND block = :block AND lot = :lot"
        params: dict = {
            "borough": str(key.borough),
            "block": key.block,
            "lot": key.lot,
            "limit": limit,
        }
        if class_codes:
            where += " AND class_code_description = ANY(:class_codes)"
            params["class_codes"] = list(class_codes)

        try:
            with Timer() as t, self._engine.connect() as conn:
                rows = conn.execute(
                    text(f"""
                        SELECT {_DOCUMENT_COLUMNS}
                        FROM {DOCUMENTS_TABLE}
                        WHERE {where}
                        ORDER BY document_date DESC NULLS LAST
                        LIMIT :limit
                    """),
                    params,
                ).mappings().all()
        except Exception as e:
            logger.opt(exception=True).error("get_documents({}) failed: {}", key, e)
            raise DatasetQueryError(f"Document query failed for BBL {key}: {e}") from e

        documents = [RawDocument.model_validate(dict(r)) for r in rows]
        log_search(
            source="ACRIS documents",
            query=str(key),
            results_raw=len(documents),
            duration_ms=t.elapsed_ms,
        )
        return documents

    # ------------------------------------------------------------------
    # Parties
    # ------------------------------------------------------------------

    def get_parties(
        self,
        document_ids: Iterable[str],
        limit: int = MAX_PARTIES_PER_QUERY,
    ) -> list[RawParty]:
        """All parties whose party_document_id is in ``document_ids``."""
        ids = [d for d in dict.fromkeys(document_ids) if d]
        if not ids:
            return []
        self._require_available()

        try:
            with Timer() as t, self._engine.connect() as conn:
                rows = conn.execute(
                    text(f"""
                        SELECT {_PARTY_COLUMNS}
                        FROM {PARTIES_TABLE}
                        WHERE party_document_id = ANY(:ids)
                        LIMIT :limit
                    """),
                    {"ids": ids, "limit": limit},
                ).mappings().all()
        except Exception as e:
            logger.opt(exception=True).error(
                "get_parties({} ids) failed: {}", len(ids), e
            )
            raise DatasetQueryError(f"Party query failed for {len(ids)} documents: {e}") from e

        parties = [RawParty.model_validate(dict(r)) for r in rows]
        if len(parties) >= limit:
            logger.warning(
                "Party query hit limit ({}) for {} documents; results may be truncated",
                limit,
                len(ids),
            )
        log_search(
            source="ACRIS parties",
            query=f"{len(ids)} document ids",
            results_raw=len(parties),
            duration_ms=t.elapsed_ms,
        )
        return parties
