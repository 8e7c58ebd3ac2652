"""
Transaction history for a BBL.

Joins ACRIS documents to the parties named on them and resolves each side's
role label through the control code table. Two batched fetches per call:
documents for the BBL, then parties for the surviving document ids.

Failure policy:
- malformed BBL: InvalidBBLError before anything is fetched
- document fetch fails: DocumentFetchError (fatal)
- party fetch fails: logged, every side falls back to "Unknown"
"""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable, Protocol, Sequence

from loguru import logger

from config.acris import (
    CLASS_DEED,
    CLASS_MORTGAGE,
    CLASS_OTHER,
    CLASS_UCC_LIEN,
    ROLE_PARTY1,
    ROLE_PARTY2,
    UNKNOWN_PARTY,
)
from src.exceptions import DocumentFetchError, InvalidBBLError
from src.models.acris import PartyDetail, RawDocument, RawParty, Transaction, TransactionsResult
from src.services.control_codes import ControlCodeTable
from src.utils.bbl import BBL, parse_bbl
from src.utils.logging_utils import Timer, log_search


class DocumentFetcher(Protocol):
    def get_documents(self, bbl: BBL) -> Sequence[RawDocument]: ...


class PartyFetcher(Protocol):
    def get_parties(self, document_ids: Sequence[str]) -> Sequence[RawParty]: ...


def _group_by_document(parties: Iterable[RawParty]) -> dict[str, list[RawParty]]:
    grouped: dict[str, list[RawParty]] = defaultdict(list)
    for party in parties:
        if party.party_document_id:
            grouped[party.party_document_id].append(party)
    return grouped


class TransactionNormalizer:
    def __init__(
        self,
        documents: DocumentFetcher,
        parties: PartyFetcher,
        control_codes: ControlCodeTable | None = None,
    ) -> None:
        self.documents = documents
        self.parties = parties
        self.control_codes = control_codes if control_codes is not None else ControlCodeTable.load()

    def build_transactions(self, bbl: BBL | str) -> list[Transaction]:
        """Ordered transaction history for a BBL (fetch order, most recent first)."""
        key = parse_bbl(bbl)

        with Timer() as t:
            try:
                documents = list(self.documents.get_documents(key))
            except Exception as e:
                logger.error("Error fetching documents for BBL {}: {}", key, e)
                raise DocumentFetchError(
                    str(key), f"Failed to fetch transactions for BBL {key}: {e}"
                ) from e

            valid = [doc for doc in documents if doc.has_valid_amount]
            if not valid:
                logger.info(
                    "No documents with a positive amount for BBL {} ({} fetched)",
                    key,
                    len(documents),
                )
                return []

            document_ids = list(
                dict.fromkeys(doc.master_document_id for doc in valid if doc.master_document_id)
            )
            if not document_ids:
                logger.warning(
                    "Found {} documents for BBL {} but none have master_document_id",
                    len(valid),
                    key,
                )
                return []

            parties = self._fetch_parties(key, document_ids)
            by_document = _group_by_document(parties)
            transactions = [
                self._to_transaction(doc, by_document.get(doc.master_document_id or "", []))
                for doc in valid
            ]

        log_search(
            source="ACRIS transactions",
            query=str(key),
            results_raw=len(documents),
            results_kept=len(transactions),
            duration_ms=t.elapsed_ms,
            document_ids=len(document_ids),
            parties=len(parties),
        )
        return transactions

    def _fetch_parties(self, key: BBL, document_ids: list[str]) -> list[RawParty]:
        try:
            parties = list(self.parties.get_parties(document_ids))
        except Exception as e:
            logger.opt(exception=True).warning(
                "Error fetching parties for BBL {} ({} documents), continuing without party data: {}",
                key,
                len(document_ids),
                e,
            )
            return []
        if not parties:
            logger.warning("No parties found for {} documents for BBL {}", len(document_ids), key)
        return parties

    def _to_transaction(self, doc: RawDocument, parties: list[RawParty]) -> Transaction:
        party1_type, party2_type = self.control_codes.role_labels(doc.document_type)

        # dicts as insertion-ordered sets
        party1: dict[str, None] = {}
        party2: dict[str, None] = {}
        details: dict[str, PartyDetail] = {}
        for party in parties:
            name = party.clean_name
            if not name:
                continue
            if party.party_party_type == ROLE_PARTY1:
                party1.setdefault(name)
            elif party.party_party_type == ROLE_PARTY2:
                party2.setdefault(name)
            if name not in details:
                details[name] = PartyDetail.from_party(party)

        class_code = doc.class_code_description or self.control_codes.class_code_description(
            doc.document_type
        )

        return Transaction(
            document_id=doc.master_document_id or "",
            document_type=doc.document_type,
            doc_type_description=doc.doc_type_description,
            document_date=doc.document_date,
            document_amount=doc.document_amount,
            class_code_description=class_code,
            from_party=list(party1) or [UNKNOWN_PARTY],
            to_party=list(party2) or [UNKNOWN_PARTY],
            party1_type=party1_type,
            party2_type=party2_type,
            is_deed=class_code == CLASS_DEED,
            is_mortgage=class_code == CLASS_MORTGAGE,
            is_ucc_lien=class_code == CLASS_UCC_LIEN,
            is_other_document=class_code == CLASS_OTHER,
            party_details=list(details.values()),
        )


class TransactionService:
    """Caller-facing wrapper: returns data or an error string, never raises for bad input or upstream failure."""

    def __init__(self, normalizer: TransactionNormalizer) -> None:
        self.normalizer = normalizer

    @classmethod
    def from_pg(cls, dsn: str | None = None) -> TransactionService:
        from src.services.pg_acris_service import PgAcrisService

        acris = PgAcrisService(dsn)
        return cls(TransactionNormalizer(acris, acris, ControlCodeTable.load()))

    def get_transactions(self, bbl: BBL | str) -> TransactionsResult:
        try:
            return TransactionsResult(data=self.normalizer.build_transactions(bbl))
        except InvalidBBLError as e:
            logger.warning("Rejected BBL {!r}: {}", bbl, e)
            return TransactionsResult(error=str(e))
        except DocumentFetchError as e:
            return TransactionsResult(error=str(e))
