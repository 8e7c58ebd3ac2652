from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse, PlainTextResponse
from loguru import logger

from src.models.acris import TransactionsResult
from src.models.valuation import TaxHistoryResult
from src.services.property_report import build_property_report
from src.services.tax_history_service import TaxHistoryService
from src.services.transaction_service import TransactionService
from src.utils.bbl import parse_bbl

from app.web.dependencies import get_tax_history_service, get_transaction_service

router = APIRouter(tags=["api"])

Transactions = Annotated[TransactionService, Depends(get_transaction_service)]
TaxHistory = Annotated[TaxHistoryService, Depends(get_tax_history_service)]


@router.get("/property/{bbl}/transactions", response_model=TransactionsResult)
def property_transactions(bbl: str, service: Transactions):
    """Normalized ACRIS transaction history, most recent first."""
    # InvalidBBLError / DocumentFetchError go to the global handlers
    return TransactionsResult(data=service.normalizer.build_transactions(bbl))


@router.get("/property/{bbl}/tax-history", response_model=TaxHistoryResult)
def property_tax_history(bbl: str, service: TaxHistory):
    """Yearly tax rows, newest fiscal year first."""
    rows = service.build_tax_history(bbl)
    if not rows:
        raise HTTPException(status_code=404, detail=f"No valuation data found for BBL {parse_bbl(bbl)}")
    return TaxHistoryResult(data=rows)


@router.get("/property/{bbl}/report", response_class=PlainTextResponse)
def property_report(bbl: str, transactions: Transactions, tax_history: TaxHistory):
    """Plain-text report; sections whose data failed to load are left out."""
    key = parse_bbl(bbl)

    txn_result = transactions.get_transactions(key)
    if txn_result.error:
        logger.warning("Report for {}: transactions omitted ({})", key, txn_result.error)
    tax_result = tax_history.get_tax_history(key)
    if tax_result.error:
        logger.warning("Report for {}: tax history omitted ({})", key, tax_result.error)

    return build_property_report(key, txn_result.data, tax_result.data)


@router.get("/health")
def api_health(transactions: Transactions, tax_history: TaxHistory):
    """API health check with dataset status."""
    datasets = {}
    for name, fetcher in (
        ("acris", transactions.normalizer.documents),
        ("valuation", tax_history.valuations),
    ):
        datasets[name] = {
            "available": getattr(fetcher, "available", True),
            "reason": getattr(fetcher, "unavailable_reason", None),
        }
    healthy = all(d["available"] for d in datasets.values())
    return JSONResponse({
        "status": "ok" if healthy else "degraded",
        "datasets": datasets,
    })
