from __future__ import annotations

import json
from typing import Any

import pytest

import main
from src.models.acris import Transaction, TransactionsResult
from src.models.valuation import TaxHistoryResult, TaxRow


class _StubTransactions:
    def __init__(self, result: TransactionsResult) -> None:
        self.result = result
        self.calls: list[Any] = []

    def get_transactions(self, bbl: Any) -> TransactionsResult:
        self.calls.append(bbl)
        return self.result


class _StubTaxHistory:
    def __init__(self, result: TaxHistoryResult) -> None:
        self.result = result
        self.strict_year_gaps = False

    def get_tax_history(self, bbl: Any) -> TaxHistoryResult:
        return self.result


def _txn() -> Transaction:
    return Transaction(
        document_id="D1",
        document_type="DEED",
        document_date="2023-06-01",
        document_amount=1250000,
        class_code_description="DEEDS AND OTHER CONVEYANCES",
        from_party=["OLD OWNER LLC"],
        to_party=["NEW OWNER LLC"],
        party1_type="SELLER",
        party2_type="BUYER",
        is_deed=True,
    )


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch: Any) -> None:
    monkeypatch.setattr(main, "configure_cli_logging", lambda: None)


def _patch_services(monkeypatch: Any, transactions: Any = None, tax_history: Any = None) -> None:
    if transactions is not None:
        monkeypatch.setattr(main.TransactionService, "from_pg", classmethod(lambda cls, dsn=None: transactions))
    if tax_history is not None:
        def _from_pg(cls: Any, dsn: Any = None, strict_year_gaps: bool = False) -> Any:
            tax_history.strict_year_gaps = strict_year_gaps
            return tax_history

        monkeypatch.setattr(main.TaxHistoryService, "from_pg", classmethod(_from_pg))


def test_bbl_required_for_lookup_modes() -> None:
    with pytest.raises(SystemExit):
        main.main(["--transactions"])


def test_transactions_table_output(monkeypatch: Any, capsys: Any) -> None:
    _patch_services(monkeypatch, transactions=_StubTransactions(TransactionsResult(data=[_txn()])))

    code = main.main(["--transactions", "--bbl", "1-13-1"])

    out = capsys.readouterr().out
    assert code == 0
    assert "06/01/2023" in out
    assert "$1,250,000" in out
    assert "SELLER: OLD OWNER LLC" in out
    assert "BUYER: NEW OWNER LLC" in out


def test_transactions_json_error_exit_code(monkeypatch: Any, capsys: Any) -> None:
    result = TransactionsResult(error="Failed to fetch transactions for BBL 1-13-1: boom")
    _patch_services(monkeypatch, transactions=_StubTransactions(result))

    code = main.main(["--transactions", "--bbl", "1-13-1", "--json"])

    payload = json.loads(capsys.readouterr().out)
    assert code == 1
    assert payload == {"data": None, "error": "Failed to fetch transactions for BBL 1-13-1: boom"}


def test_tax_table_output_and_strict_flag(monkeypatch: Any, capsys: Any) -> None:
    stub = _StubTaxHistory(
        TaxHistoryResult(data=[TaxRow(year="2023/24", taxable=800000, tax_rate=12.5, property_tax=100000, yoy_change=0.0667)])
    )
    _patch_services(monkeypatch, tax_history=stub)

    code = main.main(["--tax", "--bbl", "1-13-1", "--strict-year-gaps"])

    out = capsys.readouterr().out
    assert code == 0
    assert stub.strict_year_gaps is True
    assert "2023/24" in out
    assert "12.500%" in out
    assert "+6.67%" in out


def test_report_prints_available_sections(monkeypatch: Any, capsys: Any) -> None:
    _patch_services(
        monkeypatch,
        transactions=_StubTransactions(TransactionsResult(data=[_txn()])),
        tax_history=_StubTaxHistory(TaxHistoryResult(error="No valuation data found for BBL 1-13-1")),
    )

    code = main.main(["--report", "--bbl", "1-13-1"])

    out = capsys.readouterr().out
    assert code == 0
    assert "TRANSACTION HISTORY (ALL TRANSACTIONS)" in out
    assert "TAX HISTORY" not in out


def test_report_rejects_invalid_bbl(monkeypatch: Any) -> None:
    stub = _StubTransactions(TransactionsResult(data=[]))
    _patch_services(monkeypatch, transactions=stub, tax_history=_StubTaxHistory(TaxHistoryResult()))

    assert main.main(["--report", "--bbl", "1-13"]) == 1
    assert stub.calls == []
