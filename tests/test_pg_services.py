from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest
from sqlalchemy.exc import SQLAlchemyError

from src.exceptions import DatasetQueryError, DatasetUnavailableError, InvalidBBLError
from src.services import pg_acris_service, pg_valuation_service

if TYPE_CHECKING:
    from types import TracebackType


class _FakeResult:
    def __init__(self, rows: list[dict[str, Any]] | None = None) -> None:
        self._rows = rows or []

    def mappings(self) -> _FakeResult:
        return self

    def all(self) -> list[dict[str, Any]]:
        return self._rows


class _FakeConnection:
    def __init__(self, execute_fn: Any | None = None) -> None:
        self.execute_calls: list[tuple[str, dict[str, Any] | None]] = []
        self._execute_fn = execute_fn or (lambda _statement, _params: _FakeResult())

    def execute(self, statement: Any, params: dict[str, Any] | None = None) -> _FakeResult:
        self.execute_calls.append((str(statement), params))
        return self._execute_fn(statement, params)


class _ConnectionContext:
    def __init__(self, conn: _FakeConnection) -> None:
        self._conn = conn

    def __enter__(self) -> _FakeConnection:
        return self._conn

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        return False


class _FakeEngine:
    def __init__(self, conn: _FakeConnection) -> None:
        self._conn = conn

    def connect(self) -> _ConnectionContext:
        return _ConnectionContext(self._conn)


class _BrokenContext:
    def __enter__(self) -> None:
        raise SQLAlchemyError("db down")

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        return False


class _BrokenEngine:
    def connect(self) -> _BrokenContext:
        return _BrokenContext()


def _patch_engine(monkeypatch: Any, module: Any, engine: Any) -> None:
    monkeypatch.setattr(module, "resolve_pg_dsn", lambda _: "postgresql://x")
    monkeypatch.setattr(module, "get_engine", lambda _: engine)


def _build_acris(monkeypatch: Any, conn: _FakeConnection) -> pg_acris_service.PgAcrisService:
    _patch_engine(monkeypatch, pg_acris_service, _FakeEngine(conn))
    svc = pg_acris_service.PgAcrisService()
    conn.execute_calls.clear()
    return svc


def test_init_checks_both_tables(monkeypatch: Any) -> None:
    conn = _FakeConnection()
    _patch_engine(monkeypatch, pg_acris_service, _FakeEngine(conn))

    svc = pg_acris_service.PgAcrisService()

    assert svc.available
    assert svc.unavailable_reason is None
    sqls = [sql for sql, _ in conn.execute_calls]
    assert any("acris_documents" in sql for sql in sqls)
    assert any("acris_parties" in sql for sql in sqls)


def test_unavailable_service_raises(monkeypatch: Any) -> None:
    _patch_engine(monkeypatch, pg_acris_service, _BrokenEngine())

    svc = pg_acris_service.PgAcrisService()

    assert not svc.available
    assert "db down" in (svc.unavailable_reason or "")
    with pytest.raises(DatasetUnavailableError, match="db down"):
        svc.get_documents("1-13-1")
    with pytest.raises(DatasetUnavailableError):
        svc.get_parties(["D1"])


def test_get_documents_filters_by_bbl_components(monkeypatch: Any) -> None:
    rows = [
        {
            "master_document_id": "2024010500001001",
            "document_type": "MTGE",
            "doc_type_description": "MORTGAGE",
            "document_date": "2024-01-05",
            "recorded_date": None,
            "document_amount": 500000,
            "class_code_description": "MORTGAGES & INSTRUMENTS",
            "borough": 1,
            "block": 13,
            "lot": 1,
        }
    ]
    conn = _FakeConnection(execute_fn=lambda _s, _p: _FakeResult(rows))
    svc = _build_acris(monkeypatch, conn)

    docs = svc.get_documents("1-00013-0001", class_codes=["MORTGAGES & INSTRUMENTS"])

    assert len(docs) == 1
    assert docs[0].master_document_id == "2024010500001001"
    assert docs[0].document_amount == 500000.0
    assert docs[0].borough == "1"
    sql, params = conn.execute_calls[0]
    assert "ORDER BY document_date DESC" in sql
    assert "ANY(:class_codes)" in sql
    assert params is not None
    assert params["borough"] == "1"
    assert params["block"] == 13
    assert params["lot"] == 1
    assert params["class_codes"] == ["MORTGAGES & INSTRUMENTS"]


def test_get_documents_rejects_invalid_bbl_before_query(monkeypatch: Any) -> None:
    conn = _FakeConnection()
    svc = _build_acris(monkeypatch, conn)

    with pytest.raises(InvalidBBLError):
        svc.get_documents("7-1-1")
    assert conn.execute_calls == []


def test_get_documents_query_failure_raises(monkeypatch: Any) -> None:
    def _boom(_statement: Any, _params: Any) -> _FakeResult:
        raise SQLAlchemyError("syntax error")

    conn = _FakeConnection()
    svc = _build_acris(monkeypatch, conn)
    conn._execute_fn = _boom

    with pytest.raises(DatasetQueryError, match="syntax error"):
        svc.get_documents("1-13-1")


def test_get_parties_single_batched_query(monkeypatch: Any) -> None:
    rows = [
        {"party_document_id": "D1", "party_party_type": 1, "party_name": "JANE DOE"},
        {"party_document_id": "D2", "party_party_type": 2, "party_name": "ACME BANK"},
    ]
    conn = _FakeConnection(execute_fn=lambda _s, _p: _FakeResult(rows))
    svc = _build_acris(monkeypatch, conn)

    parties = svc.get_parties(["D1", "D2", "D1", ""])

    assert [p.party_party_type for p in parties] == ["1", "2"]
    assert len(conn.execute_calls) == 1
    sql, params = conn.execute_calls[0]
    assert "ANY(:ids)" in sql
    assert params is not None
    assert params["ids"] == ["D1", "D2"]


def test_get_parties_empty_ids_skips_query(monkeypatch: Any) -> None:
    conn = _FakeConnection()
    svc = _build_acris(monkeypatch, conn)

    assert svc.get_parties([]) == []
    assert conn.execute_calls == []


def test_valuation_service_maps_rows(monkeypatch: Any) -> None:
    rows = [
        {"year": "2024", "finmkttot": 1000000, "finacttot": 450000, "fintxbtot": 450000, "fintxbextot": None, "fintaxclass": "2"},
        {"year": "2023", "finmkttot": 950000, "finacttot": 420000, "fintxbtot": 420000, "fintxbextot": 20000, "fintaxclass": "2"},
    ]
    conn = _FakeConnection(execute_fn=lambda _s, _p: _FakeResult(rows))
    _patch_engine(monkeypatch, pg_valuation_service, _FakeEngine(conn))
    svc = pg_valuation_service.PgValuationService()
    conn.execute_calls.clear()

    snapshots = svc.get_valuations("1-13-1")

    assert [s.year for s in snapshots] == ["2024", "2023"]
    assert snapshots[0].taxable_value == 450000.0
    assert snapshots[1].taxable_value == 400000.0
    sql, params = conn.execute_calls[0]
    assert "finmkttot > 0" in sql
    assert "ORDER BY year DESC, extracrdt DESC NULLS LAST" in sql
    assert params == {"boro": 1, "block": 13, "lot": 1}


def test_valuation_service_unavailable(monkeypatch: Any) -> None:
    _patch_engine(monkeypatch, pg_valuation_service, _BrokenEngine())

    svc = pg_valuation_service.PgValuationService()

    assert not svc.available
    with pytest.raises(DatasetUnavailableError):
        svc.get_valuations("1-13-1")
