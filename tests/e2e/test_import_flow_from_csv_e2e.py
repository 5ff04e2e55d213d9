from __future__ import annotations

from decimal import Decimal
from pathlib import Path

import pytest
from db.client import session_scope
from typer.testing import CliRunner

import finance_tracker.oracle as oracle_mod
from finance_tracker import Category, TransactionType, summarize
from finance_tracker.cli import app
from finance_tracker.persistence import load_transactions
from tests.helpers.db import bootstrap_sqlite_db
from tests.helpers.openai_stub import OpenAIStub

# A realistic month of a Nubank account statement: debit purchases, Pix in
# both directions, a bill payment, a goal redemption and a malformed line.
STATEMENT = """\
Data,Valor,Identificador,Descrição
02/03/2024,5000.00,6f1c,Transferência recebida pelo Pix - EMPRESA EXEMPLO LTDA - 12.345.678/0001-99 - BANCO DO BRASIL
03/03/2024,-1800.00,7a2d,Transferência enviada pelo Pix - Imobiliária Centro - 98.765.432/0001-10 - ITAÚ
05/03/2024,-45.90,8b3e,Compra no débito - Supermercado Bom Preço - 12.345.678/0001-99
06/03/2024,-23.40,9c4f,Compra no débito - Uber *Trip
08/03/2024,-89.90,0d5a,Compra no débito - Drogaria São Paulo
10/03/2024,-39.90,1e6b,Compra no crédito - Netflix.com
12/03/2024,-150.00,2f7c,Transferência enviada pelo Pix - Maria ***.123.456-** Souza
15/03/2024,300.00,3a8d,Resgate RDB - Caixinha Viagem
31/02/2024,-10.00,4b9e,Linha com data inválida
20/03/2024,"-1.234,56",5c0f,Pagamento de fatura - Nubank
"""


def _decide(description: str) -> str | None:
    # The rules do not know the landlord; the oracle does.
    return "Habitação" if description == "Imobiliária Centro" else None


def test_import_persist_and_report(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    url = bootstrap_sqlite_db(tmp_path / "e2e.sqlite3")
    monkeypatch.setenv("DATABASE_URL", url)
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("FINANCE_TRACKER_LOG_LEVEL", "ERROR")
    calls: list[dict] = []
    monkeypatch.setattr(oracle_mod, "OpenAI", OpenAIStub(_decide, calls))

    csv_path = tmp_path / "NU_2024_03.csv"
    csv_path.write_text(STATEMENT, encoding="utf-8")

    result = CliRunner().invoke(
        app, ["import-statement", "--csv-path", str(csv_path), "--use-oracle", "--persist"]
    )
    assert result.exit_code == 0, result.output
    assert "Imported 9 transactions." in result.output
    assert len(calls) == 1

    with session_scope() as session:
        stored = load_transactions(session, month="2024-03")

    by_title = {r.description: r for r in stored}
    assert set(by_title) == {
        "EMPRESA EXEMPLO LTDA",
        "Imobiliária Centro",
        "Supermercado Bom Preço",
        "Uber *Trip",
        "Drogaria São Paulo",
        "Netflix.com",
        "Maria Souza",
        "Caixinha Viagem",
        "Nubank",
    }
    assert by_title["Imobiliária Centro"].category is Category.HOUSING
    assert by_title["Supermercado Bom Preço"].category is Category.FOOD
    assert by_title["Uber *Trip"].category is Category.TRANSPORT
    assert by_title["Drogaria São Paulo"].category is Category.HEALTH
    assert by_title["Netflix.com"].category is Category.LEISURE
    assert by_title["Caixinha Viagem"].type is TransactionType.INCOME
    assert by_title["Nubank"].amount == Decimal("1234.56")

    stats = summarize(stored)
    assert stats.total_income == Decimal("5300.00")
    assert stats.total_expense == Decimal("3383.66")
    assert stats.balance == Decimal("1916.34")
