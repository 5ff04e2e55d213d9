from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence
from decimal import Decimal
from pathlib import Path

import pytest

from finance_tracker import (
    Category,
    ClassifiedTransaction,
    PaymentMethod,
    StatementReadError,
    TransactionType,
    UnrecognizedFormatError,
    aimport_statement_file,
    import_statement,
    import_statement_file,
)

STATEMENT = (
    "date,amount,id,title\n"
    "15/03/2024,-45.90,xxx,Compra no débito - Supermercado Bom Preço - 12.345.678/0001-99\n"
    "16/03/2024,2500.00,yyy,Transferência recebida pelo Pix - ACME LTDA - 12.345.678/0001-99\n"
    "17/03/2024,-39.90,zzz,Netflix.com\n"
)


class _FixedOracle:
    """Oracle double returning a fixed mapping and recording its input."""

    def __init__(self, answers: Mapping[str, Category]) -> None:
        self.answers = answers
        self.seen: list[list[str]] = []

    def categorize(self, descriptions: Sequence[str]) -> Mapping[str, Category]:
        self.seen.append(list(descriptions))
        return {d: c for d, c in self.answers.items() if d in descriptions}


class _BrokenOracle:
    def categorize(self, descriptions: Sequence[str]) -> Mapping[str, Category]:
        raise TimeoutError("oracle did not answer")


def test_end_to_end_debit_purchase():
    records = import_statement(STATEMENT)
    assert records[0] == ClassifiedTransaction(
        date="2024-03-15",
        description="Supermercado Bom Preço",
        amount=Decimal("45.90"),
        category=Category.FOOD,
        type=TransactionType.EXPENSE,
        payment_method=PaymentMethod.DEBIT_CARD,
    )


def test_every_record_is_fully_classified():
    records = import_statement(STATEMENT)
    assert [r.description for r in records] == [
        "Supermercado Bom Preço",
        "ACME LTDA",
        "Netflix.com",
    ]
    income = records[1]
    assert income.type is TransactionType.INCOME
    assert income.payment_method is PaymentMethod.PIX
    assert income.category is Category.OTHER
    assert records[2].category is Category.LEISURE
    assert records[2].payment_method is PaymentMethod.CREDIT_CARD
    assert all(r.amount >= 0 for r in records)


def test_bad_rows_are_dropped_and_counted(caplog: pytest.LogCaptureFixture):
    text = STATEMENT + "99/99/2024,-1.00,x,Data inválida\n18/03/2024,,x,\n"
    with caplog.at_level(logging.INFO, logger="finance_tracker.pipeline"):
        records = import_statement(text)
    assert len(records) == 3
    done = [r.getMessage() for r in caplog.records if r.getMessage().startswith("import_statement:done")]
    assert len(done) == 1
    assert "rows=3" in done[0] and "dropped=2" in done[0]


@pytest.mark.parametrize("text", ["", "\n\n", "date,amount,id,title\n", "hello world\n"])
def test_empty_or_header_only_input_yields_nothing(text: str):
    assert import_statement(text) == []


@pytest.mark.parametrize(
    "text",
    [
        "date,amount,id,title\nnot,a,valid,row\n",
        "Data;Valor\n;;\n31/02/2024;-1,00\n",
    ],
)
def test_no_usable_rows_raises_unrecognized_format(text: str):
    with pytest.raises(UnrecognizedFormatError) as exc:
        import_statement(text)
    assert "Nubank" in str(exc.value)


def test_unknown_provider_is_rejected():
    with pytest.raises(ValueError, match="unknown provider"):
        import_statement(STATEMENT, provider="itau")


def test_card_provider_uses_fixed_layout():
    text = (
        "date,category,title,amount\n"
        '2024-03-01,transporte,Uber *Trip,"23,45"\n'
        "2024-03-02,restaurante,iFood,-5.00\n"
        "2024-03-03,short\n"
    )
    records = import_statement(text, provider="nubank_card")
    assert [(r.description, r.amount, r.category) for r in records] == [
        ("Uber *Trip", Decimal("23.45"), Category.TRANSPORT),
        ("iFood", Decimal("5.00"), Category.FOOD),
    ]
    assert records[0].type is TransactionType.INCOME
    assert records[1].type is TransactionType.EXPENSE


def test_oracle_overrides_rule_category():
    oracle = _FixedOracle({"ACME LTDA": Category.HOUSING})
    records = import_statement(STATEMENT, oracle=oracle)
    assert records[1].category is Category.HOUSING
    # Unanswered descriptions keep their rule-based category.
    assert records[0].category is Category.FOOD
    # The oracle only ever sees cleaned, deduplicated titles.
    assert oracle.seen == [["Supermercado Bom Preço", "ACME LTDA", "Netflix.com"]]


def test_oracle_failure_falls_back_to_rules():
    assert import_statement(STATEMENT, oracle=_BrokenOracle()) == import_statement(STATEMENT)


def test_oracle_sees_each_description_once():
    text = STATEMENT + "18/03/2024,-45.90,x,Compra no débito - Supermercado Bom Preço\n"
    oracle = _FixedOracle({})
    import_statement(text, oracle=oracle)
    assert oracle.seen[0].count("Supermercado Bom Preço") == 1


def test_import_statement_file_with_bom(tmp_path: Path):
    path = tmp_path / "extrato.csv"
    path.write_text("\ufeff" + STATEMENT, encoding="utf-8")
    records = import_statement_file(path)
    assert len(records) == 3
    assert records[0].date == "2024-03-15"


def test_missing_file_is_a_read_error(tmp_path: Path):
    with pytest.raises(StatementReadError) as exc:
        import_statement_file(tmp_path / "missing.csv")
    assert isinstance(exc.value.__cause__, FileNotFoundError)


def test_undecodable_file_is_a_read_error(tmp_path: Path):
    path = tmp_path / "latin1.csv"
    path.write_bytes("date,amount,id,title\n01/03/2024,-1.00,x,Pão\n".encode("latin-1"))
    with pytest.raises(StatementReadError):
        import_statement_file(path)


def test_async_import_matches_sync(tmp_path: Path):
    path = tmp_path / "extrato.csv"
    path.write_text(STATEMENT, encoding="utf-8")
    assert asyncio.run(aimport_statement_file(path)) == import_statement_file(path)


def test_async_import_propagates_format_error(tmp_path: Path):
    path = tmp_path / "garbage.csv"
    path.write_text("date,amount,id,title\nfoo,bar,baz,qux\n", encoding="utf-8")
    with pytest.raises(UnrecognizedFormatError):
        asyncio.run(aimport_statement_file(path))


def test_records_serialize_with_persisted_field_names():
    (first, *_) = import_statement(STATEMENT)
    assert first.to_dict() == {
        "date": "2024-03-15",
        "description": "Supermercado Bom Preço",
        "amount": "45.90",
        "category": "Alimentação",
        "type": "Saída",
        "paymentMethod": "Cartão de Débito",
    }
