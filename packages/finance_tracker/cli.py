"""CLI for the ``finance_tracker`` package.

Exposes callable command handlers (``cmd_import_statement`` and friends) and a
Typer-based console interface. Environment variables (``OPENAI_API_KEY``,
``DATABASE_URL``, ``FT_ORACLE_*``) are loaded from a local ``.env`` using
``python-dotenv`` before delegating to command logic. Business logic lives in
``finance_tracker.pipeline`` and ``finance_tracker.reports``.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from typer.models import OptionInfo

from .errors import StatementImportError
from .ingest.utils import DEFAULT_PROVIDER
from .logging_setup import configure_logging
from .models import ClassifiedTransaction


def _load_records(
    csv_path: str, *, provider: str, use_oracle: bool
) -> list[ClassifiedTransaction] | None:
    """Run the import pipeline, reporting failures on stderr.

    Returns ``None`` when the import failed and a message was printed.
    """

    from .oracle import oracle_from_env
    from .pipeline import import_statement_file

    oracle = None
    if use_oracle:
        oracle = oracle_from_env()
        if oracle is None:
            print(
                "Warning: OPENAI_API_KEY is not set; categorizing with local rules only.",
                file=sys.stderr,
            )

    try:
        return import_statement_file(csv_path, provider=provider, oracle=oracle)
    except (StatementImportError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return None


def cmd_import_statement(
    csv_path: str,
    *,
    provider: str = DEFAULT_PROVIDER,
    use_oracle: bool = False,
    persist: bool = False,
    database_url: str | None = None,
    as_json: bool = False,
) -> int:
    """Import a statement export and print the classified records.

    Output is one tab-separated line per record
    (``date, description, amount, type, category, payment method``) or, with
    ``as_json``, a JSON array using the persisted field names. With
    ``persist`` the records are also bulk-inserted into the database.
    """

    records = _load_records(csv_path, provider=provider, use_oracle=use_oracle)
    if records is None:
        return 1
    if not records:
        print("Nothing to import.", file=sys.stderr)
        return 0

    if persist:
        try:
            from db.client import init_schema, session_scope

            from .persistence import bulk_insert_transactions

            init_schema(database_url=database_url)
            with session_scope(database_url=database_url) as session:
                inserted = bulk_insert_transactions(session, records)
        except Exception as e:
            print(f"Error: persistence failed: {e}", file=sys.stderr)
            return 1
        print(f"Imported {inserted} transactions.", file=sys.stderr)

    if as_json:
        print(json.dumps([r.to_dict() for r in records], ensure_ascii=False, indent=2))
        return 0

    for r in records:
        print(
            f"{r.date}\t{r.description}\t{r.amount:.2f}\t{r.type.value}\t"
            f"{r.category.value}\t{r.payment_method.value}"
        )
    return 0


def cmd_rank_expenses(
    csv_path: str,
    *,
    provider: str = DEFAULT_PROVIDER,
    month: str | None = None,
    limit: int | None = None,
) -> int:
    """Print expenses grouped by cleaned title, largest total first."""

    from .reports import rank_expenses

    records = _load_records(csv_path, provider=provider, use_oracle=False)
    if records is None:
        return 1

    ranked = rank_expenses(records, month=month)
    if limit is not None and limit > 0:
        ranked = ranked[:limit]
    for pos, item in enumerate(ranked, start=1):
        print(f"{pos}\t{item.name}\t{item.amount:.2f}\t{item.count}\t{item.category.value}")
    return 0


def cmd_summary(csv_path: str, *, provider: str = DEFAULT_PROVIDER) -> int:
    """Print income, expense, invested and balance totals."""

    from .reports import summarize

    records = _load_records(csv_path, provider=provider, use_oracle=False)
    if records is None:
        return 1

    stats = summarize(records)
    print(f"income\t{stats.total_income:.2f}")
    print(f"expense\t{stats.total_expense:.2f}")
    print(f"invested\t{stats.total_invested:.2f}")
    print(f"balance\t{stats.balance:.2f}")
    return 0


def cmd_expenses_by_category(
    csv_path: str, *, provider: str = DEFAULT_PROVIDER, month: str | None = None
) -> int:
    """Print expense totals per category, largest first."""

    from .reports import expenses_by_category

    records = _load_records(csv_path, provider=provider, use_oracle=False)
    if records is None:
        return 1

    for item in expenses_by_category(records, month=month):
        print(f"{item.category.value}\t{item.amount:.2f}")
    return 0


def cmd_monthly_trend(csv_path: str, *, provider: str = DEFAULT_PROVIDER, months: int = 6) -> int:
    """Print income and outflow per month, oldest first."""

    from .reports import monthly_trend

    records = _load_records(csv_path, provider=provider, use_oracle=False)
    if records is None:
        return 1

    for item in monthly_trend(records, months=months):
        print(f"{item.month}\t{item.income:.2f}\t{item.expense:.2f}")
    return 0


app = typer.Typer(
    add_completion=False,
    help="Import and categorize bank statement exports (Nubank CSV).",
)


# Shared by every command that reads a statement file.
CSV_PATH_OPTION: OptionInfo = typer.Option(
    ...,  # required
    "--csv-path",
    help="Path to a Nubank CSV statement export",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the handler reports missing files itself
)
# Used inside ``Annotated``: positional args are option names, the default
# comes from the parameter itself.
PROVIDER_OPTION: OptionInfo = typer.Option(
    "--provider",
    help="Export layout: nubank (header detection) or nubank_card (legacy fixed layout).",
)


@app.command("import-statement")
def import_statement_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    provider: Annotated[str, PROVIDER_OPTION] = DEFAULT_PROVIDER,
    *,
    use_oracle: bool = typer.Option(
        False, help="Consult the OpenAI categorization oracle before local rules."
    ),
    persist: bool = typer.Option(False, help="Bulk-insert the records into the database."),
    database_url: str | None = typer.Option(
        None, help="Override DATABASE_URL (falls back to env var)."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print records as a JSON array."),
) -> None:
    code = cmd_import_statement(
        str(csv_path),
        provider=provider,
        use_oracle=use_oracle,
        persist=persist,
        database_url=database_url,
        as_json=as_json,
    )
    raise typer.Exit(code)


@app.command("rank-expenses")
def rank_expenses_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    provider: Annotated[str, PROVIDER_OPTION] = DEFAULT_PROVIDER,
    *,
    month: str | None = typer.Option(None, help="Restrict to one month (YYYY-MM)."),
    limit: int | None = typer.Option(None, help="Show only the top N groups."),
) -> None:
    raise typer.Exit(cmd_rank_expenses(str(csv_path), provider=provider, month=month, limit=limit))


@app.command("summary")
def summary_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    provider: Annotated[str, PROVIDER_OPTION] = DEFAULT_PROVIDER,
) -> None:
    raise typer.Exit(cmd_summary(str(csv_path), provider=provider))


@app.command("expenses-by-category")
def expenses_by_category_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    provider: Annotated[str, PROVIDER_OPTION] = DEFAULT_PROVIDER,
    *,
    month: str | None = typer.Option(None, help="Restrict to one month (YYYY-MM)."),
) -> None:
    raise typer.Exit(cmd_expenses_by_category(str(csv_path), provider=provider, month=month))


@app.command("monthly-trend")
def monthly_trend_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    provider: Annotated[str, PROVIDER_OPTION] = DEFAULT_PROVIDER,
    *,
    months: int = typer.Option(6, help="Number of most recent months to show."),
) -> None:
    raise typer.Exit(cmd_monthly_trend(str(csv_path), provider=provider, months=months))


@app.callback(invoke_without_command=True)
def _root(ctx: typer.Context) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding
    already-set environment variables) and configures package logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()

    if ctx.invoked_subcommand is None:
        typer.echo("No subcommand provided. Use --help to see available commands.")
        raise typer.Exit(1)


if __name__ == "__main__":  # pragma: no cover
    app()
