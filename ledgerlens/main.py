"""Command line entry point.

Usage:
    ledgerlens init-db
    ledgerlens ingest statements/q1.xlsx
    ledgerlens summary 12
    ledgerlens compare 2024-Q1 2024-Q2
    ledgerlens forecast Revenue --periods 3
    ledgerlens history 12 --metric revenue
"""

import dataclasses
import json
from collections.abc import Generator
from contextlib import contextmanager
from decimal import Decimal
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from ledgerlens.analytics.exceptions import AnalyticsError
from ledgerlens.analytics.service import FinancialAnalyticsService, build_analytics_service
from ledgerlens.config.settings import Settings
from ledgerlens.database.connection import apply_schema, close_pool, init_pool
from ledgerlens.database.exceptions import RepositoryError
from ledgerlens.ingestion.orchestrator import build_orchestrator
from ledgerlens.logging.logger import Log

app = typer.Typer(
    name="ledgerlens",
    help="Ingest financial documents and analyze the extracted ledger records.",
    no_args_is_help=True,
)

console = Console()

_DOCUMENT_ID = typer.Argument(..., help="Document id returned by ingest")


@contextmanager
def _runtime() -> Generator[Settings, None, None]:
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)
    try:
        yield settings
    finally:
        close_pool()


def _to_jsonable(value: object) -> object:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return _to_jsonable(dataclasses.asdict(value))
    if isinstance(value, dict):
        return {str(key): _to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(item) for item in value]
    if isinstance(value, Decimal):
        return str(value)
    return value


def _print(value: object) -> None:
    console.print_json(json.dumps(_to_jsonable(value), default=str))


@contextmanager
def _analytics() -> Generator[FinancialAnalyticsService, None, None]:
    with _runtime() as settings:
        try:
            yield build_analytics_service(settings)
        except (AnalyticsError, RepositoryError) as exc:
            console.print(f"[bold red]Error:[/] {exc}")
            raise typer.Exit(code=1) from exc


@app.command("init-db")
def init_db() -> None:
    """Create the document and record tables."""
    with _runtime():
        apply_schema()
    console.print("[bold green]Schema applied[/]")


@app.command()
def ingest(
    path: Annotated[Path, typer.Argument(..., help="File to ingest")],
    file_format: str | None = typer.Option(
        None, "--format", "-f", help="Override format detection (excel, csv, pdf)",
    ),
) -> None:
    """Extract records from a file and store them."""
    with _runtime() as settings:
        orchestrator = build_orchestrator(settings)
        with path.open("rb") as stream:
            result = orchestrator.ingest(stream, path.name, declared_format=file_format)

    _print(result)
    if not result.success:
        raise typer.Exit(code=1)


@app.command()
def summary(
    document_id: Annotated[int | None, typer.Argument(help="Document id")] = None,
    period: str | None = typer.Option(None, "--period", "-p", help="Summarize a period instead"),
) -> None:
    """Financial summary of a document or a period."""
    if document_id is None and period is None:
        raise typer.BadParameter("Pass a document id or --period")
    with _analytics() as service:
        if period is not None:
            _print(service.get_financial_summary_by_period(period))
        else:
            _print(service.get_financial_summary(document_id))


@app.command()
def ratios(document_id: Annotated[int, _DOCUMENT_ID]) -> None:
    """Profitability, liquidity and efficiency ratios of a document."""
    with _analytics() as service:
        _print(service.calculate_financial_ratios(document_id))


@app.command()
def trends(
    periods: list[str] = typer.Option([], "--period", "-p", help="Period label, repeatable"),
    documents: list[int] = typer.Option([], "--document", "-d", help="Document id, repeatable"),
) -> None:
    """Trend of totals across periods or documents."""
    if not periods and not documents:
        raise typer.BadParameter("Pass at least one --period or --document")
    with _analytics() as service:
        if documents:
            _print(service.analyze_trends(documents))
        else:
            _print(service.analyze_trends_by_period(periods))


_HISTORY_METRICS = ("revenue", "expenses", "net-income", "changes")


@app.command()
def history(
    document_id: Annotated[int, _DOCUMENT_ID],
    metric: str = typer.Option(
        "net-income", "--metric", "-m", help="revenue, expenses, net-income or changes"
    ),
    periods: int = typer.Option(12, "--periods", "-n", help="Latest periods to include"),
) -> None:
    """Per-period history leading up to a document's period."""
    if metric not in _HISTORY_METRICS:
        raise typer.BadParameter(f"--metric must be one of {', '.join(_HISTORY_METRICS)}")
    with _analytics() as service:
        match metric:
            case "revenue":
                _print(service.get_revenue_trend(document_id, periods))
            case "expenses":
                _print(service.get_expense_trend(document_id, periods))
            case "net-income":
                _print(service.get_net_income_trend(document_id, periods))
            case _:
                _print(service.get_period_comparisons(document_id))


@app.command()
def compare(
    first: str = typer.Argument(..., help="First period (or document id with --documents)"),
    second: str = typer.Argument(..., help="Second period (or document id with --documents)"),
    documents: bool = typer.Option(False, "--documents", help="Compare two documents"),
) -> None:
    """Per-category comparison of two periods or two documents."""
    with _analytics() as service:
        if documents:
            _print(service.compare_documents(int(first), int(second)))
        else:
            _print(service.compare_periods(first, second))


@app.command()
def forecast(
    category: str = typer.Argument(..., help="Category to forecast, e.g. Revenue"),
    periods: int = typer.Option(3, "--periods", "-n", help="Periods ahead"),
) -> None:
    """Linear forecast of a category's per-period totals."""
    with _analytics() as service:
        _print(service.generate_forecast(category, periods))


@app.command()
def anomalies(document_id: Annotated[int, _DOCUMENT_ID]) -> None:
    """Records that sit far outside their category's distribution."""
    with _analytics() as service:
        _print(service.detect_anomalies(document_id))


if __name__ == "__main__":
    app()
