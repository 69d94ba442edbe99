"""Per-period time series of revenue, expenses and net income.

Series stop at an ``until`` period label (inclusive, compared as strings) and
keep only the latest ``limit`` periods, so a document can be viewed against
the history that led up to it.
"""

from collections.abc import Callable, Iterable
from decimal import Decimal

from ledgerlens.analytics.exceptions import AnalyticsPreconditionError
from ledgerlens.analytics.models import MetricSeries, PeriodComparison, TrendDataPoint
from ledgerlens.analytics.summary import category_total
from ledgerlens.records.models import FinancialCategory, Record

_HUNDRED = Decimal(100)


def _by_period(records: Iterable[Record], until: str | None) -> dict[str, list[Record]]:
    periods: dict[str, list[Record]] = {}
    for record in records:
        if until is not None and record.period > until:
            continue
        periods.setdefault(record.period, []).append(record)
    return dict(sorted(periods.items()))


def net_income(records: list[Record]) -> Decimal:
    return category_total(records, FinancialCategory.REVENUE) - category_total(
        records, FinancialCategory.EXPENSE
    )


def growth_rate(values: list[Decimal]) -> Decimal:
    """First-to-last percentage change; 0 for fewer than two values or a zero start."""
    if len(values) < 2 or values[0] == 0:
        return Decimal(0)
    return (values[-1] - values[0]) / values[0] * _HUNDRED


def build_series(
    records: Iterable[Record],
    *,
    title: str,
    metric: str,
    value: Callable[[list[Record]], Decimal],
    until: str | None = None,
    limit: int = 12,
) -> MetricSeries:
    if limit < 1:
        raise AnalyticsPreconditionError("Series length must be at least 1")
    periods = list(_by_period(records, until).items())[-limit:]
    points = [TrendDataPoint(period=period, value=value(group)) for period, group in periods]
    if not points:
        return MetricSeries(title=title, metric=metric, data_points=[])
    values = [point.value for point in points]
    return MetricSeries(
        title=title,
        metric=metric,
        data_points=points,
        growth_rate=growth_rate(values),
        average=sum(values, Decimal(0)) / len(values),
        minimum=min(values),
        maximum=max(values),
    )


def category_series(
    records: Iterable[Record],
    category: str,
    *,
    until: str | None = None,
    limit: int = 12,
) -> MetricSeries:
    """Totals of one category per period; periods without that category are left out."""
    matching = [record for record in records if record.has_category(category)]
    return build_series(
        matching,
        title=f"{category} Trend",
        metric=category,
        value=lambda group: sum((r.amount for r in group), Decimal(0)),
        until=until,
        limit=limit,
    )


def net_income_series(
    records: Iterable[Record],
    *,
    until: str | None = None,
    limit: int = 12,
) -> MetricSeries:
    return build_series(
        records,
        title="Net Income Trend",
        metric="Net Income",
        value=net_income,
        until=until,
        limit=limit,
    )


def period_comparisons(
    records: Iterable[Record],
    *,
    until: str | None = None,
) -> list[PeriodComparison]:
    """Net income of each period against the period before it."""
    totals = [(period, net_income(group)) for period, group in _by_period(records, until).items()]
    comparisons: list[PeriodComparison] = []
    for (previous_period, previous), (current_period, current) in zip(totals, totals[1:]):
        change = current - previous
        comparisons.append(
            PeriodComparison(
                current_period=current_period,
                previous_period=previous_period,
                current_value=current,
                previous_value=previous,
                change=change,
                change_percentage=change / previous * _HUNDRED if previous != 0 else Decimal(0),
                is_improvement=change > 0,
            )
        )
    return comparisons
