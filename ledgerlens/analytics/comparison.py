from decimal import Decimal

from ledgerlens.analytics.exceptions import AnalyticsPreconditionError
from ledgerlens.analytics.models import ChangeType, ComparisonMetric, ComparisonResult, OverallTrend
from ledgerlens.analytics.summary import group_totals
from ledgerlens.records.models import Record

_HUNDRED = Decimal(100)


def change_type(variance: Decimal) -> ChangeType:
    if variance > 0:
        return ChangeType.INCREASE
    if variance < 0:
        return ChangeType.DECREASE
    return ChangeType.NO_CHANGE


def compare_metric(category: str, value1: Decimal, value2: Decimal) -> ComparisonMetric:
    variance = value2 - value1
    return ComparisonMetric(
        category=category,
        value1=value1,
        value2=value2,
        variance=variance,
        percentage_change=variance / value1 * _HUNDRED if value1 != 0 else Decimal(0),
        change_type=change_type(variance),
    )


def compare_records(
    period1: str,
    records1: list[Record],
    period2: str,
    records2: list[Record],
    *,
    significant_percent: Decimal = Decimal(10),
) -> ComparisonResult:
    """Per-category comparison of two record sets.

    Categories are matched case-insensitively and reported under the first
    spelling seen, scanning ``records1`` before ``records2``.

    Raises:
        AnalyticsPreconditionError: if either side has no records.
    """
    if not records1 or not records2:
        raise AnalyticsPreconditionError("Insufficient data for comparison")

    labels: dict[str, str] = {}
    for record in [*records1, *records2]:
        labels.setdefault(record.category.casefold(), record.category)
    totals1 = {key.casefold(): value for key, value in group_totals(records1, "category").items()}
    totals2 = {key.casefold(): value for key, value in group_totals(records2, "category").items()}

    metrics: dict[str, ComparisonMetric] = {}
    significant: list[str] = []
    for folded, label in labels.items():
        metric = compare_metric(
            label, totals1.get(folded, Decimal(0)), totals2.get(folded, Decimal(0))
        )
        metrics[label] = metric
        if abs(metric.percentage_change) > significant_percent:
            significant.append(
                f"{label}: {metric.percentage_change:.2f}% change ({metric.change_type.value})"
            )

    total1 = sum((r.amount for r in records1), Decimal(0))
    total2 = sum((r.amount for r in records2), Decimal(0))
    if total2 > total1:
        overall = OverallTrend.GROWTH
    elif total2 < total1:
        overall = OverallTrend.DECLINE
    else:
        overall = OverallTrend.STABLE

    return ComparisonResult(
        period1=period1,
        period2=period2,
        metrics=metrics,
        significant_changes=significant,
        overall_trend=overall,
    )


def dominant_period(records: list[Record]) -> str | None:
    """Most frequent period label; the earliest-seen label wins ties."""
    counts: dict[str, int] = {}
    for record in records:
        counts[record.period] = counts.get(record.period, 0) + 1
    if not counts:
        return None
    return max(counts, key=lambda period: counts[period])
