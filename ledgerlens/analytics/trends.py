from collections.abc import Mapping
from decimal import Decimal

from ledgerlens.analytics.models import TrendAnalysis, TrendDataPoint, TrendDirection

_HUNDRED = Decimal(100)


def percent_change(previous: Decimal, current: Decimal) -> Decimal | None:
    if previous == 0:
        return None
    return (current - previous) / previous * _HUNDRED


def trend_points(period_totals: Mapping[str, Decimal]) -> list[TrendDataPoint]:
    """Order totals by period label and attach period-over-period change."""
    points: list[TrendDataPoint] = []
    previous: Decimal | None = None
    for period in sorted(period_totals):
        value = period_totals[period]
        change = percent_change(previous, value) if previous is not None else None
        points.append(TrendDataPoint(period=period, value=value, percentage_change=change))
        previous = value
    return points


def _mean(values: list[Decimal]) -> Decimal:
    return sum(values, Decimal(0)) / len(values)


def trend_direction(
    points: list[TrendDataPoint],
    stable_percent: Decimal = Decimal(5),
) -> TrendDirection:
    if len(points) < 2:
        return TrendDirection.INSUFFICIENT_DATA
    changes = [p.percentage_change for p in points if p.percentage_change is not None]
    if not changes:
        return TrendDirection.STABLE
    average = _mean(changes)
    if average > stable_percent:
        return TrendDirection.INCREASING
    if average < -stable_percent:
        return TrendDirection.DECREASING
    return TrendDirection.STABLE


def analyze_trend(
    period_totals: Mapping[str, Decimal],
    *,
    metric: str = "Overall",
    stable_percent: Decimal = Decimal(5),
    volatility_percent: Decimal = Decimal(20),
) -> TrendAnalysis:
    points = trend_points(period_totals)
    changes = [p.percentage_change for p in points if p.percentage_change is not None]
    average_growth = _mean(changes) if changes else Decimal(0)

    if points:
        first, last = points[0].value, points[-1].value
        total_change = last - first
        overall_change = percent_change(first, last) or Decimal(0)
        start_period, end_period = points[0].period, points[-1].period
    else:
        total_change = overall_change = Decimal(0)
        start_period = end_period = None

    direction = trend_direction(points, stable_percent)
    insights = [
        f"Overall trend is {direction.value.lower()} with average growth rate of "
        f"{average_growth:.2f}%"
    ]
    if overall_change > 0:
        insights.append(
            f"Total increase of {overall_change:.2f}% from {start_period} to {end_period}"
        )
    elif overall_change < 0:
        insights.append(
            f"Total decrease of {abs(overall_change):.2f}% from {start_period} to {end_period}"
        )
    if changes:
        volatility = _mean([abs(change) for change in changes])
        if volatility > volatility_percent:
            insights.append(
                f"High volatility detected with average absolute change of {volatility:.2f}%"
            )

    return TrendAnalysis(
        metric=metric,
        direction=direction,
        data_points=points,
        average_growth_rate=average_growth,
        total_change=total_change,
        percentage_change=overall_change,
        start_period=start_period,
        end_period=end_period,
        insights=insights,
    )
