from collections.abc import Sequence
from decimal import Decimal

from ledgerlens.analytics.exceptions import AnalyticsPreconditionError
from ledgerlens.analytics.models import ForecastDataPoint, ForecastResult

LINEAR_ASSUMPTIONS = [
    "Based on linear trend analysis of historical data",
    "Assumes consistent market conditions",
]
LINEAR_RISK_FACTORS = [
    "Market volatility could impact actual values",
    "External economic factors not considered",
]


def linear_projection(history: Sequence[Decimal], periods_ahead: int) -> list[Decimal]:
    """Least-squares line over x = 1..n, extended to x = n+1..n+periods_ahead.

    Projections are floored at zero.
    """
    n = len(history)
    xs = [Decimal(x) for x in range(1, n + 1)]
    sum_x = sum(xs, Decimal(0))
    sum_y = sum(history, Decimal(0))
    sum_xy = sum((x * y for x, y in zip(xs, history)), Decimal(0))
    sum_x2 = sum((x * x for x in xs), Decimal(0))

    denominator = n * sum_x2 - sum_x * sum_x
    slope = (n * sum_xy - sum_x * sum_y) / denominator if denominator != 0 else Decimal(0)
    intercept = (sum_y - slope * sum_x) / n

    return [
        max(Decimal(0), slope * Decimal(n + step) + intercept)
        for step in range(1, periods_ahead + 1)
    ]


def _check_inputs(history: Sequence[Decimal], periods_ahead: int, min_points: int) -> None:
    if periods_ahead < 1:
        raise AnalyticsPreconditionError("periods_ahead must be at least 1")
    if len(history) < min_points:
        raise AnalyticsPreconditionError(
            f"Insufficient historical data for forecasting (need at least {min_points} periods)"
        )


def _with_band(label: str, value: Decimal, margin_ratio: Decimal) -> ForecastDataPoint:
    margin = value * margin_ratio
    return ForecastDataPoint(
        period=label,
        predicted_value=value,
        lower_bound=value - margin,
        upper_bound=value + margin,
    )


def category_forecast(
    category: str,
    period_totals: list[tuple[str, Decimal]],
    periods_ahead: int,
    *,
    min_points: int = 3,
    last_period: str | None = None,
) -> ForecastResult:
    """Forecast a category from its per-period totals, ordered by period.

    Forecast points are labelled after ``last_period``, which defaults to the
    last period of the series.
    """
    history = [value for _period, value in period_totals]
    _check_inputs(history, periods_ahead, min_points)
    if last_period is None:
        last_period = period_totals[-1][0]
    projection = linear_projection(history, periods_ahead)
    return ForecastResult(
        category=category,
        method="Linear Regression",
        confidence_level=Decimal(70),
        data_points=[
            _with_band(f"{last_period}+{step}", value, Decimal("0.10"))
            for step, value in enumerate(projection, start=1)
        ],
        assumptions=list(LINEAR_ASSUMPTIONS),
        risk_factors=list(LINEAR_RISK_FACTORS),
    )


def simple_forecast(
    values: Sequence[Decimal],
    periods_ahead: int,
    *,
    min_points: int = 3,
) -> ForecastResult:
    history = list(values)
    _check_inputs(history, periods_ahead, min_points)
    projection = linear_projection(history, periods_ahead)
    return ForecastResult(
        category="General",
        method="Simple Linear Forecast",
        confidence_level=Decimal(65),
        data_points=[
            _with_band(f"Period {step}", value, Decimal("0.15"))
            for step, value in enumerate(projection, start=1)
        ],
    )


def moving_average(values: Sequence[Decimal], window: int) -> list[Decimal]:
    """Trailing averages over ``window`` values; empty when there are fewer values."""
    if window < 1:
        raise AnalyticsPreconditionError("Moving average window must be at least 1")
    series = list(values)
    return [
        sum(series[end - window + 1 : end + 1], Decimal(0)) / window
        for end in range(window - 1, len(series))
    ]
