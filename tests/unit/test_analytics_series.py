from decimal import Decimal

import pytest

from ledgerlens.analytics.exceptions import AnalyticsPreconditionError
from ledgerlens.analytics.series import (
    category_series,
    growth_rate,
    net_income_series,
    period_comparisons,
)
from tests.conftest import make_record

D = Decimal

HISTORY = [
    make_record(100, "Revenue", "2024-01"),
    make_record(40, "Expense", "2024-01"),
    make_record(150, "revenue", "2024-02"),
    make_record(40, "Expense", "2024-02"),
    make_record(200, "Revenue", "2024-03"),
    make_record(500, "Asset", "2024-04"),
]


class TestCategorySeries:
    def test_totals_and_statistics(self) -> None:
        result = category_series(HISTORY, "Revenue")

        assert result.title == "Revenue Trend"
        assert [(p.period, p.value) for p in result.data_points] == [
            ("2024-01", D(100)),
            ("2024-02", D(150)),
            ("2024-03", D(200)),
        ]
        assert result.growth_rate == D(100)
        assert result.average == D(150)
        assert (result.minimum, result.maximum) == (D(100), D(200))

    def test_stops_at_until_period(self) -> None:
        result = category_series(HISTORY, "Revenue", until="2024-02")
        assert [p.period for p in result.data_points] == ["2024-01", "2024-02"]

    def test_keeps_latest_periods(self) -> None:
        result = category_series(HISTORY, "Revenue", limit=2)
        assert [p.period for p in result.data_points] == ["2024-02", "2024-03"]

    def test_no_matching_records(self) -> None:
        result = category_series(HISTORY, "Liability")
        assert result.data_points == []
        assert result.growth_rate == D(0)

    def test_limit_must_be_positive(self) -> None:
        with pytest.raises(AnalyticsPreconditionError):
            category_series(HISTORY, "Revenue", limit=0)


class TestNetIncomeSeries:
    def test_revenue_minus_expenses_per_period(self) -> None:
        result = net_income_series(HISTORY, until="2024-03")
        assert [p.value for p in result.data_points] == [D(60), D(110), D(200)]
        assert result.title == "Net Income Trend"

    def test_periods_without_income_lines_count_as_zero(self) -> None:
        result = net_income_series(HISTORY)
        assert result.data_points[-1].period == "2024-04"
        assert result.data_points[-1].value == D(0)
        assert result.minimum == D(0)


class TestPeriodComparisons:
    def test_period_over_period_net_income(self) -> None:
        first, second = period_comparisons(HISTORY, until="2024-03")

        assert (first.previous_period, first.current_period) == ("2024-01", "2024-02")
        assert first.change == D(50)
        assert first.change_percentage == D(50) / D(60) * 100
        assert first.is_improvement
        assert second.change == D(90)

    def test_decline_is_not_improvement(self) -> None:
        [last] = period_comparisons(HISTORY)[-1:]
        assert last.change == D(-200)
        assert not last.is_improvement

    def test_single_period_has_no_comparisons(self) -> None:
        assert period_comparisons(HISTORY, until="2024-01") == []


class TestGrowthRate:
    @pytest.mark.parametrize(
        ("values", "expected"),
        [
            ([D(50), D(75)], D(50)),
            ([D(0), D(75)], D(0)),
            ([D(10)], D(0)),
        ],
    )
    def test_first_to_last(self, values: list[Decimal], expected: Decimal) -> None:
        assert growth_rate(values) == expected
