from decimal import Decimal

import pytest

from ledgerlens.analytics.comparison import compare_metric, compare_records, dominant_period
from ledgerlens.analytics.exceptions import AnalyticsPreconditionError
from ledgerlens.analytics.models import ChangeType, OverallTrend
from tests.conftest import make_record


class TestCompareRecords:
    def test_per_category_metrics(self) -> None:
        q1 = [make_record(100, "Revenue", "Q1"), make_record(50, "Expense", "Q1")]
        q2 = [make_record(130, "revenue", "Q2"), make_record(52, "Expense", "Q2")]

        result = compare_records("Q1", q1, "Q2", q2)

        revenue = result.metrics["Revenue"]
        assert revenue.value1 == Decimal(100)
        assert revenue.value2 == Decimal(130)
        assert revenue.variance == Decimal(30)
        assert revenue.percentage_change == Decimal(30)
        assert revenue.change_type is ChangeType.INCREASE
        assert result.significant_changes == ["Revenue: 30.00% change (Increase)"]
        assert result.overall_trend is OverallTrend.GROWTH

    def test_category_only_in_second_period(self) -> None:
        result = compare_records(
            "Q1", [make_record(10, "Revenue")], "Q2", [make_record(10, "Revenue"), make_record(5, "Asset")]
        )
        asset = result.metrics["Asset"]
        assert asset.value1 == Decimal(0)
        assert asset.percentage_change == Decimal(0)
        assert asset.change_type is ChangeType.INCREASE

    def test_decline_and_stable(self) -> None:
        down = compare_records("a", [make_record(10)], "b", [make_record(5)])
        assert down.overall_trend is OverallTrend.DECLINE
        same = compare_records("a", [make_record(10)], "b", [make_record(10)])
        assert same.overall_trend is OverallTrend.STABLE
        assert same.metrics["Revenue"].change_type is ChangeType.NO_CHANGE

    def test_ten_percent_is_not_significant(self) -> None:
        result = compare_records("a", [make_record(100)], "b", [make_record(110)])
        assert result.significant_changes == []

    @pytest.mark.parametrize("empty_side", ["first", "second"])
    def test_empty_period_raises(self, empty_side: str) -> None:
        records = [make_record(1)]
        first, second = ([], records) if empty_side == "first" else (records, [])
        with pytest.raises(AnalyticsPreconditionError, match="Insufficient data for comparison"):
            compare_records("a", first, "b", second)


class TestCompareMetric:
    def test_decrease(self) -> None:
        metric = compare_metric("Expense", Decimal(200), Decimal(150))
        assert metric.percentage_change == Decimal(-25)
        assert metric.change_type is ChangeType.DECREASE


class TestDominantPeriod:
    def test_most_frequent_period(self) -> None:
        records = [make_record(1, period="Q1"), make_record(1, period="Q2"), make_record(1, period="Q2")]
        assert dominant_period(records) == "Q2"

    def test_tie_goes_to_first_seen(self) -> None:
        records = [make_record(1, period="Q3"), make_record(1, period="Q1")]
        assert dominant_period(records) == "Q3"

    def test_empty(self) -> None:
        assert dominant_period([]) is None
