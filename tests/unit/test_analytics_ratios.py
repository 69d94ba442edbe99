from decimal import Decimal

import pytest

from ledgerlens.analytics.ratios import (
    efficiency_ratios,
    financial_ratios,
    liquidity_ratios,
    profitability_ratios,
)
from tests.conftest import make_record


def _full_set():
    return [
        make_record(200, "Revenue"),
        make_record(150, "Expense"),
        make_record(1000, "Asset"),
        make_record(400, "Liability"),
        make_record(500, "Equity"),
    ]


class TestRatios:
    def test_profitability(self) -> None:
        ratios = profitability_ratios(_full_set())
        assert ratios["GrossProfitMargin"] == Decimal(100)
        assert ratios["NetProfitMargin"] == Decimal(25)
        assert ratios["OperatingProfitMargin"] == Decimal(25)
        assert ratios["ReturnOnAssets"] == Decimal(5)
        assert ratios["ReturnOnEquity"] == Decimal(10)

    def test_liquidity(self) -> None:
        ratios = liquidity_ratios(_full_set())
        assert ratios["CurrentRatio"] == Decimal("2.5")
        assert ratios["DebtToEquity"] == Decimal("0.8")
        assert ratios["DebtToAssets"] == Decimal(40)
        assert ratios["EquityRatio"] == Decimal(50)

    def test_efficiency(self) -> None:
        ratios = efficiency_ratios(_full_set())
        assert ratios["AssetTurnover"] == Decimal("0.2")
        assert ratios["OperatingExpenseRatio"] == Decimal(75)

    def test_all_ratios_merge_groups(self) -> None:
        assert len(financial_ratios(_full_set())) == 11

    @pytest.mark.parametrize(
        ("records", "absent"),
        [
            ([make_record(10, "Expense")], {"NetProfitMargin", "GrossProfitMargin", "OperatingExpenseRatio"}),
            ([make_record(10, "Revenue")], {"ReturnOnAssets", "AssetTurnover", "EquityRatio"}),
            ([make_record(10, "Asset"), make_record(5, "Equity")], {"CurrentRatio", "DebtToEquity"}),
            ([make_record(10, "Asset"), make_record(5, "Liability")], {"DebtToEquity", "ReturnOnEquity"}),
        ],
    )
    def test_zero_denominator_omits_key(self, records, absent: set[str]) -> None:
        assert absent.isdisjoint(financial_ratios(records))

    def test_negative_equity_omits_equity_ratios(self) -> None:
        ratios = financial_ratios([make_record(10, "Liability"), make_record(-5, "Equity")])
        assert "DebtToEquity" not in ratios
        assert "ReturnOnEquity" not in ratios
