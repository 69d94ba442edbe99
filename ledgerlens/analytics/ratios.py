"""Financial ratios over a set of records.

A ratio is only present in the result when its denominator is positive;
callers must treat a missing key as "not computable", never as zero.
"""

from decimal import Decimal

from ledgerlens.analytics.models import RatioSet
from ledgerlens.analytics.summary import category_total
from ledgerlens.records.models import FinancialCategory, Record

_HUNDRED = Decimal(100)


def _totals(records: list[Record]) -> tuple[Decimal, Decimal, Decimal, Decimal, Decimal]:
    return (
        category_total(records, FinancialCategory.REVENUE),
        category_total(records, FinancialCategory.EXPENSE),
        category_total(records, FinancialCategory.ASSET),
        category_total(records, FinancialCategory.LIABILITY),
        category_total(records, FinancialCategory.EQUITY),
    )


def profitability_ratios(records: list[Record]) -> RatioSet:
    revenue, expenses, assets, _liabilities, equity = _totals(records)
    net_income = revenue - expenses
    ratios: RatioSet = {}
    if revenue > 0:
        ratios["GrossProfitMargin"] = revenue / revenue * _HUNDRED
        ratios["NetProfitMargin"] = net_income / revenue * _HUNDRED
        ratios["OperatingProfitMargin"] = net_income / revenue * _HUNDRED
    if assets > 0:
        ratios["ReturnOnAssets"] = net_income / assets * _HUNDRED
    if equity > 0:
        ratios["ReturnOnEquity"] = net_income / equity * _HUNDRED
    return ratios


def liquidity_ratios(records: list[Record]) -> RatioSet:
    _revenue, _expenses, assets, liabilities, equity = _totals(records)
    ratios: RatioSet = {}
    if liabilities > 0:
        ratios["CurrentRatio"] = assets / liabilities
    if liabilities > 0 and equity > 0:
        ratios["DebtToEquity"] = liabilities / equity
    if assets > 0:
        ratios["DebtToAssets"] = liabilities / assets * _HUNDRED
        ratios["EquityRatio"] = equity / assets * _HUNDRED
    return ratios


def efficiency_ratios(records: list[Record]) -> RatioSet:
    revenue, expenses, assets, _liabilities, _equity = _totals(records)
    ratios: RatioSet = {}
    if assets > 0:
        ratios["AssetTurnover"] = revenue / assets
    if revenue > 0:
        ratios["OperatingExpenseRatio"] = expenses / revenue * _HUNDRED
    return ratios


def financial_ratios(records: list[Record]) -> RatioSet:
    return {
        **profitability_ratios(records),
        **liquidity_ratios(records),
        **efficiency_ratios(records),
    }
