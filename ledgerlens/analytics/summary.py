from collections.abc import Iterable
from decimal import Decimal

from ledgerlens.analytics.models import FinancialSummary
from ledgerlens.records.models import FinancialCategory, Record

_HUNDRED = Decimal(100)


def money(value: Decimal) -> str:
    return f"${value:,.2f}"


def category_total(records: Iterable[Record], category: str) -> Decimal:
    return sum((r.amount for r in records if r.has_category(category)), Decimal(0))


def group_totals(records: Iterable[Record], key: str) -> dict[str, Decimal]:
    """Sum amounts per attribute value, case-insensitively, keeping the first spelling seen."""
    labels: dict[str, str] = {}
    totals: dict[str, Decimal] = {}
    for record in records:
        value = getattr(record, key) or ""
        folded = value.casefold()
        label = labels.setdefault(folded, value)
        totals[label] = totals.get(label, Decimal(0)) + record.amount
    return totals


def category_breakdown(records: Iterable[Record]) -> dict[str, Decimal]:
    return group_totals(records, "category")


def period_breakdown(records: Iterable[Record]) -> dict[str, Decimal]:
    totals: dict[str, Decimal] = {}
    for record in records:
        totals[record.period] = totals.get(record.period, Decimal(0)) + record.amount
    return dict(sorted(totals.items()))


def expense_breakdown(records: Iterable[Record]) -> dict[str, Decimal]:
    """Expense totals per sub-category; records without one go under ``Uncategorized``."""
    totals: dict[str, Decimal] = {}
    for record in records:
        if not record.has_category(FinancialCategory.EXPENSE):
            continue
        key = record.sub_category or "Uncategorized"
        totals[key] = totals.get(key, Decimal(0)) + record.amount
    return totals


def build_summary(
    records: list[Record],
    *,
    document_id: int | None = None,
    period: str | None = None,
) -> FinancialSummary:
    revenue = category_total(records, FinancialCategory.REVENUE)
    expenses = category_total(records, FinancialCategory.EXPENSE)
    assets = category_total(records, FinancialCategory.ASSET)
    liabilities = category_total(records, FinancialCategory.LIABILITY)
    equity = category_total(records, FinancialCategory.EQUITY)
    net_income = revenue - expenses

    return FinancialSummary(
        total_revenue=revenue,
        total_expenses=expenses,
        net_income=net_income,
        total_assets=assets,
        total_liabilities=liabilities,
        total_equity=equity,
        gross_profit=revenue,
        operating_income=net_income,
        category_breakdown=category_breakdown(records),
        key_highlights=key_highlights(
            revenue=revenue,
            expenses=expenses,
            net_income=net_income,
            assets=assets,
            liabilities=liabilities,
            equity=equity,
        ),
        record_count=len(records),
        document_id=document_id,
        period=period,
    )


def key_highlights(
    *,
    revenue: Decimal,
    expenses: Decimal,
    net_income: Decimal,
    assets: Decimal,
    liabilities: Decimal,
    equity: Decimal,
) -> list[str]:
    highlights: list[str] = []
    if revenue > 0:
        highlights.append(f"Total Revenue: {money(revenue)}")
    if net_income > 0:
        highlights.append(f"Profitable period with Net Income: {money(net_income)}")
    elif net_income < 0:
        highlights.append(f"Loss of {money(abs(net_income))} recorded")
    if revenue > 0:
        highlights.append(f"Profit Margin: {net_income / revenue * _HUNDRED:.2f}%")
    if revenue > 0 and expenses > 0:
        highlights.append(f"Expense Ratio: {expenses / revenue * _HUNDRED:.2f}%")
    if assets > 0:
        highlights.append(f"Total Assets: {money(assets)}")
    if liabilities > 0 and equity > 0:
        highlights.append(f"Debt-to-Equity Ratio: {liabilities / equity:.2f}")
    return highlights
