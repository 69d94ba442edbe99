from dataclasses import dataclass, field
from decimal import Decimal
from enum import StrEnum

RatioSet = dict[str, Decimal]


class TrendDirection(StrEnum):
    INCREASING = "Increasing"
    DECREASING = "Decreasing"
    STABLE = "Stable"
    INSUFFICIENT_DATA = "Insufficient Data"


class ChangeType(StrEnum):
    INCREASE = "Increase"
    DECREASE = "Decrease"
    NO_CHANGE = "NoChange"


class OverallTrend(StrEnum):
    GROWTH = "Growth"
    DECLINE = "Decline"
    STABLE = "Stable"


class Severity(StrEnum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


@dataclass(frozen=True)
class FinancialSummary:
    total_revenue: Decimal
    total_expenses: Decimal
    net_income: Decimal
    total_assets: Decimal
    total_liabilities: Decimal
    total_equity: Decimal
    gross_profit: Decimal
    operating_income: Decimal
    category_breakdown: dict[str, Decimal]
    key_highlights: list[str]
    record_count: int
    document_id: int | None = None
    period: str | None = None


@dataclass(frozen=True)
class TrendDataPoint:
    period: str
    value: Decimal
    percentage_change: Decimal | None = None


@dataclass(frozen=True)
class TrendAnalysis:
    metric: str
    direction: TrendDirection
    data_points: list[TrendDataPoint]
    average_growth_rate: Decimal
    total_change: Decimal
    percentage_change: Decimal
    start_period: str | None = None
    end_period: str | None = None
    insights: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ComparisonMetric:
    category: str
    value1: Decimal
    value2: Decimal
    variance: Decimal
    percentage_change: Decimal
    change_type: ChangeType


@dataclass(frozen=True)
class ComparisonResult:
    period1: str
    period2: str
    metrics: dict[str, ComparisonMetric]
    significant_changes: list[str]
    overall_trend: OverallTrend


@dataclass(frozen=True)
class ForecastDataPoint:
    period: str
    predicted_value: Decimal
    lower_bound: Decimal
    upper_bound: Decimal


@dataclass(frozen=True)
class ForecastResult:
    category: str
    method: str
    confidence_level: Decimal
    data_points: list[ForecastDataPoint]
    assumptions: list[str] = field(default_factory=list)
    risk_factors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class Anomaly:
    account_name: str
    category: str
    period: str
    amount: Decimal
    expected_value: Decimal
    deviation: Decimal
    deviation_percentage: Decimal
    standard_deviations: Decimal
    severity: Severity
    reason: str
    record_id: int | None = None


@dataclass(frozen=True)
class MetricSeries:
    """Per-period totals of one metric, with first-to-last growth and range."""

    title: str
    metric: str
    data_points: list[TrendDataPoint]
    growth_rate: Decimal = Decimal(0)
    average: Decimal = Decimal(0)
    minimum: Decimal = Decimal(0)
    maximum: Decimal = Decimal(0)


@dataclass(frozen=True)
class PeriodComparison:
    current_period: str
    previous_period: str
    current_value: Decimal
    previous_value: Decimal
    change: Decimal
    change_percentage: Decimal
    is_improvement: bool
