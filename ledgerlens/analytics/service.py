from decimal import Decimal

from ledgerlens.analytics import (
    anomalies,
    comparison,
    forecast,
    ratios,
    series,
    summary,
    trends,
)
from ledgerlens.analytics.exceptions import AnalyticsPreconditionError
from ledgerlens.analytics.models import (
    Anomaly,
    ComparisonResult,
    FinancialSummary,
    ForecastResult,
    MetricSeries,
    PeriodComparison,
    RatioSet,
    TrendAnalysis,
    TrendDataPoint,
)
from ledgerlens.config.settings import AnalyticsConfig, Settings
from ledgerlens.database.repositories.documents_repository import DocumentsRepository
from ledgerlens.logging.logger import Log
from ledgerlens.records.models import FinancialCategory, Record


def _decimal(value: float) -> Decimal:
    return Decimal(str(value))


class FinancialAnalyticsService:
    """On-demand analytics over persisted records. Nothing is cached."""

    def __init__(self, repo: DocumentsRepository, config: AnalyticsConfig | None = None) -> None:
        self._repo = repo
        self._config = config if config is not None else AnalyticsConfig()
        self._thresholds = anomalies.Thresholds(
            flag=_decimal(self._config.anomaly_std_threshold),
            medium=_decimal(self._config.anomaly_medium_std),
            high=_decimal(self._config.anomaly_high_std),
        )

    # Summaries

    def get_financial_summary(self, document_id: int) -> FinancialSummary:
        records = self._document_records(document_id)
        Log.info(f"Building summary for document {document_id} from {len(records)} records")
        return summary.build_summary(records, document_id=document_id)

    def get_financial_summary_by_period(self, period: str) -> FinancialSummary:
        records = self._repo.get_records_by_period(period)
        if not records:
            raise AnalyticsPreconditionError(f"No financial data found for period {period}")
        return summary.build_summary(records, period=period)

    def get_category_summary(self, document_id: int) -> dict[str, Decimal]:
        return summary.category_breakdown(self._document_records(document_id))

    def get_period_summary(self, document_id: int) -> dict[str, Decimal]:
        return summary.period_breakdown(self._document_records(document_id))

    def get_expense_breakdown(self, document_id: int) -> dict[str, Decimal]:
        return summary.expense_breakdown(self._document_records(document_id))

    # Ratios

    def calculate_financial_ratios(self, document_id: int) -> RatioSet:
        return ratios.financial_ratios(self._document_records(document_id))

    def calculate_profitability_ratios(self, document_id: int) -> RatioSet:
        return ratios.profitability_ratios(self._document_records(document_id))

    def calculate_liquidity_ratios(self, document_id: int) -> RatioSet:
        return ratios.liquidity_ratios(self._document_records(document_id))

    def calculate_efficiency_ratios(self, document_id: int) -> RatioSet:
        return ratios.efficiency_ratios(self._document_records(document_id))

    # Trends

    def analyze_trends_by_period(self, periods: list[str]) -> TrendAnalysis:
        """Trend of record totals over the requested periods that hold data.

        Raises:
            AnalyticsPreconditionError: if none of the periods has records.
        """
        records = [
            record for period in periods for record in self._repo.get_records_by_period(period)
        ]
        if not records:
            raise AnalyticsPreconditionError("No data found for specified periods")
        return self._trend(summary.period_breakdown(records), metric="Overall")

    def analyze_trends(self, document_ids: list[int]) -> TrendAnalysis:
        """Trend across documents, each reduced to its dominant period."""
        totals: dict[str, Decimal] = {}
        for document_id in document_ids:
            records = self._repo.get_document_with_records(document_id).records
            period = comparison.dominant_period(records)
            if period is None:
                Log.warning(f"Document {document_id} has no records, skipped in trend")
                continue
            totals[period] = totals.get(period, Decimal(0)) + sum(
                (r.amount for r in records), Decimal(0)
            )
        return self._trend(totals, metric="Overall")

    def get_trend_data(self, category: str, periods: list[str]) -> list[TrendDataPoint]:
        totals = {
            period: self._category_total_in_period(category, period) for period in periods
        }
        return trends.trend_points(totals)

    def calculate_growth_rate(self, category: str, start_period: str, end_period: str) -> Decimal:
        start = self._category_total_in_period(category, start_period)
        end = self._category_total_in_period(category, end_period)
        return trends.percent_change(start, end) or Decimal(0)

    # Per-period series up to a document

    def get_revenue_trend(self, document_id: int, periods: int = 12) -> MetricSeries:
        return self._category_series(document_id, FinancialCategory.REVENUE, periods)

    def get_expense_trend(self, document_id: int, periods: int = 12) -> MetricSeries:
        return self._category_series(document_id, FinancialCategory.EXPENSE, periods)

    def get_net_income_trend(self, document_id: int, periods: int = 12) -> MetricSeries:
        records, until = self._history_until(document_id)
        return series.net_income_series(records, until=until, limit=periods)

    def get_period_comparisons(self, document_id: int) -> list[PeriodComparison]:
        """Net income change of every period up to the document's period."""
        records, until = self._history_until(document_id)
        return series.period_comparisons(records, until=until)

    # Comparisons

    def compare_periods(self, period1: str, period2: str) -> ComparisonResult:
        return comparison.compare_records(
            period1,
            self._repo.get_records_by_period(period1),
            period2,
            self._repo.get_records_by_period(period2),
            significant_percent=_decimal(self._config.significant_change_percent),
        )

    def compare_documents(self, document_id1: int, document_id2: int) -> ComparisonResult:
        """Compare all records of the two documents' dominant periods."""
        return self.compare_periods(
            self._dominant_period(document_id1), self._dominant_period(document_id2)
        )

    def get_variance_analysis(self, document_id1: int, document_id2: int) -> dict[str, Decimal]:
        result = self.compare_documents(document_id1, document_id2)
        return {category: metric.variance for category, metric in result.metrics.items()}

    # Forecasting

    def generate_forecast(self, category: str, periods_ahead: int) -> ForecastResult:
        by_period: dict[str, Decimal] = {}
        for record in self._repo.get_records_by_category(category):
            by_period[record.period] = by_period.get(record.period, Decimal(0)) + record.amount
        Log.info(
            f"Forecasting {category} {periods_ahead} periods ahead from {len(by_period)} periods"
        )
        latest = max((r.period for r in self._repo.get_all_records()), default=None)
        return forecast.category_forecast(
            category,
            sorted(by_period.items()),
            periods_ahead,
            min_points=self._config.forecast_min_points,
            last_period=latest,
        )

    def generate_simple_forecast(self, values: list[Decimal], periods_ahead: int) -> ForecastResult:
        return forecast.simple_forecast(
            values, periods_ahead, min_points=self._config.forecast_min_points
        )

    def calculate_moving_average(self, values: list[Decimal], window: int) -> list[Decimal]:
        return forecast.moving_average(values, window)

    # Anomalies

    def detect_anomalies(self, document_id: int) -> list[Anomaly]:
        found = self.detect_outliers(self._document_records(document_id))
        Log.info(f"Found {len(found)} anomalies in document {document_id}")
        return found

    def detect_outliers(self, records: list[Record]) -> list[Anomaly]:
        return anomalies.detect_outliers(records, self._thresholds)

    def is_anomalous_value(self, value: Decimal, category: str, period: str) -> bool:
        baseline = [
            r.amount for r in self._repo.get_records_by_category(category) if r.period == period
        ]
        return anomalies.is_anomalous(value, baseline, self._thresholds)

    def _dominant_period(self, document_id: int) -> str:
        records = self._document_records(document_id)
        return comparison.dominant_period(records) or str(document_id)

    def _history_until(self, document_id: int) -> tuple[list[Record], str | None]:
        """All records, plus the selected document's dominant period (None when it is empty)."""
        selected = self._repo.get_document_with_records(document_id).records
        return self._repo.get_all_records(), comparison.dominant_period(selected)

    def _document_records(self, document_id: int) -> list[Record]:
        records = self._repo.get_document_with_records(document_id).records
        if not records:
            raise AnalyticsPreconditionError(f"No financial data found for document {document_id}")
        return records

    def _category_series(self, document_id: int, category: str, periods: int) -> MetricSeries:
        records, until = self._history_until(document_id)
        return series.category_series(records, category, until=until, limit=periods)

    def _category_total_in_period(self, category: str, period: str) -> Decimal:
        return sum(
            (r.amount for r in self._repo.get_records_by_period(period) if r.has_category(category)),
            Decimal(0),
        )

    def _trend(self, totals: dict[str, Decimal], *, metric: str) -> TrendAnalysis:
        return trends.analyze_trend(
            totals,
            metric=metric,
            stable_percent=_decimal(self._config.trend_stable_percent),
            volatility_percent=_decimal(self._config.volatility_percent),
        )


def build_analytics_service(
    settings: Settings,
    repo: DocumentsRepository | None = None,
) -> FinancialAnalyticsService:
    return FinancialAnalyticsService(
        repo=repo if repo is not None else DocumentsRepository(),
        config=AnalyticsConfig.from_settings(settings),
    )
