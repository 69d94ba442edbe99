"""Statistical outlier detection within a category.

Each record is scored against the mean and population standard deviation of
the *other* records in its category. Scoring a value against a baseline that
already contains it caps the attainable z-score at sqrt(n - 1), so a single
huge outlier in a small group would never clear 3 sigma.

When the other records are all equal the baseline has no spread, and the
record is scored against the whole group instead. A group with no spread at
all has no outliers.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from ledgerlens.analytics.models import Anomaly, Severity
from ledgerlens.records.models import Record

MIN_GROUP_SIZE = 3
_HUNDRED = Decimal(100)


@dataclass(frozen=True)
class Thresholds:
    flag: Decimal = Decimal(3)
    medium: Decimal = Decimal(4)
    high: Decimal = Decimal(5)


@dataclass(frozen=True)
class Score:
    mean: Decimal
    deviation: Decimal
    sigmas: Decimal | None  # None when nothing it was scored against has spread


def population_stats(values: Sequence[Decimal]) -> tuple[Decimal, Decimal]:
    count = len(values)
    mean = sum(values, Decimal(0)) / count
    variance = sum(((v - mean) ** 2 for v in values), Decimal(0)) / count
    return mean, variance.sqrt()


def score(
    value: Decimal,
    baseline: Sequence[Decimal],
    group: Sequence[Decimal] | None = None,
) -> Score:
    """Score ``value`` against ``baseline``, or against ``group`` when the baseline is flat."""
    mean, std = population_stats(baseline)
    if std == 0 and group is not None:
        mean, std = population_stats(group)
    deviation = abs(value - mean)
    return Score(mean=mean, deviation=deviation, sigmas=deviation / std if std > 0 else None)


def is_outlier(result: Score, thresholds: Thresholds) -> bool:
    return result.sigmas is not None and result.sigmas > thresholds.flag


def severity_for(sigmas: Decimal, thresholds: Thresholds) -> Severity:
    if sigmas > thresholds.high:
        return Severity.HIGH
    if sigmas > thresholds.medium:
        return Severity.MEDIUM
    return Severity.LOW


def _reason(sigmas: Decimal) -> str:
    return f"Value is {sigmas:.2f} standard deviations from category mean"


def detect_outliers(
    records: Sequence[Record],
    thresholds: Thresholds = Thresholds(),
) -> list[Anomaly]:
    """Flag records far from the rest of their category.

    Categories are grouped case-insensitively; groups with fewer than three
    records are skipped.
    """
    groups: dict[str, list[Record]] = {}
    for record in records:
        groups.setdefault(record.category.casefold(), []).append(record)

    anomalies: list[Anomaly] = []
    for group in groups.values():
        if len(group) < MIN_GROUP_SIZE:
            continue
        amounts = [record.amount for record in group]
        for index, record in enumerate(group):
            baseline = amounts[:index] + amounts[index + 1 :]
            result = score(record.amount, baseline, amounts)
            if result.sigmas is None or not is_outlier(result, thresholds):
                continue
            anomalies.append(
                Anomaly(
                    record_id=record.id,
                    account_name=record.account_name,
                    category=record.category,
                    period=record.period,
                    amount=record.amount,
                    expected_value=result.mean,
                    deviation=result.deviation,
                    deviation_percentage=(
                        result.deviation / result.mean * _HUNDRED
                        if result.mean != 0
                        else Decimal(0)
                    ),
                    standard_deviations=result.sigmas,
                    severity=severity_for(result.sigmas, thresholds),
                    reason=_reason(result.sigmas),
                )
            )
    return anomalies


def is_anomalous(
    value: Decimal,
    baseline: Sequence[Decimal],
    thresholds: Thresholds = Thresholds(),
) -> bool:
    """Check a candidate value against existing values; needs at least two of them."""
    if len(baseline) < 2:
        return False
    return is_outlier(score(value, baseline, [*baseline, value]), thresholds)
