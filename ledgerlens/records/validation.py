"""Lenient value parsing shared by every extractor.

Amounts and dates coming out of spreadsheets, CSV cells and model replies are
messy. Parsing never raises: a bad amount becomes zero and a bad date becomes
the injected clock's current time, so a single odd cell cannot sink a row.
"""

from collections.abc import Callable
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation

from ledgerlens.records.models import Record

Clock = Callable[[], datetime]

_CURRENCY_NOISE = str.maketrans("", "", "$€£,")

_DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%m/%d/%Y %H:%M:%S",
    "%d.%m.%Y",
    "%d-%b-%Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%Y-%m",
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_amount(value: object) -> Decimal:
    """Convert a cell or text fragment to Decimal, or zero when it is not a number."""
    if value is None or isinstance(value, bool):
        return Decimal(0)
    if isinstance(value, Decimal):
        return value if value.is_finite() else Decimal(0)
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        value = repr(value)
    text = str(value).translate(_CURRENCY_NOISE).replace(" ", "").strip()
    if not text:
        return Decimal(0)
    try:
        amount = Decimal(text)
    except InvalidOperation:
        return Decimal(0)
    if not amount.is_finite():
        return Decimal(0)
    return amount


def parse_date(value: object, clock: Clock = utc_now) -> datetime:
    """Convert a cell or text fragment to datetime, falling back to ``clock()``."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if value is None:
        return clock()
    text = str(value).strip()
    if not text:
        return clock()
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return clock()


def current_period(clock: Clock = utc_now) -> str:
    """Period label of the current month, e.g. ``2024-03``."""
    return clock().strftime("%Y-%m")


def is_valid_record(record: Record) -> bool:
    return bool(
        record.account_name.strip()
        and record.period.strip()
        and record.category.strip()
    )


def clean_text(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()
