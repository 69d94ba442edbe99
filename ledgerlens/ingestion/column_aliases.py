"""Header-to-field binding shared by the spreadsheet and CSV extractors.

Each canonical field lists the exact header spellings it accepts and the
substring rules used when no exact spelling is present. Exact matches win
over substring matches, and the leftmost column wins within each kind.
"""

from collections.abc import Sequence
from dataclasses import dataclass

ACCOUNT_NAME = "account_name"
ACCOUNT_CODE = "account_code"
PERIOD = "period"
AMOUNT = "amount"
CURRENCY = "currency"
CATEGORY = "category"
SUB_CATEGORY = "sub_category"
RECORDED_AT = "recorded_at"

REQUIRED_FIELDS: tuple[str, ...] = (ACCOUNT_NAME, PERIOD, AMOUNT, CATEGORY)

HEADER_KEYWORDS: tuple[str, ...] = ("account", "amount", "period", "category")
MIN_HEADER_KEYWORDS = 2


@dataclass(frozen=True)
class KeywordRule:
    contains: tuple[str, ...]
    excludes: tuple[str, ...] = ()

    def matches(self, header: str) -> bool:
        return all(word in header for word in self.contains) and not any(
            word in header for word in self.excludes
        )


@dataclass(frozen=True)
class ColumnAlias:
    field: str
    exact: tuple[str, ...]
    rules: tuple[KeywordRule, ...] = ()


COLUMN_ALIASES: tuple[ColumnAlias, ...] = (
    ColumnAlias(
        ACCOUNT_NAME,
        exact=("account name", "accountname", "account"),
        rules=(KeywordRule(("account", "name")),),
    ),
    ColumnAlias(
        ACCOUNT_CODE,
        exact=("account code", "accountcode", "code"),
        rules=(KeywordRule(("account", "code")),),
    ),
    ColumnAlias(PERIOD, exact=("period", "time period"), rules=(KeywordRule(("period",)),)),
    ColumnAlias(AMOUNT, exact=("amount", "value"), rules=(KeywordRule(("amount",)),)),
    ColumnAlias(CURRENCY, exact=("currency",), rules=(KeywordRule(("currency",)),)),
    ColumnAlias(
        CATEGORY,
        exact=("category", "type"),
        rules=(KeywordRule(("category",), excludes=("sub",)),),
    ),
    ColumnAlias(
        SUB_CATEGORY,
        exact=("sub category", "subcategory", "sub-category"),
        rules=(KeywordRule(("subcategory",)), KeywordRule(("sub category",))),
    ),
    ColumnAlias(
        RECORDED_AT,
        exact=("date", "record date"),
        rules=(KeywordRule(("date",)),),
    ),
)


def normalize_header(value: object) -> str:
    if value is None:
        return ""
    return " ".join(str(value).split()).lower()


def looks_like_header(cells: Sequence[object]) -> bool:
    """True when at least two header keywords appear among the row's cells."""
    text = " ".join(normalize_header(cell) for cell in cells)
    hits = sum(1 for keyword in HEADER_KEYWORDS if keyword in text)
    return hits >= MIN_HEADER_KEYWORDS


def bind_columns(headers: Sequence[object]) -> dict[str, int]:
    """Map canonical field names to zero-based column indexes."""
    normalized = [normalize_header(header) for header in headers]
    bound: dict[str, int] = {}
    claimed: set[int] = set()

    for alias in COLUMN_ALIASES:
        for index, header in enumerate(normalized):
            if index not in claimed and header in alias.exact:
                bound[alias.field] = index
                claimed.add(index)
                break

    for alias in COLUMN_ALIASES:
        if alias.field in bound:
            continue
        for index, header in enumerate(normalized):
            if index in claimed or not header:
                continue
            if any(rule.matches(header) for rule in alias.rules):
                bound[alias.field] = index
                claimed.add(index)
                break

    return bound


def missing_required(bound: dict[str, int]) -> list[str]:
    return [name for name in REQUIRED_FIELDS if name not in bound]
