from abc import ABC, abstractmethod
from collections.abc import Sequence

from ledgerlens.ingestion import column_aliases as cols
from ledgerlens.records.models import DEFAULT_CURRENCY, Record
from ledgerlens.records.validation import Clock, clean_text, parse_amount, parse_date


class BaseExtractor(ABC):
    """Contract for format-specific record extractors."""

    @abstractmethod
    def extract(self, data: bytes) -> list[Record]:
        """Parse raw file content into valid records.

        Raises:
            ExtractionError: if the file cannot be parsed as a whole.
        """


def record_from_row(cells: Sequence[object], bound: dict[str, int], clock: Clock) -> Record:
    """Build a record from one tabular row using a column binding."""

    def cell(field: str) -> object:
        index = bound.get(field)
        if index is None or index >= len(cells):
            return None
        return cells[index]

    return Record(
        account_name=clean_text(cell(cols.ACCOUNT_NAME)),
        account_code=clean_text(cell(cols.ACCOUNT_CODE)) or None,
        period=clean_text(cell(cols.PERIOD)),
        amount=parse_amount(cell(cols.AMOUNT)),
        currency=clean_text(cell(cols.CURRENCY)) or DEFAULT_CURRENCY,
        category=clean_text(cell(cols.CATEGORY)),
        sub_category=clean_text(cell(cols.SUB_CATEGORY)) or None,
        recorded_at=parse_date(cell(cols.RECORDED_AT), clock),
    )


def is_blank_row(cells: Sequence[object]) -> bool:
    return all(not clean_text(value) for value in cells)
