import csv
import io

from ledgerlens.ingestion import column_aliases as cols
from ledgerlens.ingestion.exceptions import ExtractionError
from ledgerlens.ingestion.extractors.base import BaseExtractor, is_blank_row, record_from_row
from ledgerlens.logging.logger import Log
from ledgerlens.records.models import Record
from ledgerlens.records.validation import Clock, is_valid_record, utc_now


def decode_text(data: bytes) -> str:
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        return data.decode("latin-1")


class DelimitedTextExtractor(BaseExtractor):
    """Reads records from CSV content whose first non-empty row is the header."""

    def __init__(self, delimiter: str = ",", clock: Clock = utc_now) -> None:
        self._delimiter = delimiter
        self._clock = clock

    def extract(self, data: bytes) -> list[Record]:
        try:
            rows = list(csv.reader(io.StringIO(decode_text(data)), delimiter=self._delimiter))
        except csv.Error as exc:
            raise ExtractionError(f"Failed to parse CSV: {exc}") from exc

        header_index = next(
            (index for index, row in enumerate(rows) if not is_blank_row(row)), None
        )
        if header_index is None:
            Log.warning("CSV file has no header row")
            return []

        bound = cols.bind_columns(rows[header_index])
        missing = cols.missing_required(bound)
        if missing:
            raise ExtractionError(f"CSV is missing required columns: {', '.join(missing)}")

        records: list[Record] = []
        for line_number, row in enumerate(rows[header_index + 1 :], start=header_index + 2):
            if is_blank_row(row):
                continue
            record = record_from_row(row, bound, self._clock)
            if not is_valid_record(record):
                Log.warning(f"Skipping invalid CSV line {line_number}")
                continue
            records.append(record)

        Log.info(f"Extracted {len(records)} records from CSV")
        return records
