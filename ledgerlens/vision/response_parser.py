from datetime import datetime

from ledgerlens.logging.logger import Log
from ledgerlens.records.models import DEFAULT_CURRENCY, UNKNOWN_CATEGORY, Record
from ledgerlens.records.validation import clean_text, is_valid_record, parse_amount

_MIN_FIELDS = 3


def page_account_code(page_number: int) -> str:
    return f"AI-PAGE{page_number}"


def parse_vision_response(
    text: str,
    page_number: int,
    *,
    default_period: str,
    recorded_at: datetime,
) -> list[Record]:
    """Turn a vision model reply into records.

    Expects one ``name | amount | category | period`` entry per line. Lines
    without a pipe, with fewer than three fields, with an empty name or a zero
    amount are dropped. Markdown table pipes at the line edges are tolerated.
    Never raises on malformed text.
    """
    records: list[Record] = []
    for raw_line in (text or "").splitlines():
        line = raw_line.strip()
        if "|" not in line:
            continue
        fields = [clean_text(part) for part in line.strip("|").split("|")]
        if len(fields) < _MIN_FIELDS:
            continue

        name = fields[0]
        amount = parse_amount(fields[1])
        if not name or amount == 0:
            continue

        record = Record(
            account_name=name,
            account_code=page_account_code(page_number),
            period=(fields[3] if len(fields) > 3 else "") or default_period,
            amount=amount,
            currency=DEFAULT_CURRENCY,
            category=fields[2] or UNKNOWN_CATEGORY,
            recorded_at=recorded_at,
        )
        if is_valid_record(record):
            records.append(record)

    Log.debug(f"Parsed {len(records)} records from vision reply for page {page_number}")
    return records
