"""
Timestamp Normalization

Records arrive with timestamps as datetime, date or free-form strings.
Everything is normalized to a naive UTC datetime so that any two
records compare. Anything unparsable becomes MIN_TIMESTAMP, which
sorts before every real instant and therefore never wins "latest".

The strptime formats tried after ISO-8601 are always passed in by the
caller (NetWorthFlow reads them from settings once per call). Without
them DEFAULT_TIMESTAMP_FORMATS applies; nothing here reads settings.
"""

from collections.abc import Sequence
from datetime import date, datetime, timezone
from typing import Any, Optional

from household_ledger.diagnostics import IssueCollector
from household_ledger.models.diagnostics import IssueBuilder


MIN_TIMESTAMP = datetime.min

DEFAULT_TIMESTAMP_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%Y-%m-%d %H:%M:%S",
    "%Y/%m/%d %H:%M:%S",
    "%d/%m/%Y",
)


def _to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    try:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    except OverflowError:
        # The UTC shift crossed the edge of the datetime range; clamp to it
        return datetime.max if value.year == datetime.max.year else datetime.min


def parse_timestamp(
    value: Any,
    formats: Optional[Sequence[str]] = None,
) -> Optional[datetime]:
    """
    Parse a raw record timestamp.
    
    Tries ISO-8601 first, then each strptime format in `formats`
    (DEFAULT_TIMESTAMP_FORMATS when None). Returns None if nothing matches.
    """
    if isinstance(value, datetime):
        return _to_naive_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        return None
    
    text = value.strip()
    if not text:
        return None
    
    # fromisoformat() only accepts a trailing "Z" from Python 3.11 on
    iso_text = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        return _to_naive_utc(datetime.fromisoformat(iso_text))
    except ValueError:
        pass
    
    for fmt in (DEFAULT_TIMESTAMP_FORMATS if formats is None else formats):
        try:
            return _to_naive_utc(datetime.strptime(text, fmt))
        except ValueError:
            continue
    return None


def timestamp_key(
    value: Any,
    context: str = "record",
    collector: Optional[IssueCollector] = None,
    formats: Optional[Sequence[str]] = None,
) -> datetime:
    """
    Sort key for a raw timestamp.
    
    Malformed values map to MIN_TIMESTAMP and are reported to the collector.
    """
    parsed = parse_timestamp(value, formats)
    if parsed is None:
        if collector is not None:
            collector.record(IssueBuilder.malformed_timestamp(value, context))
        return MIN_TIMESTAMP
    return parsed
