"""
Aggregation & currency-conversion engine.

Pure functions over a snapshot of records. No I/O, no global state.
"""

from household_ledger.engine.aggregator import (
    InvalidBaseCurrencyError,
    aggregate,
    aggregate_snapshot,
)
from household_ledger.engine.loans import current_obligations
from household_ledger.engine.rates import (
    UNCONVERTIBLE,
    RateGraph,
    RateResolver,
    build_graph,
    is_convertible,
    latest_quotes,
    resolve,
)
from household_ledger.engine.snapshots import (
    fallback_for,
    group_by_entity,
    latest,
    latest_for_entity,
    latest_record,
    latest_records,
)
from household_ledger.engine.timestamps import (
    DEFAULT_TIMESTAMP_FORMATS,
    MIN_TIMESTAMP,
    parse_timestamp,
    timestamp_key,
)

__all__ = [
    # Aggregation
    "InvalidBaseCurrencyError",
    "aggregate",
    "aggregate_snapshot",
    # Loans
    "current_obligations",
    # Rates
    "UNCONVERTIBLE",
    "RateGraph",
    "RateResolver",
    "build_graph",
    "is_convertible",
    "latest_quotes",
    "resolve",
    # Snapshots
    "fallback_for",
    "group_by_entity",
    "latest",
    "latest_for_entity",
    "latest_record",
    "latest_records",
    # Timestamps
    "DEFAULT_TIMESTAMP_FORMATS",
    "MIN_TIMESTAMP",
    "parse_timestamp",
    "timestamp_key",
]
