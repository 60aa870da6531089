"""
Latest-Snapshot Resolver

Picks the current worth of an entity out of its unordered valuation
history.

RULES:
- "Latest" is the record with the maximum timestamp.
- Ties go to the record that arrived last (later in the input sequence).
- Malformed timestamps sort as the oldest possible instant.
- An entity with no history falls back by kind:
    * account      -> 0 in the account's currency (or the base currency
                      when the account has none)
    * fixed asset  -> acquisition price in the acquisition currency

NOTE: The two fallbacks intentionally differ. Do not unify them here.
"""

from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Optional, Union

from household_ledger.diagnostics import IssueCollector
from household_ledger.engine.timestamps import timestamp_key
from household_ledger.models.records import Account, FixedAsset, ValuationRecord
from household_ledger.models.results import LatestValue


def _context(record: ValuationRecord) -> str:
    return f"valuation of {record.entity_id}"


def entity_id_of(entity: Union[Account, FixedAsset]) -> str:
    return entity.asset_id if isinstance(entity, FixedAsset) else entity.account_id


def group_by_entity(
    valuations: Iterable[ValuationRecord],
) -> dict[str, list[ValuationRecord]]:
    """
    Split a valuation history into one list per entity in a single pass.
    
    Arrival order is kept inside each list, so tie-breaking is unchanged.
    """
    grouped: dict[str, list[ValuationRecord]] = {}
    for record in valuations:
        grouped.setdefault(record.entity_id, []).append(record)
    return grouped


def latest_record(
    entity_id: str,
    valuations: Iterable[ValuationRecord],
    collector: Optional[IssueCollector] = None,
    formats: Optional[Sequence[str]] = None,
) -> Optional[ValuationRecord]:
    """Most recent valuation for `entity_id`, or None if it has none."""
    best: Optional[ValuationRecord] = None
    best_key: Optional[datetime] = None
    
    for record in valuations:
        if record.entity_id != entity_id:
            continue
        key = timestamp_key(record.timestamp, _context(record), collector, formats)
        # >= so that a later arrival wins a tie
        if best_key is None or key >= best_key:
            best, best_key = record, key
    
    return best


def latest(
    entity_id: str,
    valuations: Iterable[ValuationRecord],
    fallback: LatestValue,
    collector: Optional[IssueCollector] = None,
    formats: Optional[Sequence[str]] = None,
) -> LatestValue:
    """
    Current {amount, currency} of an entity, or `fallback` if unvalued.
    """
    record = latest_record(entity_id, valuations, collector, formats)
    if record is None:
        return fallback
    return LatestValue(
        amount=record.amount,
        currency=record.currency,
        from_fallback=False,
        record=record,
    )


def fallback_for(
    entity: Union[Account, FixedAsset],
    base_currency: str,
) -> LatestValue:
    """The value an entity has when it has never been valued."""
    if isinstance(entity, FixedAsset):
        return LatestValue(
            amount=entity.acquisition_price,
            currency=entity.currency,
            from_fallback=True,
        )
    return LatestValue(
        amount=0.0,
        currency=entity.currency or base_currency,
        from_fallback=True,
    )


def latest_for_entity(
    entity: Union[Account, FixedAsset],
    valuations: Iterable[ValuationRecord],
    base_currency: str,
    collector: Optional[IssueCollector] = None,
    formats: Optional[Sequence[str]] = None,
) -> LatestValue:
    """`latest()` with the fallback chosen by entity kind."""
    return latest(
        entity_id_of(entity),
        valuations,
        fallback_for(entity, base_currency),
        collector,
        formats,
    )


def latest_records(
    valuations: Iterable[ValuationRecord],
    collector: Optional[IssueCollector] = None,
    formats: Optional[Sequence[str]] = None,
) -> list[ValuationRecord]:
    """
    The "latest" view: one winning record per entity.
    
    Entities are listed in the order they first appear.
    """
    winners: dict[str, tuple[datetime, ValuationRecord]] = {}
    
    for record in valuations:
        key = timestamp_key(record.timestamp, _context(record), collector, formats)
        current = winners.get(record.entity_id)
        if current is None or key >= current[0]:
            winners[record.entity_id] = (key, record)
    
    return [record for _, record in winners.values()]
