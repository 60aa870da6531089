"""
Loan Deduplicator

The loan ledger is append-only: updating an obligation means adding a
new record with the same (member, counterparty, direction) key.

current_obligations() collapses that history to what is outstanding now:
1. Group every record by its obligation key.
2. Keep the latest record per key (ties go to the later arrival).
3. Drop the key entirely if that latest record is settled.

A settled latest record therefore retires the whole obligation, even
if older unsettled records for the same key still exist.
"""

from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Optional

from household_ledger.diagnostics import IssueCollector
from household_ledger.engine.timestamps import timestamp_key
from household_ledger.models.records import LoanDirection, LoanObligation


def current_obligations(
    loans: Iterable[LoanObligation],
    collector: Optional[IssueCollector] = None,
    formats: Optional[Sequence[str]] = None,
) -> list[LoanObligation]:
    """One open obligation per key, in first-seen key order."""
    winners: dict[tuple[str, str, LoanDirection], tuple[datetime, LoanObligation]] = {}
    
    for loan in loans:
        key = timestamp_key(loan.timestamp, loan.label, collector, formats)
        current = winners.get(loan.obligation_key)
        if current is None or key >= current[0]:
            winners[loan.obligation_key] = (key, loan)
    
    return [loan for _, loan in winners.values() if not loan.settled]

