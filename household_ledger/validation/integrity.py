"""
Ledger Integrity Check

Finds problems in a snapshot BEFORE they quietly zero out a total:

CHECK 1 - REFERENCES:
- Valuations pointing at an account / fixed asset that does not exist
- Accounts, fixed assets and loans owned by an unknown member
  (only when a member list is present)

CHECK 2 - RATE COVERAGE:
- Every currency used by a valuation, fixed asset, account or loan
  must have a rate path to the base currency. Coverage is decided with
  the same graph search the engine uses, so multi-hop paths count.

IMPORTANT: The check NEVER fixes anything. It only reports.
"""

from collections.abc import Sequence
from typing import Optional

from household_ledger.diagnostics import IssueCollector
from household_ledger.engine.aggregator import check_base_currency
from household_ledger.engine.rates import build_graph
from household_ledger.models.diagnostics import EngineIssue, IssueBuilder
from household_ledger.models.snapshot import LedgerSnapshot


class LedgerIntegrityChecker:
    """Runs reference and rate-coverage checks over a snapshot."""
    
    def __init__(
        self,
        collector: Optional[IssueCollector] = None,
        timestamp_formats: Optional[Sequence[str]] = None,
    ):
        self._collector = collector if collector is not None else IssueCollector()
        self._timestamp_formats = timestamp_formats
    
    def _check_references(self, snapshot: LedgerSnapshot) -> None:
        entities = snapshot.entities
        account_ids = {account.account_id for account in entities.accounts}
        asset_ids = {asset.asset_id for asset in entities.fixed_assets}
        
        for record in snapshot.valuations.liquid:
            if record.entity_id not in account_ids:
                self._collector.record(IssueBuilder.dangling_reference(
                    "Liquid valuation",
                    f"{record.entity_id}@{record.timestamp}",
                    record.entity_id,
                ))
        for record in snapshot.valuations.fixed:
            if record.entity_id not in asset_ids:
                self._collector.record(IssueBuilder.dangling_reference(
                    "Fixed asset valuation",
                    f"{record.entity_id}@{record.timestamp}",
                    record.entity_id,
                ))
        
        if not entities.members:
            return
        
        member_ids = {member.member_id for member in entities.members}
        for account in entities.accounts:
            if account.member_id not in member_ids:
                self._collector.record(IssueBuilder.dangling_reference(
                    "Account", account.account_id, account.member_id,
                ))
        for asset in entities.fixed_assets:
            if asset.member_id not in member_ids:
                self._collector.record(IssueBuilder.dangling_reference(
                    "Fixed asset", asset.asset_id, asset.member_id,
                ))
        for loan in snapshot.loans:
            if loan.member_id not in member_ids:
                self._collector.record(IssueBuilder.dangling_reference(
                    "Loan", loan.label, loan.member_id,
                ))
    
    def _currencies_used(self, snapshot: LedgerSnapshot) -> list[str]:
        used: dict[str, None] = {}
        for record in snapshot.valuations.liquid + snapshot.valuations.fixed:
            used[record.currency] = None
        for account in snapshot.entities.accounts:
            if account.currency:
                used[account.currency] = None
        for asset in snapshot.entities.fixed_assets:
            used[asset.currency] = None
        for loan in snapshot.loans:
            used[loan.currency] = None
        return list(used)
    
    def _check_rate_coverage(self, snapshot: LedgerSnapshot, base_currency: str) -> None:
        graph = build_graph(snapshot.quotes, self._collector, self._timestamp_formats)
        reachable = graph.reachable_from(base_currency)
        
        for currency in self._currencies_used(snapshot):
            if currency not in reachable:
                self._collector.record(IssueBuilder.missing_rate(currency, base_currency))
    
    def check(self, snapshot: LedgerSnapshot, base_currency: str) -> list[EngineIssue]:
        """
        Run every check.
        
        Returns:
            All issues found, references first. Empty list means clean.
        """
        check_base_currency(base_currency)
        self._check_references(snapshot)
        self._check_rate_coverage(snapshot, base_currency)
        return self._collector.issues


def check_integrity(snapshot: LedgerSnapshot, base_currency: str) -> list[EngineIssue]:
    """Convenience wrapper: run a fresh LedgerIntegrityChecker."""
    return LedgerIntegrityChecker().check(snapshot, base_currency)
