"""
Main Orchestrator for the Household Ledger

Ties the record store to the engine for the two read flows:
1. Net worth (store -> snapshot -> aggregate -> result)
2. Integrity check (store -> snapshot -> check -> issues)

DESIGN DECISION: Every call reads a FRESH snapshot. Nothing computed is
kept between calls, so a newer call simply supersedes an older one in
whatever display consumes the results.
"""

from typing import Optional

from household_ledger.config import Settings, get_settings
from household_ledger.diagnostics import IssueCollector, configure_log_level, get_logger
from household_ledger.engine import aggregate_snapshot
from household_ledger.models.diagnostics import EngineIssue
from household_ledger.models.results import AggregateResult
from household_ledger.services.storage import RecordStoreInterface
from household_ledger.validation import LedgerIntegrityChecker


class NetWorthFlow:
    """
    Reads a snapshot from the store and runs the engine over it.
    
    The base currency comes from the caller when given, otherwise
    from settings.
    """
    
    def __init__(
        self,
        store: RecordStoreInterface,
        settings: Optional[Settings] = None,
    ):
        self._store = store
        self._settings = settings or get_settings()
        self._logger = get_logger("household_ledger.orchestrator")
        configure_log_level(self._settings.app.log_level)
    
    @property
    def _timestamp_formats(self) -> tuple[str, ...]:
        return tuple(self._settings.engine.timestamp_formats_list)
    
    def _base_currency(self, base_currency: Optional[str]) -> str:
        return base_currency if base_currency is not None else self._settings.engine.base_currency
    
    async def compute(self, base_currency: Optional[str] = None) -> AggregateResult:
        """
        Compute household totals.
        
        Args:
            base_currency: Override for the configured base currency
            
        Returns:
            AggregateResult for the snapshot read at call time
        """
        base = self._base_currency(base_currency)
        snapshot = await self._store.load_snapshot()
        
        result = aggregate_snapshot(
            snapshot,
            base,
            IssueCollector(),
            self._timestamp_formats,
        )
        
        self._logger.info(
            "net_worth_computed",
            base_currency=base,
            net_worth=result.net_worth,
            accounts=len(snapshot.entities.accounts),
            fixed_assets=len(snapshot.entities.fixed_assets),
            obligations=len(result.obligations),
            inconvertible=sorted(result.inconvertible),
            issue_count=len(result.issues),
        )
        return result
    
    async def check(self, base_currency: Optional[str] = None) -> list[EngineIssue]:
        """Run the integrity check over a fresh snapshot."""
        base = self._base_currency(base_currency)
        snapshot = await self._store.load_snapshot()
        
        issues = LedgerIntegrityChecker(
            IssueCollector(), self._timestamp_formats
        ).check(snapshot, base)
        
        self._logger.info(
            "integrity_checked",
            base_currency=base,
            issue_count=len(issues),
        )
        return issues
