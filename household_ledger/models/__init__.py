"""
Data Models Package

This package contains all Pydantic models used by the Household Ledger.
All records flowing into the engine, and all results flowing out,
conform to these schemas.
"""

from household_ledger.models.records import (
    Account,
    EntityKind,
    FixedAsset,
    LoanDirection,
    LoanObligation,
    Member,
    RateQuote,
    RawTimestamp,
    ValuationRecord,
)
from household_ledger.models.snapshot import (
    LedgerEntities,
    LedgerSnapshot,
    LedgerValuations,
)
from household_ledger.models.results import (
    AggregateResult,
    EntityValuation,
    LatestValue,
    Money,
    ObligationValuation,
)
from household_ledger.models.diagnostics import (
    EngineIssue,
    EngineIssueType,
    IssueBuilder,
    IssueSeverity,
)

__all__ = [
    # Record models
    "Account",
    "EntityKind",
    "FixedAsset",
    "LoanDirection",
    "LoanObligation",
    "Member",
    "RateQuote",
    "RawTimestamp",
    "ValuationRecord",
    # Snapshot models
    "LedgerEntities",
    "LedgerSnapshot",
    "LedgerValuations",
    # Result models
    "AggregateResult",
    "EntityValuation",
    "LatestValue",
    "Money",
    "ObligationValuation",
    # Diagnostic models
    "EngineIssue",
    "EngineIssueType",
    "IssueBuilder",
    "IssueSeverity",
]
