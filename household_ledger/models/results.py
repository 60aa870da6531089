"""
Result Models

What the engine hands back to the presentation layer. Totals are
always complete; anything that could not be converted is zeroed and
listed in `inconvertible` so the caller can warn about it.
"""

from typing import Optional

from pydantic import BaseModel, Field

from household_ledger.models.diagnostics import EngineIssue, EngineIssueType
from household_ledger.models.records import (
    EntityKind,
    LoanObligation,
    ValuationRecord,
)


class Money(BaseModel):
    """An amount in a given currency."""
    
    amount: float
    currency: str


class LatestValue(Money):
    """
    Current worth of an entity in its native currency.
    
    `record` is the winning valuation, or None when the entity-kind
    fallback was used (zero for accounts, acquisition price for fixed assets).
    """
    
    from_fallback: bool = False
    record: Optional[ValuationRecord] = None


class EntityValuation(BaseModel):
    """One line of the per-entity breakdown."""
    
    entity_id: str
    kind: EntityKind
    member_id: str
    name: str = ""
    native: LatestValue
    factor: float = Field(
        ...,
        description="Conversion factor to base currency (0 when unconvertible)"
    )
    converted: float = Field(
        ...,
        description="Worth in base currency (0 when unconvertible)"
    )
    convertible: bool = True


class ObligationValuation(BaseModel):
    """A current loan obligation converted to base currency."""
    
    obligation: LoanObligation
    factor: float
    converted: float
    convertible: bool = True


class AggregateResult(BaseModel):
    """
    Consolidated household figures in the base currency.
    
    INVARIANT: net_worth == liquid_total + fixed_total + lending_total - borrowing_total
    """
    
    base_currency: str
    net_worth: float = 0.0
    liquid_total: float = 0.0
    fixed_total: float = 0.0
    lending_total: float = 0.0
    borrowing_total: float = 0.0
    
    # Loans are not attributed to members
    per_member: dict[str, float] = Field(default_factory=dict)
    
    inconvertible: set[str] = Field(
        default_factory=set,
        description="Entity ids and loan labels whose currency has no path to base"
    )
    lines: list[EntityValuation] = Field(default_factory=list)
    obligations: list[ObligationValuation] = Field(default_factory=list)
    issues: list[EngineIssue] = Field(default_factory=list)
    
    @property
    def has_inconvertible(self) -> bool:
        """Should the caller show a missing-rate warning?"""
        return bool(self.inconvertible)
    
    @property
    def loan_balance(self) -> float:
        """Lent minus borrowed."""
        return self.lending_total - self.borrowing_total
    
    def issues_of(self, issue_type: EngineIssueType) -> list[EngineIssue]:
        """Issues of one kind, in the order they were raised."""
        return [issue for issue in self.issues if issue.issue_type == issue_type]
