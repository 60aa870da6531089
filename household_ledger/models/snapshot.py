"""
Snapshot Models

A LedgerSnapshot is the immutable bundle of records one engine call
works on. The record store builds it; the engine only reads it.

DESIGN DECISION: Collections are stored as tuples on frozen models.
Lists passed in by the caller are copied on construction, so mutating
them afterwards cannot tear an in-flight computation.
"""

from pydantic import BaseModel, ConfigDict, Field

from household_ledger.models.records import (
    Account,
    FixedAsset,
    LoanObligation,
    Member,
    RateQuote,
    ValuationRecord,
)


class LedgerEntities(BaseModel):
    """Tracked entities, grouped by kind."""
    model_config = ConfigDict(frozen=True)
    
    members: tuple[Member, ...] = Field(default_factory=tuple)
    accounts: tuple[Account, ...] = Field(default_factory=tuple)
    fixed_assets: tuple[FixedAsset, ...] = Field(default_factory=tuple)
    
    @property
    def entity_ids(self) -> set[str]:
        """IDs of every account and fixed asset."""
        ids = {account.account_id for account in self.accounts}
        ids.update(asset.asset_id for asset in self.fixed_assets)
        return ids


class LedgerValuations(BaseModel):
    """Valuation histories, split by entity kind."""
    model_config = ConfigDict(frozen=True)
    
    liquid: tuple[ValuationRecord, ...] = Field(
        default_factory=tuple,
        description="Valuations of accounts"
    )
    fixed: tuple[ValuationRecord, ...] = Field(
        default_factory=tuple,
        description="Valuations of fixed assets"
    )


class LedgerSnapshot(BaseModel):
    """Everything one aggregation pass needs, frozen at read time."""
    model_config = ConfigDict(frozen=True)
    
    entities: LedgerEntities = Field(default_factory=LedgerEntities)
    valuations: LedgerValuations = Field(default_factory=LedgerValuations)
    quotes: tuple[RateQuote, ...] = Field(default_factory=tuple)
    loans: tuple[LoanObligation, ...] = Field(default_factory=tuple)
