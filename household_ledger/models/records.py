"""
Core Record Models for the Household Ledger

These models define the schemas for everything the external record
store hands to the engine:
1. Members, accounts and fixed assets (the tracked entities)
2. Valuation records (point-in-time worth of an entity)
3. Rate quotes (currency conversion observations)
4. Loan obligations (append-only lending/borrowing ledger)

DESIGN DECISION: Records are frozen once created. Updating an account's
worth or a loan means appending a NEW record, never editing an old one.

Timestamps are accepted raw (datetime, date or string). Parsing happens
in the engine, where a malformed value degrades to the minimum instant
instead of rejecting the whole record.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


RawTimestamp = Union[datetime, date, str]


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class EntityKind(str, Enum):
    """Kinds of tracked entities that carry valuations."""
    ACCOUNT = "account"
    FIXED_ASSET = "fixed_asset"


class LoanDirection(str, Enum):
    """
    Direction of a loan from the member's point of view.
    
    LEND is a receivable (asset), BORROW is a payable (liability).
    """
    LEND = "lend"
    BORROW = "borrow"


# =============================================================================
# ENTITIES
# =============================================================================

class Member(BaseModel):
    """A household member who owns accounts and fixed assets."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)
    
    member_id: str = Field(
        ...,
        min_length=1,
        description="Unique member identifier"
    )
    name: str = Field(
        default="",
        description="Display name"
    )


class Account(BaseModel):
    """
    A liquid account (checking, brokerage, retirement...).
    
    An account with no valuation history is worth zero.
    """
    model_config = ConfigDict(frozen=True)
    
    account_id: str = Field(
        ...,
        min_length=1,
        description="Unique account identifier"
    )
    name: str = Field(
        default="",
        description="Account nickname"
    )
    member_id: str = Field(
        ...,
        min_length=1,
        description="Owning member"
    )
    currency: Optional[str] = Field(
        default=None,
        min_length=1,
        description="Native currency, if known"
    )
    account_type: Optional[str] = Field(
        default=None,
        description="e.g. Checking, Investment"
    )
    asset_type: Optional[str] = Field(
        default=None,
        description="e.g. Cash, Stock"
    )


class FixedAsset(BaseModel):
    """
    A fixed asset (real estate, vehicle...).
    
    A fixed asset with no valuation history is worth its acquisition price.
    """
    model_config = ConfigDict(frozen=True)
    
    asset_id: str = Field(
        ...,
        min_length=1,
        description="Unique asset identifier"
    )
    name: str = Field(
        default="",
        description="Asset nickname"
    )
    member_id: str = Field(
        ...,
        min_length=1,
        description="Owning member"
    )
    asset_type: Optional[str] = Field(
        default=None,
        description="e.g. Real Estate, Vehicle"
    )
    acquired_at: Optional[RawTimestamp] = Field(
        default=None,
        description="When the asset was acquired"
    )
    acquisition_price: float = Field(
        ...,
        description="Price paid, in the acquisition currency"
    )
    currency: str = Field(
        ...,
        min_length=1,
        description="Acquisition currency"
    )


# =============================================================================
# TIME-STAMPED RECORDS
# =============================================================================

class ValuationRecord(BaseModel):
    """
    One observation of an account's or fixed asset's worth.
    
    Many per entity. Superseded by newer records, never overwritten.
    """
    model_config = ConfigDict(frozen=True)
    
    entity_id: str = Field(
        ...,
        min_length=1,
        description="Account or fixed asset this valuation is for"
    )
    timestamp: RawTimestamp = Field(
        ...,
        description="When the valuation was observed"
    )
    currency: str = Field(
        ...,
        min_length=1,
        description="Currency of the amount"
    )
    amount: float = Field(
        ...,
        description="Worth in the record's currency"
    )
    note: Optional[str] = None


class RateQuote(BaseModel):
    """
    A currency conversion quote.
    
    CRITICAL: 1 unit of quote_currency equals `rate` units of base_currency.
    e.g. base=CNY, quote=USD, rate=7.21 means 1 USD = 7.21 CNY.
    
    The rate is NOT range-checked here. Non-positive or non-finite rates
    are dropped by the graph builder, which reports them.
    """
    model_config = ConfigDict(frozen=True)
    
    timestamp: RawTimestamp = Field(
        ...,
        description="When the quote was observed"
    )
    base_currency: str = Field(
        ...,
        min_length=1,
        description="Currency the rate is expressed in"
    )
    quote_currency: str = Field(
        ...,
        min_length=1,
        description="Currency being priced"
    )
    rate: float = Field(
        ...,
        description="Units of base_currency per unit of quote_currency"
    )
    source: Optional[str] = Field(
        default=None,
        description="Where the quote came from (e.g. Central Bank)"
    )
    
    @property
    def pair(self) -> frozenset[str]:
        """Unordered currency pair this quote covers."""
        return frozenset((self.base_currency, self.quote_currency))


class LoanObligation(BaseModel):
    """
    One entry in the append-only loan ledger.
    
    Identity of an ongoing obligation is (member_id, counterparty_id, direction).
    A later record with the same key supersedes earlier ones.
    """
    model_config = ConfigDict(frozen=True)
    
    member_id: str = Field(
        ...,
        min_length=1,
        description="Household member on our side of the loan"
    )
    counterparty_id: str = Field(
        ...,
        min_length=1,
        description="Who the money was lent to / borrowed from"
    )
    direction: LoanDirection
    currency: str = Field(
        ...,
        min_length=1
    )
    amount: float = Field(
        ...,
        description="Outstanding amount in the loan's currency"
    )
    timestamp: RawTimestamp
    settled: bool = Field(
        default=False,
        description="True once the obligation is paid off"
    )
    asset_type: Optional[str] = None
    note: Optional[str] = None
    
    @property
    def obligation_key(self) -> tuple[str, str, LoanDirection]:
        """Identity of the ongoing obligation this record belongs to."""
        return (self.member_id, self.counterparty_id, self.direction)
    
    @property
    def label(self) -> str:
        """Stable string identifier used when flagging this obligation."""
        return f"loan:{self.member_id}:{self.counterparty_id}:{self.direction.value}"
