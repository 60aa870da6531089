"""
In-Memory Record Store

Append-only store for tests and for embedding the engine in a process
that already holds its records in memory.

Entities (members, accounts, fixed assets) are keyed by id and may not
be added twice. Time-stamped records (valuations, quotes, loans) are
only ever appended, matching how the ledger is updated.
"""

from household_ledger.models.records import (
    Account,
    FixedAsset,
    LoanObligation,
    Member,
    RateQuote,
    ValuationRecord,
)
from household_ledger.services.storage.interface import (
    DuplicateError,
    NotFoundError,
    RecordStoreInterface,
)


class InMemoryRecordStore(RecordStoreInterface):
    """Record store backed by plain dicts and lists."""
    
    def __init__(self):
        self._members: dict[str, Member] = {}
        self._accounts: dict[str, Account] = {}
        self._fixed_assets: dict[str, FixedAsset] = {}
        self._liquid_valuations: list[ValuationRecord] = []
        self._fixed_valuations: list[ValuationRecord] = []
        self._quotes: list[RateQuote] = []
        self._loans: list[LoanObligation] = []
    
    # =========================================================================
    # WRITES (append-only)
    # =========================================================================
    
    def add_member(self, member: Member) -> Member:
        if member.member_id in self._members:
            raise DuplicateError(f"Member already exists: {member.member_id}")
        self._members[member.member_id] = member
        return member
    
    def add_account(self, account: Account) -> Account:
        if account.account_id in self._accounts or account.account_id in self._fixed_assets:
            raise DuplicateError(f"Entity id already in use: {account.account_id}")
        self._accounts[account.account_id] = account
        return account
    
    def add_fixed_asset(self, asset: FixedAsset) -> FixedAsset:
        if asset.asset_id in self._fixed_assets or asset.asset_id in self._accounts:
            raise DuplicateError(f"Entity id already in use: {asset.asset_id}")
        self._fixed_assets[asset.asset_id] = asset
        return asset
    
    def add_valuation(self, record: ValuationRecord) -> ValuationRecord:
        """
        Append a valuation to the history of its entity.
        
        Raises:
            NotFoundError: If the entity is neither a known account nor fixed asset
        """
        if record.entity_id in self._accounts:
            self._liquid_valuations.append(record)
        elif record.entity_id in self._fixed_assets:
            self._fixed_valuations.append(record)
        else:
            raise NotFoundError(f"No account or fixed asset with id {record.entity_id}")
        return record
    
    def add_quote(self, quote: RateQuote) -> RateQuote:
        self._quotes.append(quote)
        return quote
    
    def add_loan(self, loan: LoanObligation) -> LoanObligation:
        self._loans.append(loan)
        return loan
    
    # =========================================================================
    # READS
    # =========================================================================
    
    def get_account(self, account_id: str) -> Account:
        try:
            return self._accounts[account_id]
        except KeyError:
            raise NotFoundError(f"Account not found: {account_id}") from None
    
    def get_fixed_asset(self, asset_id: str) -> FixedAsset:
        try:
            return self._fixed_assets[asset_id]
        except KeyError:
            raise NotFoundError(f"Fixed asset not found: {asset_id}") from None
    
    async def list_members(self) -> list[Member]:
        return list(self._members.values())
    
    async def list_accounts(self) -> list[Account]:
        return list(self._accounts.values())
    
    async def list_fixed_assets(self) -> list[FixedAsset]:
        return list(self._fixed_assets.values())
    
    async def list_liquid_valuations(self) -> list[ValuationRecord]:
        return list(self._liquid_valuations)
    
    async def list_fixed_valuations(self) -> list[ValuationRecord]:
        return list(self._fixed_valuations)
    
    async def list_rate_quotes(self) -> list[RateQuote]:
        return list(self._quotes)
    
    async def list_loans(self) -> list[LoanObligation]:
        return list(self._loans)
