r"""
Aggregator

Rolls the latest snapshots, current loan obligations and resolved
conversion factors up into per-member and household totals.

FLOW (one call, no state kept afterwards):
    records -> latest value per entity ----\
    records -> current obligations ---------+-> native amounts
    quotes  -> rate graph -> RateResolver --+-> base-currency amounts
                                            \-> AggregateResult

GUARANTEES:
- Inputs are never mutated.
- Always returns a complete AggregateResult.
- An amount whose currency has no path to the base currency
  contributes exactly 0 to every total and is listed in `inconvertible`.
- net_worth == liquid_total + fixed_total + lending_total - borrowing_total
- per_member counts accounts and fixed assets only, never loans.
"""

from collections.abc import Iterable, Sequence
from typing import Optional

from household_ledger.diagnostics import IssueCollector
from household_ledger.engine.loans import current_obligations
from household_ledger.engine.rates import RateResolver, is_convertible
from household_ledger.engine.snapshots import group_by_entity, latest_for_entity
from household_ledger.models.diagnostics import IssueBuilder
from household_ledger.models.records import (
    EntityKind,
    LoanDirection,
    LoanObligation,
    RateQuote,
)
from household_ledger.models.results import (
    AggregateResult,
    EntityValuation,
    ObligationValuation,
)
from household_ledger.models.snapshot import (
    LedgerEntities,
    LedgerSnapshot,
    LedgerValuations,
)


class InvalidBaseCurrencyError(ValueError):
    """The requested base currency is not a usable currency code."""
    pass


def check_base_currency(base_currency: str) -> None:
    """Raise InvalidBaseCurrencyError unless `base_currency` is a non-empty string."""
    if not isinstance(base_currency, str) or not base_currency:
        raise InvalidBaseCurrencyError(
            f"Base currency must be a non-empty currency code, got {base_currency!r}"
        )


def _value_entities(
    entities: LedgerEntities,
    valuations: LedgerValuations,
    base_currency: str,
    resolver: RateResolver,
    collector: IssueCollector,
    formats: Optional[Sequence[str]],
) -> list[EntityValuation]:
    """Convert every account and fixed asset to the base currency."""
    lines = []
    liquid = group_by_entity(valuations.liquid)
    fixed = group_by_entity(valuations.fixed)
    
    holdings = [
        (EntityKind.ACCOUNT, account, account.account_id, liquid)
        for account in entities.accounts
    ] + [
        (EntityKind.FIXED_ASSET, asset, asset.asset_id, fixed)
        for asset in entities.fixed_assets
    ]
    
    for kind, entity, entity_id, grouped in holdings:
        native = latest_for_entity(
            entity,
            grouped.get(entity_id, ()),
            base_currency,
            collector,
            formats,
        )
        factor = resolver.factor(native.currency, base_currency)
        convertible = is_convertible(factor)
        if not convertible:
            collector.record(
                IssueBuilder.unconvertible(entity_id, native.currency, base_currency)
            )
        
        lines.append(EntityValuation(
            entity_id=entity_id,
            kind=kind,
            member_id=entity.member_id,
            name=entity.name,
            native=native,
            factor=factor,
            converted=native.amount * factor if convertible else 0.0,
            convertible=convertible,
        ))
    
    return lines


def _value_obligations(
    loans: Iterable[LoanObligation],
    base_currency: str,
    resolver: RateResolver,
    collector: IssueCollector,
    formats: Optional[Sequence[str]],
) -> list[ObligationValuation]:
    """Convert every current loan obligation to the base currency."""
    valued = []
    for loan in current_obligations(loans, collector, formats):
        factor = resolver.factor(loan.currency, base_currency)
        convertible = is_convertible(factor)
        if not convertible:
            collector.record(
                IssueBuilder.unconvertible(loan.label, loan.currency, base_currency)
            )
        valued.append(ObligationValuation(
            obligation=loan,
            factor=factor,
            converted=loan.amount * factor if convertible else 0.0,
            convertible=convertible,
        ))
    return valued


def aggregate(
    entities: LedgerEntities,
    valuations: LedgerValuations,
    quotes: Iterable[RateQuote],
    loans: Iterable[LoanObligation],
    base_currency: str,
    collector: Optional[IssueCollector] = None,
    timestamp_formats: Optional[Sequence[str]] = None,
) -> AggregateResult:
    """
    Compute household totals in `base_currency`.
    
    Args:
        entities: Members, accounts and fixed assets
        valuations: Valuation histories (liquid for accounts, fixed for assets)
        quotes: Rate quotes, any order, may contain invalid entries
        loans: Full loan ledger, settled records included
        base_currency: Code every total is expressed in
        collector: Where to report issues (a fresh one per call if None)
        timestamp_formats: strptime formats tried after ISO-8601
            (DEFAULT_TIMESTAMP_FORMATS if None)
        
    Returns:
        A new AggregateResult; nothing passed in is modified.
        
    Raises:
        InvalidBaseCurrencyError: If base_currency is empty
    """
    check_base_currency(base_currency)
    collector = collector if collector is not None else IssueCollector()
    
    # Materialize once; callers may pass generators
    quotes = tuple(quotes)
    loans = tuple(loans)
    
    if not entities.accounts:
        collector.record(IssueBuilder.empty_store("account"))
    if not entities.fixed_assets:
        collector.record(IssueBuilder.empty_store("fixed asset"))
    if not loans:
        collector.record(IssueBuilder.empty_store("loan"))
    
    resolver = RateResolver.from_quotes(quotes, collector, timestamp_formats)
    
    lines = _value_entities(
        entities, valuations, base_currency, resolver, collector, timestamp_formats
    )
    obligations = _value_obligations(
        loans, base_currency, resolver, collector, timestamp_formats
    )
    
    liquid_total = sum(
        (line.converted for line in lines if line.kind == EntityKind.ACCOUNT),
        0.0,
    )
    fixed_total = sum(
        (line.converted for line in lines if line.kind == EntityKind.FIXED_ASSET),
        0.0,
    )
    lending_total = sum(
        (item.converted for item in obligations
         if item.obligation.direction == LoanDirection.LEND),
        0.0,
    )
    borrowing_total = sum(
        (item.converted for item in obligations
         if item.obligation.direction == LoanDirection.BORROW),
        0.0,
    )
    net_worth = liquid_total + fixed_total + lending_total - borrowing_total
    
    per_member = {member.member_id: 0.0 for member in entities.members}
    for line in lines:
        per_member[line.member_id] = per_member.get(line.member_id, 0.0) + line.converted
    
    inconvertible = {line.entity_id for line in lines if not line.convertible}
    inconvertible.update(
        item.obligation.label for item in obligations if not item.convertible
    )
    
    return AggregateResult(
        base_currency=base_currency,
        net_worth=net_worth,
        liquid_total=liquid_total,
        fixed_total=fixed_total,
        lending_total=lending_total,
        borrowing_total=borrowing_total,
        per_member=per_member,
        inconvertible=inconvertible,
        lines=lines,
        obligations=obligations,
        issues=collector.issues,
    )


def aggregate_snapshot(
    snapshot: LedgerSnapshot,
    base_currency: str,
    collector: Optional[IssueCollector] = None,
    timestamp_formats: Optional[Sequence[str]] = None,
) -> AggregateResult:
    """`aggregate()` over a bundled LedgerSnapshot."""
    return aggregate(
        snapshot.entities,
        snapshot.valuations,
        snapshot.quotes,
        snapshot.loans,
        base_currency,
        collector,
        timestamp_formats,
    )
