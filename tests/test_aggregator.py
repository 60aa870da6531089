"""
Tests for the aggregator, end to end over in-memory records.
"""

import warnings
from pathlib import Path

import pytest

from household_ledger.config import get_settings
from household_ledger.engine import aggregator

from household_ledger.engine.aggregator import (
    InvalidBaseCurrencyError,
    aggregate,
    aggregate_snapshot,
)
from household_ledger.models.diagnostics import EngineIssueType
from household_ledger.models.records import (
    Account,
    EntityKind,
    FixedAsset,
    LoanDirection,
    LoanObligation,
    Member,
    RateQuote,
    ValuationRecord,
)
from household_ledger.models.snapshot import (
    LedgerEntities,
    LedgerSnapshot,
    LedgerValuations,
)


TOL = 1e-9


def _household_snapshot() -> LedgerSnapshot:
    """Two members with accounts and assets, one member with nothing."""
    return LedgerSnapshot(
        entities=LedgerEntities(
            members=[
                Member(member_id="M001", name="Alpha (Head)"),
                Member(member_id="M002", name="Beta (Partner)"),
                Member(member_id="M003", name="Junior"),
            ],
            accounts=[
                Account(account_id="ACC001", name="Main Checking", member_id="M001", currency="USD"),
                Account(account_id="ACC002", name="Retirement 401k", member_id="M002", currency="USD"),
            ],
            fixed_assets=[
                FixedAsset(asset_id="FIX001", name="Condo", member_id="M001",
                           acquisition_price=850000, currency="USD"),
                FixedAsset(asset_id="FIX002", name="Car", member_id="M002",
                           acquisition_price=45000, currency="USD"),
            ],
        ),
        valuations=LedgerValuations(
            liquid=[
                ValuationRecord(entity_id="ACC001", timestamp="2024-03-01", currency="USD", amount=12500),
                ValuationRecord(entity_id="ACC002", timestamp="2024-03-01", currency="USD", amount=185000),
            ],
            fixed=[
                ValuationRecord(entity_id="FIX001", timestamp="2024-03-01", currency="USD", amount=920000),
                ValuationRecord(entity_id="FIX002", timestamp="2024-03-01", currency="USD", amount=32000),
            ],
        ),
        quotes=[
            RateQuote(timestamp="2024-01-01", base_currency="CNY", quote_currency="USD",
                      rate=7.21, source="Central Bank"),
            RateQuote(timestamp="2024-01-01", base_currency="HKD", quote_currency="USD",
                      rate=7.82, source="HKMA"),
        ],
        loans=[
            LoanObligation(member_id="M001", counterparty_id="Brother John",
                           direction=LoanDirection.LEND, currency="USD",
                           amount=5000, timestamp="2024-02-10"),
        ],
    )


class TestEndToEnd:
    """Tests for full aggregation passes."""
    
    def test_single_account_scenario(self):
        """Test 12500 USD at 7.21 is 90162.50 CNY."""
        result = aggregate(
            LedgerEntities(accounts=[Account(account_id="A", member_id="M001")]),
            LedgerValuations(liquid=[
                ValuationRecord(entity_id="A", timestamp="2024-03-01", currency="USD", amount=12500),
            ]),
            [RateQuote(timestamp="2024-01-01", base_currency="CNY", quote_currency="USD", rate=7.21)],
            [],
            "CNY",
        )
        assert result.liquid_total == pytest.approx(90162.50, rel=TOL)
        assert result.net_worth == pytest.approx(90162.50, rel=TOL)
        assert result.base_currency == "CNY"
    
    def test_household_totals_in_cny(self):
        """Test every total for the household ledger."""
        result = aggregate_snapshot(_household_snapshot(), "CNY")
        
        assert result.liquid_total == pytest.approx((12500 + 185000) * 7.21, rel=TOL)
        assert result.fixed_total == pytest.approx((920000 + 32000) * 7.21, rel=TOL)
        assert result.lending_total == pytest.approx(5000 * 7.21, rel=TOL)
        assert result.borrowing_total == 0.0
        assert result.net_worth == pytest.approx(
            (12500 + 185000 + 920000 + 32000 + 5000) * 7.21, rel=TOL
        )
        assert result.inconvertible == set()
    
    def test_household_totals_in_hkd(self):
        """Test conversion into a base currency reached via USD."""
        result = aggregate_snapshot(_household_snapshot(), "HKD")
        assert result.liquid_total == pytest.approx((12500 + 185000) * 7.82, rel=TOL)
    
    def test_per_member_excludes_loans(self):
        """Test that per-member totals count holdings only."""
        result = aggregate_snapshot(_household_snapshot(), "CNY")
        assert result.per_member["M001"] == pytest.approx((12500 + 920000) * 7.21, rel=TOL)
        assert result.per_member["M002"] == pytest.approx((185000 + 32000) * 7.21, rel=TOL)
        assert sum(result.per_member.values()) == pytest.approx(
            result.liquid_total + result.fixed_total, rel=TOL
        )
    
    def test_member_without_holdings_listed_at_zero(self):
        """Test that every known member appears in the breakdown."""
        result = aggregate_snapshot(_household_snapshot(), "CNY")
        assert result.per_member["M003"] == 0.0
        assert list(result.per_member) == ["M001", "M002", "M003"]
    
    def test_lines_per_entity(self):
        """Test the per-entity breakdown."""
        result = aggregate_snapshot(_household_snapshot(), "CNY")
        assert [line.entity_id for line in result.lines] == ["ACC001", "ACC002", "FIX001", "FIX002"]
        assert result.lines[0].kind == EntityKind.ACCOUNT
        assert result.lines[2].kind == EntityKind.FIXED_ASSET
        assert result.lines[0].native.amount == 12500
        assert result.lines[0].factor == 7.21
    
    def test_sum_identity(self):
        """Test net worth is exactly the signed sum of the sub-totals."""
        snapshot = _household_snapshot()
        snapshot = snapshot.model_copy(update={"loans": snapshot.loans + (
            LoanObligation(member_id="M002", counterparty_id="Bank",
                           direction=LoanDirection.BORROW, currency="HKD",
                           amount=300000, timestamp="2024-01-15"),
        )})
        result = aggregate_snapshot(snapshot, "CNY")
        assert result.borrowing_total > 0
        assert result.net_worth == (
            result.liquid_total + result.fixed_total
            + result.lending_total - result.borrowing_total
        )


class TestFallbacks:
    """Tests for entities with no valuation history."""
    
    def test_unvalued_fixed_asset_uses_acquisition_price(self):
        """Test that an unvalued fixed asset counts at acquisition price."""
        result = aggregate(
            LedgerEntities(fixed_assets=[
                FixedAsset(asset_id="FIX001", member_id="M001", acquisition_price=850000, currency="USD"),
            ]),
            LedgerValuations(),
            [RateQuote(timestamp="2024-01-01", base_currency="CNY", quote_currency="USD", rate=7.21)],
            [],
            "CNY",
        )
        assert result.fixed_total == pytest.approx(850000 * 7.21, rel=TOL)
        assert result.lines[0].native.from_fallback is True
    
    def test_unvalued_account_is_zero(self):
        """Test that an unvalued account counts as zero and is not flagged."""
        result = aggregate(
            LedgerEntities(accounts=[Account(account_id="ACC001", member_id="M001")]),
            LedgerValuations(),
            [],
            [],
            "CNY",
        )
        assert result.liquid_total == 0.0
        assert result.inconvertible == set()
        assert result.per_member == {"M001": 0.0}
    
    def test_valuation_currency_used_for_fixed_asset(self):
        """Test that a valuation in another currency converts in its own currency."""
        result = aggregate(
            LedgerEntities(fixed_assets=[
                FixedAsset(asset_id="FIX001", member_id="M001", acquisition_price=850000, currency="USD"),
            ]),
            LedgerValuations(fixed=[
                ValuationRecord(entity_id="FIX001", timestamp="2024-03-01", currency="CNY", amount=6000000),
            ]),
            [RateQuote(timestamp="2024-01-01", base_currency="CNY", quote_currency="USD", rate=7.21)],
            [],
            "CNY",
        )
        assert result.fixed_total == 6000000


class TestUnconvertible:
    """Tests for amounts with no rate path to base."""
    
    def test_disconnected_account_contributes_zero(self):
        """Test that an island currency is zeroed and flagged."""
        result = aggregate(
            LedgerEntities(accounts=[
                Account(account_id="ACC001", member_id="M001"),
                Account(account_id="ACC009", member_id="M001"),
            ]),
            LedgerValuations(liquid=[
                ValuationRecord(entity_id="ACC001", timestamp="2024-03-01", currency="USD", amount=100),
                ValuationRecord(entity_id="ACC009", timestamp="2024-03-01", currency="JPY", amount=1000000),
            ]),
            [RateQuote(timestamp="2024-01-01", base_currency="CNY", quote_currency="USD", rate=7.21)],
            [],
            "CNY",
        )
        assert result.liquid_total == pytest.approx(721.0, rel=TOL)
        assert result.per_member["M001"] == pytest.approx(721.0, rel=TOL)
        assert result.net_worth == pytest.approx(721.0, rel=TOL)
        assert result.inconvertible == {"ACC009"}
        assert result.has_inconvertible is True
        
        flagged = [line for line in result.lines if not line.convertible]
        assert [line.entity_id for line in flagged] == ["ACC009"]
        assert flagged[0].converted == 0.0
        assert flagged[0].native.amount == 1000000
        
        issues = result.issues_of(EngineIssueType.UNCONVERTIBLE)
        assert [issue.subject for issue in issues] == ["ACC009"]
    
    def test_unconvertible_loan_flagged(self):
        """Test that a loan in an island currency is zeroed and flagged."""
        result = aggregate(
            LedgerEntities(),
            LedgerValuations(),
            [],
            [LoanObligation(member_id="M001", counterparty_id="Bank",
                            direction=LoanDirection.BORROW, currency="JPY",
                            amount=500000, timestamp="2024-01-01")],
            "CNY",
        )
        assert result.borrowing_total == 0.0
        assert result.net_worth == 0.0
        assert result.inconvertible == {"loan:M001:Bank:borrow"}


class TestLoanTotals:
    """Tests for lending and borrowing totals."""
    
    def test_superseded_loan_replaced(self):
        """Test that a newer record for the same key replaces the older amount."""
        loans = [
            LoanObligation(member_id="M001", counterparty_id="Brother John",
                           direction=LoanDirection.LEND, currency="CNY",
                           amount=5000, timestamp="2024-02-10"),
            LoanObligation(member_id="M001", counterparty_id="Brother John",
                           direction=LoanDirection.LEND, currency="CNY",
                           amount=2000, timestamp="2024-05-10"),
        ]
        result = aggregate(LedgerEntities(), LedgerValuations(), [], loans, "CNY")
        assert result.lending_total == 2000
        assert result.net_worth == 2000
    
    def test_settled_loan_removed(self):
        """Test that a settled latest record removes the whole obligation."""
        loans = [
            LoanObligation(member_id="M001", counterparty_id="Bank",
                           direction=LoanDirection.BORROW, currency="CNY",
                           amount=100000, timestamp="2024-01-01"),
            LoanObligation(member_id="M001", counterparty_id="Bank",
                           direction=LoanDirection.BORROW, currency="CNY",
                           amount=0, timestamp="2024-09-01", settled=True),
        ]
        result = aggregate(LedgerEntities(), LedgerValuations(), [], loans, "CNY")
        assert result.borrowing_total == 0.0
        assert result.obligations == []
    
    def test_borrowing_is_a_liability(self):
        """Test that borrowed money reduces net worth."""
        loans = [
            LoanObligation(member_id="M001", counterparty_id="Bank",
                           direction=LoanDirection.BORROW, currency="CNY",
                           amount=300, timestamp="2024-01-01"),
        ]
        result = aggregate(
            LedgerEntities(accounts=[Account(account_id="A", member_id="M001")]),
            LedgerValuations(liquid=[
                ValuationRecord(entity_id="A", timestamp="2024-03-01", currency="CNY", amount=1000),
            ]),
            [],
            loans,
            "CNY",
        )
        assert result.net_worth == 700
        assert result.per_member["M001"] == 1000


class TestContract:
    """Tests for purity and graceful degradation."""
    
    def test_empty_store(self):
        """Test that an empty ledger yields zero totals and info issues."""
        result = aggregate(LedgerEntities(), LedgerValuations(), [], [], "CNY")
        assert result.net_worth == 0.0
        assert result.per_member == {}
        assert {issue.subject for issue in result.issues_of(EngineIssueType.EMPTY_STORE)} == {
            "account", "fixed asset", "loan",
        }
    
    def test_empty_base_currency_rejected(self):
        """Test that an empty base currency is a caller error."""
        with pytest.raises(InvalidBaseCurrencyError):
            aggregate(LedgerEntities(), LedgerValuations(), [], [], "")
    
    def test_inputs_not_mutated(self):
        """Test that quote and loan lists are left untouched."""
        snapshot = _household_snapshot()
        quotes = list(snapshot.quotes)
        loans = list(snapshot.loans)
        before = (list(quotes), list(loans))
        
        aggregate(snapshot.entities, snapshot.valuations, quotes, loans, "CNY")
        
        assert (quotes, loans) == before
    
    def test_repeated_calls_are_independent(self):
        """Test that two calls on the same snapshot give equal results."""
        snapshot = _household_snapshot()
        first = aggregate_snapshot(snapshot, "CNY")
        second = aggregate_snapshot(snapshot, "CNY")
        assert first.net_worth == second.net_worth
        assert first is not second
        assert first.issues is not second.issues
    
    def test_malformed_records_degrade(self):
        """Test that bad quotes and timestamps never fail the computation."""
        result = aggregate(
            LedgerEntities(accounts=[Account(account_id="A", member_id="M001")]),
            LedgerValuations(liquid=[
                ValuationRecord(entity_id="A", timestamp="2024-03-01", currency="USD", amount=10),
                ValuationRecord(entity_id="A", timestamp="garbage", currency="USD", amount=99999),
            ]),
            [
                RateQuote(timestamp="2024-01-01", base_currency="CNY", quote_currency="USD", rate=7.0),
                RateQuote(timestamp="2024-02-01", base_currency="CNY", quote_currency="EUR", rate=float("nan")),
            ],
            [],
            "CNY",
        )
        assert result.liquid_total == pytest.approx(70.0, rel=TOL)
        assert result.issues_of(EngineIssueType.MALFORMED_TIMESTAMP)
        assert result.issues_of(EngineIssueType.INVALID_QUOTE)
    
    def test_result_ignores_environment(self, monkeypatch):
        """Test that timestamp format settings cannot change a direct call."""
        entities = LedgerEntities(accounts=[Account(account_id="A", member_id="M001", currency="CNY")])
        valuations = LedgerValuations(liquid=[
            ValuationRecord(entity_id="A", timestamp="2024-01-01", currency="CNY", amount=100),
            ValuationRecord(entity_id="A", timestamp="2024/06/01", currency="CNY", amount=200),
        ])
        
        first = aggregate(entities, valuations, [], [], "CNY")
        monkeypatch.setenv("LEDGER_TIMESTAMP_FORMATS", "%d/%m/%Y")
        get_settings.cache_clear()
        try:
            second = aggregate(entities, valuations, [], [], "CNY")
        finally:
            get_settings.cache_clear()
        
        assert first.liquid_total == 200.0
        assert second.liquid_total == 200.0
    
    def test_explicit_timestamp_formats(self):
        """Test that passed-in formats decide which timestamps parse."""
        entities = LedgerEntities(accounts=[Account(account_id="A", member_id="M001", currency="CNY")])
        valuations = LedgerValuations(liquid=[
            ValuationRecord(entity_id="A", timestamp="2024-01-01", currency="CNY", amount=100),
            ValuationRecord(entity_id="A", timestamp="01.06.2024", currency="CNY", amount=200),
        ])
        
        default = aggregate(entities, valuations, [], [], "CNY")
        dotted = aggregate(entities, valuations, [], [], "CNY", timestamp_formats=["%d.%m.%Y"])
        
        assert default.liquid_total == 100.0
        assert default.issues_of(EngineIssueType.MALFORMED_TIMESTAMP)
        assert dotted.liquid_total == 200.0
        assert not dotted.issues_of(EngineIssueType.MALFORMED_TIMESTAMP)
    
    def test_far_future_aware_timestamp(self):
        """Test that an out-of-range UTC shift degrades instead of raising."""
        result = aggregate(
            LedgerEntities(accounts=[Account(account_id="A", member_id="M001", currency="CNY")]),
            LedgerValuations(liquid=[
                ValuationRecord(entity_id="A", timestamp="9999-12-31T23:00:00-05:00",
                                currency="CNY", amount=300),
                ValuationRecord(entity_id="A", timestamp="2024-01-01", currency="CNY", amount=100),
            ]),
            [],
            [],
            "CNY",
        )
        assert result.liquid_total == 300.0
    
    def test_module_compiles_without_warnings(self):
        """Test that the module source has no invalid escape sequences."""
        source = Path(aggregator.__file__).read_text(encoding="utf-8")
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            compile(source, aggregator.__file__, "exec")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
