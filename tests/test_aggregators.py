"""
Tests for fin_analytics/engine/aggregators.py

Covers:
- Savings: expense average over distinct months, emergency fund months
- Investment: allow-list matching, unrealized gain %, diversification
- Spending: monthly normalization, uncategorized bucket, top categories
- Anomalies: minimum months, zero-std skip, missing months as zero
- Liability: "Other" bucket, debt-to-asset ratio
- Growth: compound rate, flat fallbacks
- Balance: monthly averages and savings rate
"""

import pytest

from fin_analytics.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from fin_analytics.engine.aggregators import (
    compute_balance,
    compute_growth,
    compute_investment,
    compute_liability,
    compute_savings,
    compute_spending,
    detect_anomalies,
    diversification_score,
)
from fin_analytics.models import (
    AssetSnapshot,
    CollectedData,
    Holding,
    Transaction,
    TransactionType,
)


# =============================================================================
# Test Fixtures
# =============================================================================


def make_expense(date: str, amount: int, category: str = "Food") -> Transaction:
    """Create an expense transaction."""
    return Transaction(date=date, category=category, amount=amount, type=TransactionType.EXPENSE)


def make_income(date: str, amount: int, category: str = "Salary") -> Transaction:
    """Create an income transaction."""
    return Transaction(date=date, category=category, amount=amount, type=TransactionType.INCOME)


def make_holding(
    name: str,
    amount: int,
    category_name: str = "Stocks",
    unrealized_gain: int = None,
    is_liability: bool = False,
    liability_category: str = None,
) -> Holding:
    """Create a holding."""
    return Holding(
        name=name,
        category_name=category_name,
        amount=amount,
        unrealized_gain=unrealized_gain,
        is_liability=is_liability,
        liability_category=liability_category,
    )


# =============================================================================
# Savings
# =============================================================================


class TestComputeSavings:
    """Tests for compute_savings."""

    def test_emergency_fund_months(self):
        data = CollectedData(
            total_assets=2_000_000,
            liquid_assets=450_000,
            transactions=[
                make_expense("2025-01-10", 100_000),
                make_expense("2025-02-10", 200_000),
                make_income("2025-02-25", 500_000),
            ],
        )
        result = compute_savings(data)

        assert result.monthly_expense_avg == 150_000
        assert result.emergency_fund_months == pytest.approx(3.0)
        assert result.total_assets == 2_000_000
        assert result.liquid_assets == 450_000

    def test_expense_average_rounds_half_up(self):
        data = CollectedData(
            transactions=[make_expense("2025-01-10", 1), make_expense("2025-02-10", 2)],
        )
        assert compute_savings(data).monthly_expense_avg == 2

    def test_no_expenses(self):
        data = CollectedData(liquid_assets=100_000)
        result = compute_savings(data)

        assert result.monthly_expense_avg == 0
        assert result.emergency_fund_months == 0


# =============================================================================
# Investment
# =============================================================================


class TestDiversificationScore:
    """Tests for diversification_score."""

    def test_no_holdings(self):
        assert diversification_score([]) == 0

    def test_single_holding(self):
        assert diversification_score([1_000_000]) == 10

    def test_two_equal_holdings(self):
        assert diversification_score([500, 500]) == 50

    def test_four_equal_holdings(self):
        assert diversification_score([250, 250, 250, 250]) == 75

    def test_zero_total(self):
        assert diversification_score([0, 0]) == 0

    def test_single_holding_score_is_configurable(self):
        config = EngineConfig(single_holding_diversification=5)
        assert diversification_score([100], config) == 5


class TestComputeInvestment:
    """Tests for compute_investment."""

    def test_filters_to_investment_categories(self):
        data = CollectedData(
            holdings=[
                make_holding("Index Fund", 600_000, "US Stocks", unrealized_gain=100_000),
                make_holding("Bond Fund", 400_000, "Mutual Funds", unrealized_gain=-50_000),
                make_holding("Checking", 300_000, "Deposits / Cash / Crypto"),
                make_holding("Mortgage", 5_000_000, "Stocks", is_liability=True),
            ],
        )
        result = compute_investment(data)

        assert [h.name for h in result.holdings] == ["Index Fund", "Bond Fund"]
        assert result.total_investment == 1_000_000
        assert result.total_unrealized_gain == 50_000
        # 50,000 / (1,000,000 - 50,000)
        assert result.total_unrealized_gain_pct == pytest.approx(5.26)
        # 1 - (0.6^2 + 0.4^2) = 0.48
        assert result.diversification_score == 48

    def test_missing_gain_counts_as_zero(self):
        data = CollectedData(holdings=[make_holding("ETF", 100_000, "Stocks")])
        result = compute_investment(data)

        assert result.holdings[0].unrealized_gain == 0
        assert result.total_unrealized_gain_pct == 0

    def test_no_investments(self):
        result = compute_investment(CollectedData())

        assert result.holdings == []
        assert result.total_investment == 0
        assert result.diversification_score == 0


# =============================================================================
# Spending
# =============================================================================


class TestComputeSpending:
    """Tests for compute_spending."""

    def test_monthly_normalized_categories(self):
        data = CollectedData(
            transactions=[
                make_expense("2025-01-05", 30_000, "Food"),
                make_expense("2025-01-25", 100_000, "Rent"),
                make_expense("2025-02-05", 50_000, "Food"),
                make_expense("2025-02-25", 100_000, "Rent"),
                Transaction(date="2025-02-28", category=None, amount=20_000, type="expense"),
                make_income("2025-02-25", 400_000),
            ],
        )
        result = compute_spending(data)

        assert result.monthly_average == 150_000
        assert result.by_category == {"Food": 40_000, "Rent": 100_000, "Uncategorized": 10_000}
        assert list(result.by_category) == ["Food", "Rent", "Uncategorized"]

        top = result.top_categories
        assert [c.category for c in top] == ["Rent", "Food", "Uncategorized"]
        assert top[0].pct == pytest.approx(66.7)
        assert top[1].pct == pytest.approx(26.7)
        assert top[2].pct == pytest.approx(6.7)

    def test_top_categories_limit(self):
        transactions = [
            make_expense("2025-01-01", 1_000 * (i + 1), f"Cat{i}") for i in range(7)
        ]
        result = compute_spending(CollectedData(transactions=transactions))

        assert len(result.top_categories) == 5
        assert result.top_categories[0].category == "Cat6"

    def test_empty(self):
        result = compute_spending(CollectedData())

        assert result.monthly_average == 0
        assert result.by_category == {}
        assert result.top_categories == []
        assert result.anomalies == []


class TestDetectAnomalies:
    """Tests for detect_anomalies."""

    def make_history(self) -> list[Transaction]:
        return [
            make_expense("2025-01-10", 10_000, "Food"),
            make_expense("2025-02-10", 12_000, "Food"),
            make_expense("2025-03-10", 11_000, "Food"),
            make_expense("2025-04-10", 20_000, "Food"),
            make_expense("2025-01-01", 100_000, "Rent"),
            make_expense("2025-02-01", 100_000, "Rent"),
            make_expense("2025-03-01", 100_000, "Rent"),
            make_expense("2025-04-01", 150_000, "Rent"),
            make_expense("2025-02-14", 1_000, "Gifts"),
            make_expense("2025-04-14", 5_000, "Gifts"),
            make_expense("2025-04-20", 80_000, "Travel"),
        ]

    def test_flags_latest_month_spike(self):
        anomalies = detect_anomalies(self.make_history())
        by_category = {a.category: a for a in anomalies}

        assert "Food" in by_category
        assert by_category["Food"].amount == 20_000
        # (20,000 - 11,000) / 816.5
        assert by_category["Food"].deviation == pytest.approx(11.02)

    def test_missing_history_month_counts_as_zero(self):
        anomalies = detect_anomalies(self.make_history())
        by_category = {a.category: a for a in anomalies}

        # History [0, 1000, 0]: mean 333.3, std 471.4
        assert by_category["Gifts"].deviation == pytest.approx(9.90)

    def test_zero_std_and_new_categories_never_flagged(self):
        categories = [a.category for a in detect_anomalies(self.make_history())]

        assert "Rent" not in categories
        assert "Travel" not in categories

    def test_sorted_by_deviation(self):
        anomalies = detect_anomalies(self.make_history())

        assert [a.category for a in anomalies] == ["Food", "Gifts"]

    def test_requires_three_months(self):
        transactions = [
            make_expense("2025-01-10", 10_000),
            make_expense("2025-02-10", 90_000),
        ]
        assert detect_anomalies(transactions) == []

    def test_max_anomalies(self):
        transactions = []
        for i in range(5):
            category = f"Cat{i}"
            transactions += [
                make_expense("2025-01-10", 1_000, category),
                make_expense("2025-02-10", 1_200, category),
                make_expense("2025-03-10", 10_000 * (i + 1), category),
            ]
        anomalies = detect_anomalies(transactions)

        assert len(anomalies) == 3
        assert anomalies[0].category == "Cat4"


# =============================================================================
# Liability
# =============================================================================


class TestComputeLiability:
    """Tests for compute_liability."""

    def test_by_category_and_ratio(self):
        data = CollectedData(
            total_assets=1_000_000,
            holdings=[
                make_holding("Card", 50_000, None, is_liability=True, liability_category="Credit Card"),
                make_holding("Loan", 150_000, None, is_liability=True),
                make_holding("ETF", 500_000, "Stocks"),
            ],
        )
        result = compute_liability(data)

        assert result.total_liabilities == 200_000
        assert [(c.category, c.amount, c.pct) for c in result.by_category] == [
            ("Other", 150_000, 75.0),
            ("Credit Card", 50_000, 25.0),
        ]
        assert result.debt_to_asset_ratio == pytest.approx(20.0)

    def test_zero_assets(self):
        data = CollectedData(
            holdings=[make_holding("Loan", 150_000, None, is_liability=True)],
        )
        assert compute_liability(data).debt_to_asset_ratio == 0

    def test_no_liabilities(self):
        result = compute_liability(CollectedData(total_assets=100))

        assert result.total_liabilities == 0
        assert result.by_category == []


# =============================================================================
# Growth
# =============================================================================


class TestComputeGrowth:
    """Tests for compute_growth."""

    def test_compound_monthly_growth(self):
        data = CollectedData(
            total_assets=1_061_520,
            asset_history=[
                AssetSnapshot(date="2025-07-01", total_assets=1_061_520),
                AssetSnapshot(date="2025-01-01", total_assets=1_000_000),
            ],
        )
        result = compute_growth(data)

        assert result.monthly_growth_rate == pytest.approx(0.01)
        assert result.projected_annual_rate == pytest.approx(0.127)
        assert [p.years for p in result.projections] == [1, 3, 5]
        assert result.projections[0].amount == pytest.approx(1_061_520 * 1.01 ** 12, abs=1)
        assert result.projections[2].amount == pytest.approx(1_061_520 * 1.01 ** 60, abs=1)

    def test_declining_assets(self):
        data = CollectedData(
            total_assets=900_000,
            asset_history=[
                AssetSnapshot(date="2025-01-01", total_assets=1_000_000),
                AssetSnapshot(date="2025-11-01", total_assets=900_000),
            ],
        )
        result = compute_growth(data)

        assert result.monthly_growth_rate < 0
        assert result.projections[0].amount < 900_000

    @pytest.mark.parametrize(
        "history",
        [
            [],
            [("2025-01-01", 1_000_000)],
            [("2025-01-01", 1_000_000), ("2025-01-31", 1_200_000)],
            [("2025-01-01", 0), ("2025-06-01", 1_000_000)],
            [("2025-01-01", 1_000_000), ("2025-06-01", -5_000)],
            [("2025-01-01", 1_000_000), ("2026-01-01", 1_000_050)],
        ],
        ids=["empty", "single", "same-month", "zero-start", "negative-end", "negligible"],
    )
    def test_flat_fallbacks(self, history):
        data = CollectedData(
            total_assets=750_000,
            asset_history=[AssetSnapshot(date=d, total_assets=v) for d, v in history],
        )
        result = compute_growth(data)

        assert result.monthly_growth_rate == 0
        assert result.projected_annual_rate == 0
        assert [p.amount for p in result.projections] == [750_000, 750_000, 750_000]


# =============================================================================
# Balance
# =============================================================================


class TestComputeBalance:
    """Tests for compute_balance."""

    def test_monthly_averages(self):
        data = CollectedData(
            transactions=[
                make_income("2025-01-25", 300_000),
                make_expense("2025-01-10", 200_000),
                make_income("2025-02-25", 300_000),
                make_expense("2025-02-10", 250_000),
            ],
        )
        result = compute_balance(data)

        assert result.monthly_income == 300_000
        assert result.monthly_expense == 225_000
        assert result.savings_rate == pytest.approx(25.0)
        assert [(p.month, p.balance) for p in result.trend] == [
            ("2025-01", 100_000),
            ("2025-02", 50_000),
        ]

    def test_empty(self):
        result = compute_balance(CollectedData())

        assert result.monthly_income == 0
        assert result.monthly_expense == 0
        assert result.savings_rate == 0
        assert result.trend == []


class TestDefaultConfig:
    """The module-level default config drives every aggregator."""

    def test_default_labels(self):
        assert DEFAULT_ENGINE_CONFIG.uncategorized_label == "Uncategorized"
        assert DEFAULT_ENGINE_CONFIG.other_liability_label == "Other"
