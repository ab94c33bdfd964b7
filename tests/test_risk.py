"""
Tests for fin_analytics/engine/risk.py

Covers:
- Spending comparison: trailing averages, severity (including zero std),
  ranking, top movers, totals, new categories
- Portfolio risk: concentration, volatility, risk level, gains/losses
"""

import pytest

from fin_analytics.engine.risk import analyze_portfolio_risk, analyze_spending_comparison
from fin_analytics.models import CategoryTotal, DailyChangeInfo, HoldingInfo, TransactionType


# =============================================================================
# Test Fixtures
# =============================================================================


MONTHS = ["2025-01", "2025-02", "2025-03", "2025-04"]


def make_totals(category: str, amounts: list[int], months: list[str] = MONTHS) -> list[CategoryTotal]:
    """Create expense totals for one category; zero amounts are omitted."""
    return [
        CategoryTotal(
            month=month,
            category=category,
            type=TransactionType.EXPENSE,
            total_amount=amount,
        )
        for month, amount in zip(months, amounts)
        if amount
    ]


def make_holding(name: str, amount: int, gain: int = 0, gain_pct: float = 0.0) -> HoldingInfo:
    """Create a portfolio holding."""
    return HoldingInfo(name=name, amount=amount, unrealized_gain=gain, unrealized_gain_pct=gain_pct)


# =============================================================================
# Spending Comparison
# =============================================================================


class TestAnalyzeSpendingComparison:
    """Tests for analyze_spending_comparison."""

    def make_category_totals(self) -> list[CategoryTotal]:
        return (
            make_totals("Food", [10_000, 12_000, 11_000, 20_000])
            + make_totals("Rent", [100_000, 100_000, 100_000, 100_000])
            + make_totals("Utilities", [10_000, 10_000, 10_000, 12_000])
            + make_totals("Travel", [0, 0, 0, 30_000])
            + make_totals("Hobby", [5_000, 6_000, 7_000, 4_000])
            + [
                CategoryTotal(
                    month="2025-04",
                    category="Salary",
                    type=TransactionType.INCOME,
                    total_amount=500_000,
                )
            ]
        )

    def analyze(self):
        return analyze_spending_comparison(self.make_category_totals(), "2025-04")

    def test_empty(self):
        result = analyze_spending_comparison([], "2025-04")

        assert result.categories == []
        assert result.total_current_expense == 0
        assert result.total_previous_month_expense is None
        assert result.total_change_rate is None

    def test_trailing_average_and_deviation(self):
        food = {c.category: c for c in self.analyze().categories}["Food"]

        assert food.current_amount == 20_000
        assert food.three_month_avg == pytest.approx(11_000)
        assert food.six_month_avg is None
        assert food.deviation_from_three_month == pytest.approx(9_000)
        assert food.deviation_from_three_month_pct == pytest.approx(9_000 / 11_000 * 100)

    def test_severity(self):
        by_category = {c.category: c for c in self.analyze().categories}

        assert by_category["Food"].severity == "anomalous"
        # Drops count too: |4,000 - 6,000| / 816 > 2
        assert by_category["Hobby"].severity == "anomalous"
        # Zero std: above the flat history is elevated, equal is normal
        assert by_category["Utilities"].severity == "elevated"
        assert by_category["Travel"].severity == "elevated"
        assert by_category["Rent"].severity == "normal"

    def test_zero_average_has_no_pct(self):
        travel = {c.category: c for c in self.analyze().categories}["Travel"]

        assert travel.three_month_avg == 0
        assert travel.deviation_from_three_month == pytest.approx(30_000)
        assert travel.deviation_from_three_month_pct is None
        assert travel.previous_proportion_of_total == 0

    def test_ranking(self):
        result = self.analyze()

        assert [c.category for c in result.categories] == [
            "Food",
            "Hobby",
            "Travel",
            "Utilities",
            "Rent",
        ]
        assert result.anomalous_count == 2
        assert result.elevated_count == 2

    def test_top_movers(self):
        result = self.analyze()

        assert [m.category for m in result.top_increasing] == ["Travel", "Food", "Utilities"]
        assert [m.category for m in result.top_decreasing] == ["Hobby"]
        assert result.top_decreasing[0].diff == pytest.approx(-2_000)

    def test_totals_ignore_income(self):
        result = self.analyze()

        assert result.total_current_expense == 166_000
        assert result.total_previous_month_expense == 128_000
        assert result.total_change_rate == pytest.approx(38_000 / 128_000 * 100)

    def test_proportions(self):
        food = {c.category: c for c in self.analyze().categories}["Food"]

        assert food.proportion_of_total == pytest.approx(20_000 / 166_000 * 100)
        assert food.previous_proportion_of_total == pytest.approx(11_000 / 128_000 * 100)

    def test_category_trend(self):
        by_category = {c.category: c for c in self.analyze().categories}

        assert by_category["Food"].trend_direction == "increasing"
        assert by_category["Hobby"].trend_direction == "decreasing"
        assert by_category["Rent"].trend_direction == "stable"

    def test_single_month_is_all_new(self):
        totals = make_totals("Food", [5_000], ["2025-04"]) + make_totals("Rent", [90_000], ["2025-04"])
        result = analyze_spending_comparison(totals, "2025-04")

        assert result.new_categories == ["Food", "Rent"]
        assert result.total_previous_month_expense is None
        assert result.total_change_rate is None
        assert all(c.severity == "normal" for c in result.categories)
        assert all(c.trend_direction == "unknown" for c in result.categories)
        assert all(c.three_month_avg is None for c in result.categories)

    def test_six_month_average(self):
        months = [f"2025-{m:02d}" for m in range(1, 8)]
        totals = make_totals("Food", [1_000, 2_000, 3_000, 4_000, 5_000, 6_000, 7_000], months)
        food = analyze_spending_comparison(totals, "2025-07").categories[0]

        assert food.six_month_avg == pytest.approx(3_500)
        assert food.deviation_from_six_month == pytest.approx(3_500)
        assert food.deviation_from_six_month_pct == pytest.approx(100.0)


# =============================================================================
# Portfolio Risk
# =============================================================================


class TestAnalyzePortfolioRisk:
    """Tests for analyze_portfolio_risk."""

    def make_holdings(self) -> list[HoldingInfo]:
        return [
            make_holding("A", 500_000, 50_000, 11.1),
            make_holding("B", 300_000, -30_000, -9.1),
            make_holding("C", 150_000, 0, 0.0),
            make_holding("D", 50_000, 10_000, 25.0),
        ]

    def make_daily_changes(self) -> list[DailyChangeInfo]:
        return [
            DailyChangeInfo(name="A", daily_change=5_000),
            DailyChangeInfo(name="B", daily_change=-8_000),
            DailyChangeInfo(name="D", daily_change=0),
        ]

    def test_empty(self):
        result = analyze_portfolio_risk([], [], 0)

        assert result.risk_level == "low"
        assert result.holdings_count == 0
        assert result.max_holding is None
        assert result.top_concentration.names == []

    def test_concentration(self):
        result = analyze_portfolio_risk(self.make_holdings(), self.make_daily_changes(), 62)

        assert result.top_concentration.names == ["A", "B", "C"]
        assert result.top_concentration.total_pct == pytest.approx(95.0)
        assert result.max_holding.name == "A"
        assert result.max_holding.pct == pytest.approx(50.0)
        # Top-3 share above 80% is high risk whatever the diversification
        assert result.risk_level == "high"

    def test_volatility(self):
        result = analyze_portfolio_risk(self.make_holdings(), self.make_daily_changes(), 62)

        assert [(v.name, v.daily_change) for v in result.volatile_holdings] == [
            ("B", -8_000),
            ("A", 5_000),
        ]
        assert result.volatile_holdings[0].portfolio_impact_pct == pytest.approx(0.8)
        assert result.total_daily_change == -3_000
        assert result.total_daily_change_pct == pytest.approx(-0.3)

    def test_gains_and_losses(self):
        result = analyze_portfolio_risk(self.make_holdings(), self.make_daily_changes(), 62)

        assert result.holdings_count == 4
        assert result.positive_count == 2
        assert result.negative_count == 1
        assert result.max_gain_holding.name == "A"
        assert result.max_loss_holding.name == "B"
        assert result.max_loss_holding.unrealized_gain == -30_000
        assert result.total_unrealized_gain == 30_000
        assert result.total_unrealized_gain_pct == pytest.approx(30_000 / 970_000 * 100)

    @pytest.mark.parametrize(
        "diversification,expected",
        [(20, "high"), (50, "moderate"), (80, "low")],
    )
    def test_risk_level_by_diversification(self, diversification, expected):
        # Five equal holdings: top-3 share is exactly 60%
        holdings = [make_holding(f"H{i}", 200_000) for i in range(5)]
        result = analyze_portfolio_risk(holdings, [], diversification)

        assert result.top_concentration.total_pct == pytest.approx(60.0)
        assert result.risk_level == expected

    def test_volatile_holdings_limit(self):
        holdings = [make_holding(f"H{i}", 100_000) for i in range(7)]
        changes = [DailyChangeInfo(name=f"H{i}", daily_change=(i + 1) * 100) for i in range(7)]
        result = analyze_portfolio_risk(holdings, changes, 80)

        assert [v.name for v in result.volatile_holdings] == ["H6", "H5", "H4", "H3", "H2"]
