"""
Pydantic models for the finance analytics engine.

This module contains all data models: engine inputs, metric records,
analyzer results, narrative/report records and API payloads.
Models handle validation and serialization only - no business logic.
"""

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================


class TransactionType(str, Enum):
    """Direction of a cash-flow transaction."""

    INCOME = "income"
    EXPENSE = "expense"


class AnalyzerName(str, Enum):
    """Identifiers of the historical trend/risk analyzers."""

    MOM_TREND = "mom_trend"
    INCOME_STABILITY = "income_stability"
    SAVINGS_TRAJECTORY = "savings_trajectory"
    SPENDING_COMPARISON = "spending_comparison"
    PORTFOLIO_RISK = "portfolio_risk"


StreakDirection = Literal["increasing", "decreasing", "none"]


# =============================================================================
# Engine Input Models
# =============================================================================


class Holding(BaseModel):
    """
    A single asset or liability position at the latest snapshot.

    Liabilities carry is_liability=True; every other holding is an asset.
    """

    name: str = Field(..., description="Display name of the holding")
    category_name: Optional[str] = Field(None, description="Asset category name")
    amount: int = Field(0, description="Current value in the smallest currency unit")
    unrealized_gain: Optional[int] = Field(None, description="Unrealized gain (None if unknown)")
    unrealized_gain_pct: Optional[float] = Field(None, description="Unrealized gain %")
    daily_change: Optional[int] = Field(None, description="Value change since previous day")
    is_liability: bool = Field(False, description="True for debts (loans, card balances)")
    liability_category: Optional[str] = Field(None, description="Liability category name")


class Transaction(BaseModel):
    """A single income or expense record. Amount is always a magnitude."""

    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$", description="YYYY-MM-DD")
    category: Optional[str] = Field(None, description="Spending/income category")
    amount: int = Field(..., description="Magnitude in the smallest currency unit")
    type: TransactionType = Field(..., description="income / expense")


class AssetSnapshot(BaseModel):
    """Daily total-asset snapshot."""

    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$", description="YYYY-MM-DD")
    total_assets: int = Field(..., description="Total assets on this date")
    change: int = Field(0, description="Day-over-day change")


class CollectedData(BaseModel):
    """
    Immutable snapshot consumed by every category aggregator.

    Already scoped to one reporting group and a 12-month lookback, with the
    in-progress calendar month removed from transactions.
    """

    total_assets: int = Field(0, description="Latest total assets")
    liquid_assets: int = Field(0, description="Cash-like assets")
    holdings: list[Holding] = Field(default_factory=list)
    transactions: list[Transaction] = Field(default_factory=list)
    asset_history: list[AssetSnapshot] = Field(default_factory=list)


# =============================================================================
# Series Models (derived views)
# =============================================================================


class MonthlySummary(BaseModel):
    """Income/expense totals for one calendar month."""

    month: str = Field(..., pattern=r"^\d{4}-\d{2}$", description="YYYY-MM")
    total_income: int = Field(0)
    total_expense: int = Field(0)
    net_income: int = Field(0, description="total_income - total_expense")


class CategoryTotal(BaseModel):
    """Per-month, per-category transaction total."""

    month: str = Field(..., pattern=r"^\d{4}-\d{2}$", description="YYYY-MM")
    category: str
    type: TransactionType
    total_amount: int


class HoldingInfo(BaseModel):
    """Investment holding as seen by the portfolio risk analyzer."""

    name: str
    amount: int
    unrealized_gain: int = 0
    unrealized_gain_pct: float = 0.0


class DailyChangeInfo(BaseModel):
    """Daily value change of one holding."""

    name: str
    daily_change: int


# =============================================================================
# Category Metrics
# =============================================================================


class SavingsMetrics(BaseModel):
    """Cash runway metrics."""

    total_assets: int = 0
    liquid_assets: int = 0
    monthly_expense_avg: int = Field(0, description="Rounded to integer")
    emergency_fund_months: float = Field(0.0, description="Rounded to 1 decimal")


class InvestmentHolding(BaseModel):
    """Investment holding with null gains normalized to zero."""

    name: str
    amount: int
    unrealized_gain: int = 0
    unrealized_gain_pct: float = 0.0


class InvestmentMetrics(BaseModel):
    """Investment portfolio metrics."""

    holdings: list[InvestmentHolding] = Field(default_factory=list)
    total_investment: int = 0
    total_unrealized_gain: int = 0
    total_unrealized_gain_pct: float = Field(0.0, description="Rounded to 2 decimals")
    diversification_score: int = Field(0, ge=0, le=100, description="1 - Herfindahl, 0-100")


class CategoryAmount(BaseModel):
    """A category's (monthly-normalized) amount and share of the total."""

    category: str
    amount: int
    pct: float = Field(..., description="Share of total, rounded to 1 decimal")


class SpendingAnomaly(BaseModel):
    """Latest-month category spend far above its history."""

    category: str
    amount: int
    deviation: float = Field(..., description="Z-score, rounded to 2 decimals")


class SpendingMetrics(BaseModel):
    """Spending breakdown and anomalies."""

    monthly_average: int = 0
    by_category: dict[str, int] = Field(default_factory=dict)
    top_categories: list[CategoryAmount] = Field(default_factory=list)
    anomalies: list[SpendingAnomaly] = Field(default_factory=list)


class Projection(BaseModel):
    """Projected total assets after a number of years."""

    years: int
    amount: int


class GrowthMetrics(BaseModel):
    """Compound asset growth and projections."""

    monthly_growth_rate: float = Field(0.0, description="Rounded to 4 decimals")
    projected_annual_rate: float = Field(0.0, description="Rounded to 3 decimals")
    projections: list[Projection] = Field(default_factory=list)


class BalanceTrendPoint(BaseModel):
    """One month of the income/expense trend."""

    month: str
    income: int
    expense: int
    balance: int


class BalanceMetrics(BaseModel):
    """Monthly income/expense balance."""

    monthly_income: int = 0
    monthly_expense: int = 0
    savings_rate: float = Field(0.0, description="Rounded to 1 decimal")
    trend: list[BalanceTrendPoint] = Field(default_factory=list)


class LiabilityMetrics(BaseModel):
    """Debt totals by category."""

    total_liabilities: int = 0
    by_category: list[CategoryAmount] = Field(default_factory=list)
    debt_to_asset_ratio: float = Field(0.0, description="Rounded to 1 decimal")


class HealthScoreCategory(BaseModel):
    """One scored dimension of the health score."""

    name: str
    score: int = Field(..., ge=0)
    max_score: int = Field(..., gt=0)


class HealthScore(BaseModel):
    """Composite 0-100 financial health score."""

    total_score: int = Field(..., ge=0, le=100)
    categories: list[HealthScoreCategory]


class AnalyticsMetrics(BaseModel):
    """
    Full metrics bundle for one snapshot.

    This is the primary output of the engine and the input to narrative
    generation.
    """

    savings: SavingsMetrics
    investment: InvestmentMetrics
    spending: SpendingMetrics
    growth: GrowthMetrics
    balance: BalanceMetrics
    liability: LiabilityMetrics
    health_score: HealthScore


# =============================================================================
# Analyzer Result Models
# =============================================================================


class Streak(BaseModel):
    """Trailing run of strictly monotonic values."""

    direction: StreakDirection = "none"
    months: int = 0


class MonthComparison(BaseModel):
    """A month's totals compared with the prior month (None for the first month)."""

    month: str
    total_income: int
    total_expense: int
    net_income: int
    savings_rate: float
    income_diff: Optional[int] = None
    expense_diff: Optional[int] = None
    net_income_diff: Optional[int] = None
    income_change_rate: Optional[float] = None
    expense_change_rate: Optional[float] = None
    net_income_change_rate: Optional[float] = None


class TrendStreaks(BaseModel):
    """Streaks over the four monthly series."""

    income_streak: Streak = Field(default_factory=Streak)
    expense_streak: Streak = Field(default_factory=Streak)
    net_income_streak: Streak = Field(default_factory=Streak)
    savings_rate_streak: Streak = Field(default_factory=Streak)


class MonthNetIncome(BaseModel):
    """Month with its net income."""

    month: str
    net_income: int


class RollingAverage(BaseModel):
    """Average of the trailing N months."""

    income: float
    expense: float
    net_income: float
    savings_rate: float


class LatestVsAverage(BaseModel):
    """Latest month compared with the trailing 3-month average."""

    income_diff: float
    income_diff_pct: float
    expense_diff: float
    expense_diff_pct: float
    net_income_diff: float


class MoMTrendResult(BaseModel):
    """Month-over-month trend analysis."""

    latest_month_partial: bool = False
    monthly_comparisons: list[MonthComparison] = Field(default_factory=list)
    streaks: TrendStreaks = Field(default_factory=TrendStreaks)
    overall_trend: Literal["improving", "worsening", "stable"] = "stable"
    acceleration: Literal["accelerating", "decelerating", "steady"] = "steady"
    best_month: Optional[MonthNetIncome] = None
    worst_month: Optional[MonthNetIncome] = None
    three_month_avg: Optional[RollingAverage] = None
    six_month_avg: Optional[RollingAverage] = None
    latest_vs_three_month_avg: Optional[LatestVsAverage] = None


class IncomeOutlier(BaseModel):
    """Month whose income lies more than 2 sigma from the mean."""

    month: str
    income: int
    deviation_from_mean: float
    deviation_pct: float


class MonthIncome(BaseModel):
    """Month with its income."""

    month: str
    income: int


class DiffFromMean(BaseModel):
    """Difference of the latest value from the mean."""

    diff: float
    diff_pct: float


class IncomeStabilityResult(BaseModel):
    """Income stability analysis."""

    mean: float = 0.0
    median: float = 0.0
    std_dev: float = 0.0
    coefficient_of_variation: float = 0.0
    stability: Literal["very_stable", "stable", "variable", "highly_variable"] = "very_stable"
    outlier_months: list[IncomeOutlier] = Field(default_factory=list)
    trend: Literal["increasing", "decreasing", "flat"] = "flat"
    trend_slope_per_month: float = 0.0
    min_month: Optional[MonthIncome] = None
    max_month: Optional[MonthIncome] = None
    latest_vs_mean: Optional[DiffFromMean] = None


class SavingsRatePoint(BaseModel):
    """Savings rate of one month."""

    month: str
    savings_rate: float


class SavingsTrajectoryResult(BaseModel):
    """Emergency fund and savings rate trajectory."""

    current_emergency_fund_months: float
    previous_emergency_fund_months: Optional[float] = None
    emergency_fund_change: Optional[float] = None
    direction: Literal["improving", "declining", "stable"] = "stable"
    primary_factor: Literal[
        "expense_increase",
        "expense_decrease",
        "asset_increase",
        "asset_decrease",
        "mixed",
    ] = "mixed"
    months_to_six_month_target: Optional[int] = None
    savings_rate_history: list[SavingsRatePoint] = Field(default_factory=list)
    average_savings_rate: float = 0.0
    savings_rate_trend: Literal["improving", "declining", "stable"] = "stable"
    cumulative_net_income: int = 0
    liquid_assets_to_total_ratio: float = 0.0


Severity = Literal["normal", "elevated", "anomalous"]


class CategoryComparison(BaseModel):
    """Latest month spend of one category vs its trailing averages."""

    category: str
    current_amount: int
    three_month_avg: Optional[float] = None
    six_month_avg: Optional[float] = None
    deviation_from_three_month: Optional[float] = None
    deviation_from_three_month_pct: Optional[float] = None
    deviation_from_six_month: Optional[float] = None
    deviation_from_six_month_pct: Optional[float] = None
    severity: Severity = "normal"
    trend_direction: Literal["increasing", "decreasing", "stable", "unknown"] = "unknown"
    proportion_of_total: float = 0.0
    previous_proportion_of_total: Optional[float] = None


class CategoryMove(BaseModel):
    """Category with its deviation from the 3-month average."""

    category: str
    diff: float
    diff_pct: Optional[float] = None


class SpendingComparisonResult(BaseModel):
    """Per-category spending comparison for the latest month."""

    categories: list[CategoryComparison] = Field(default_factory=list)
    new_categories: list[str] = Field(default_factory=list)
    total_current_expense: int = 0
    total_previous_month_expense: Optional[int] = None
    total_change_rate: Optional[float] = None
    anomalous_count: int = 0
    elevated_count: int = 0
    top_increasing: list[CategoryMove] = Field(default_factory=list)
    top_decreasing: list[CategoryMove] = Field(default_factory=list)


class TopConcentration(BaseModel):
    """Names and combined share of the largest holdings."""

    names: list[str] = Field(default_factory=list)
    total_pct: float = 0.0


class HoldingShare(BaseModel):
    """Holding with its share of the portfolio."""

    name: str
    pct: float


class VolatileHolding(BaseModel):
    """Holding with a non-zero daily change."""

    name: str
    daily_change: int
    portfolio_impact_pct: float


class HoldingGain(BaseModel):
    """Holding with its unrealized gain."""

    name: str
    unrealized_gain: int
    unrealized_gain_pct: float


class PortfolioRiskResult(BaseModel):
    """Concentration, volatility and gain/loss profile of the portfolio."""

    top_concentration: TopConcentration = Field(default_factory=TopConcentration)
    max_holding: Optional[HoldingShare] = None
    volatile_holdings: list[VolatileHolding] = Field(default_factory=list)
    risk_level: Literal["low", "moderate", "high"] = "low"
    max_gain_holding: Optional[HoldingGain] = None
    max_loss_holding: Optional[HoldingGain] = None
    total_daily_change: int = 0
    total_daily_change_pct: float = 0.0
    holdings_count: int = 0
    positive_count: int = 0
    negative_count: int = 0
    total_unrealized_gain: int = 0
    total_unrealized_gain_pct: float = 0.0


class AnalysisBundle(BaseModel):
    """Any subset of analyzer results (None = not requested)."""

    mom_trend: Optional[MoMTrendResult] = None
    income_stability: Optional[IncomeStabilityResult] = None
    savings_trajectory: Optional[SavingsTrajectoryResult] = None
    spending_comparison: Optional[SpendingComparisonResult] = None
    portfolio_risk: Optional[PortfolioRiskResult] = None


# =============================================================================
# Narrative & Report Models
# =============================================================================


class AnalyticsInsights(BaseModel):
    """Narrative insights produced by the LLM stage."""

    summary: Optional[str] = None
    savings_insight: Optional[str] = None
    investment_insight: Optional[str] = None
    spending_insight: Optional[str] = None
    balance_insight: Optional[str] = None
    liability_insight: Optional[str] = None


class AnalysisMemo(BaseModel):
    """Stage 1 output: free-form analysis memo plus tool usage."""

    text: str
    tool_calls: list[str] = Field(default_factory=list, description="Tool names in call order")
    steps: int = Field(0, ge=0, description="Number of LLM steps that called tools")


class AnalyticsReport(BaseModel):
    """Persisted narrative report for one group and date."""

    group_id: str
    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")
    insights: Optional[AnalyticsInsights] = None
    model: Optional[str] = None


# =============================================================================
# Raw Collector Input Models
# =============================================================================


class RawHolding(BaseModel):
    """Holding row as returned by data access, before the asset/liability split."""

    name: str
    type: Literal["asset", "liability"] = "asset"
    category_name: Optional[str] = None
    liability_category: Optional[str] = None
    amount: Optional[int] = None
    unrealized_gain: Optional[int] = None
    unrealized_gain_pct: Optional[float] = None
    daily_change: Optional[int] = None


class RawTransaction(Transaction):
    """Transaction row with its calculation-exclusion flag."""

    is_excluded_from_calculation: bool = False


class CategoryBreakdown(BaseModel):
    """Latest asset total of one asset category."""

    category: str
    amount: int


class RawFinancialRecords(BaseModel):
    """Unscoped records for one group, as read from storage."""

    holdings: list[RawHolding] = Field(default_factory=list)
    transactions: list[RawTransaction] = Field(default_factory=list)
    asset_history: list[AssetSnapshot] = Field(default_factory=list)
    category_breakdown: list[CategoryBreakdown] = Field(default_factory=list)
    latest_total_assets: Optional[int] = None


# =============================================================================
# API Models
# =============================================================================


class AnalysisRequest(BaseModel):
    """Request body for POST /api/analysis."""

    data: CollectedData
    analyzers: Optional[list[AnalyzerName]] = Field(
        None, description="Analyzers to run (None = all)"
    )


class ReportResponse(BaseModel):
    """Metrics plus the narrative report built from them."""

    metrics: AnalyticsMetrics
    report: AnalyticsReport


class ErrorResponse(BaseModel):
    """Error response body for API errors."""

    error: str = Field(..., description="Short error description")
    detail: Optional[str] = Field(None, description="Detailed error message")
    code: str = Field(..., description="Error code (e.g., 'NO_DATA')")
