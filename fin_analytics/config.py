"""
Engine configuration for the finance analytics engine.

This module contains EngineConfig and LLMConfig with their default values.
All thresholds live here - no magic numbers in engine code.
"""

from pydantic import BaseModel, Field


# =============================================================================
# Category Lists
# =============================================================================

DEFAULT_INVESTMENT_CATEGORIES: list[str] = [
    "Stocks",
    "Mutual Funds",
    "Bonds",
    "FX",
    "Futures",
    "Crypto / FX / Precious Metals",
]

DEFAULT_LIQUID_ASSET_CATEGORIES: list[str] = [
    "Deposits / Cash / Crypto",
    "E-Money / Prepaid",
]


# =============================================================================
# Engine Configuration
# =============================================================================


class EngineConfig(BaseModel):
    """
    All configurable parameters for the analytics engine.

    Passed explicitly to engine functions rather than hardcoded.
    Defaults reproduce the reference scoring and analyzer behavior.
    """

    # Category classification
    investment_categories: list[str] = Field(
        default_factory=lambda: list(DEFAULT_INVESTMENT_CATEGORIES),
        description="Asset categories counted as investments (substring match either way)",
    )
    liquid_asset_categories: list[str] = Field(
        default_factory=lambda: list(DEFAULT_LIQUID_ASSET_CATEGORIES),
        description="Asset categories counted as liquid (substring match)",
    )
    uncategorized_label: str = Field(
        default="Uncategorized", min_length=1, description="Bucket for transactions without category"
    )
    other_liability_label: str = Field(
        default="Other", min_length=1, description="Bucket for liabilities without category"
    )

    # Collection window
    analysis_months: int = Field(
        default=12, ge=1, le=120, description="Lookback window applied by the collector"
    )

    # Aggregators
    top_categories_limit: int = Field(default=5, ge=1, description="Size of spending top list")
    anomaly_min_months: int = Field(
        default=3, ge=2, description="Distinct months required before flagging anomalies"
    )
    anomaly_z_threshold: float = Field(
        default=2.0, gt=0, description="Z-score above which latest spend is anomalous"
    )
    max_anomalies: int = Field(default=3, ge=1, description="Anomalies reported at most")
    single_holding_diversification: int = Field(
        default=10, ge=0, le=100, description="Diversification score of a one-holding portfolio"
    )
    projection_years: list[int] = Field(
        default_factory=lambda: [1, 3, 5], description="Growth projection horizons"
    )
    flat_growth_epsilon: float = Field(
        default=0.0001, ge=0, description="|monthly rate| below this is treated as flat"
    )

    # MoM trend
    trend_streak_min_months: int = Field(
        default=2, ge=1, description="Net income streak length needed for improving/worsening"
    )
    acceleration_window: int = Field(
        default=3, ge=2, description="Trailing month-over-month diffs used for acceleration"
    )
    # Empirical threshold
    acceleration_ratio_threshold: float = Field(
        default=0.2, ge=0, description="|slope| / mean |diff| above which trend accelerates"
    )
    # Empirical threshold
    partial_month_ratio: float = Field(
        default=0.3, gt=0, lt=1, description="Latest/prior ratio below which latest is partial"
    )

    # Income stability
    cv_very_stable: float = Field(default=5.0, ge=0, description="CV% below = very_stable")
    cv_stable: float = Field(default=15.0, ge=0, description="CV% below = stable")
    cv_variable: float = Field(default=30.0, ge=0, description="CV% below = variable")
    outlier_sigma: float = Field(default=2.0, gt=0, description="Outlier distance in std devs")
    income_trend_dead_band: float = Field(
        default=0.02, ge=0, description="Slope dead-band as fraction of mean income"
    )

    # Savings trajectory
    savings_rate_trend_threshold: float = Field(
        default=1.0, ge=0, description="Savings-rate slope (points/month) for a trend"
    )
    emergency_fund_change_threshold: float = Field(
        default=0.5, ge=0, description="Fund change (months) for improving/declining"
    )
    expense_change_threshold: float = Field(
        default=0.05, ge=0, description="Relative expense change attributed as primary factor"
    )
    emergency_fund_target_months: float = Field(
        default=6.0, gt=0, description="Target emergency fund size in months"
    )

    # Spending comparison
    anomalous_z_threshold: float = Field(default=2.0, gt=0, description="z above = anomalous")
    elevated_z_threshold: float = Field(default=1.0, gt=0, description="z above = elevated")
    category_trend_dead_band: float = Field(
        default=0.03, ge=0, description="Category slope dead-band as fraction of mean"
    )
    top_moves_limit: int = Field(default=3, ge=1, description="Top increasing/decreasing size")

    # Portfolio risk
    concentration_top_n: int = Field(default=3, ge=1, description="Holdings in top concentration")
    volatile_holdings_limit: int = Field(default=5, ge=1, description="Volatile holdings reported")
    high_risk_diversification: float = Field(default=30.0, description="Below = high risk")
    high_risk_concentration_pct: float = Field(default=80.0, description="Above = high risk")
    moderate_risk_diversification: float = Field(default=60.0, description="Below = moderate")
    moderate_risk_concentration_pct: float = Field(default=60.0, description="Above = moderate")


# =============================================================================
# Default Instance
# =============================================================================

DEFAULT_ENGINE_CONFIG = EngineConfig()


# =============================================================================
# LLM Configuration
# =============================================================================


class LLMConfig(BaseModel):
    """
    Configuration for LLM client.

    Controls model selection, temperature, token limits and the tool loop.
    """

    model: str = Field(
        default="gpt-4o",
        description="OpenAI model used for both insight stages",
    )
    temperature: float = Field(
        default=0.3,
        ge=0,
        le=2,
        description="Sampling temperature",
    )
    max_tokens: int = Field(
        default=4000,
        gt=0,
        description="Maximum tokens in response",
    )
    max_tool_steps: int = Field(
        default=10,
        ge=1,
        le=20,
        description="Maximum tool-calling rounds in stage 1",
    )


DEFAULT_LLM_CONFIG = LLMConfig()
