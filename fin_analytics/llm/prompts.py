"""
Prompt templates for the two-stage insight generation.

Stage 1 (analysis) lets the LLM call the analysis tools and write a
free-form memo. Stage 2 (insights) turns the memo into the structured
AnalyticsInsights fields without tools.
"""

from fin_analytics.models import AnalyticsMetrics

# =============================================================================
# Stage 1: Analysis Memo
# =============================================================================

ANALYSIS_SYSTEM = """You are a personal finance analyst reviewing one household's finances.

Use the available tools to investigate before writing. Start with get_financial_metrics,
then call the analyzers that are relevant to what you find (trends, income stability,
savings trajectory, spending comparison, portfolio risk).

RULES:
1. Base every statement on numbers returned by the tools. Do not invent figures.
2. Amounts are integer currency units; percentages are already multiplied by 100.
3. If latest_month_partial is true, treat the latest month as incomplete and say so.
4. Call each tool at most once.

Write an analysis memo covering: overall health score, emergency fund and savings,
investments and concentration risk, spending changes and anomalies, income/expense
balance, and liabilities. Note concrete, actionable observations."""

ANALYSIS_USER = """Analyze the current financial situation.

Health score: {total_score}/100
Monthly income: {monthly_income}
Monthly expense: {monthly_expense}
Savings rate: {savings_rate}%

Use the tools for details, then write the memo."""

# =============================================================================
# Stage 2: Structured Insights
# =============================================================================

INSIGHTS_SYSTEM = """You are a personal finance advisor writing short insights for a dashboard.

Rewrite the analysis memo into the structured fields:
- summary: 2-3 sentences on the overall financial health
- savings_insight: emergency fund and savings rate
- investment_insight: portfolio, diversification and gains/losses
- spending_insight: spending changes and anomalies
- balance_insight: income vs expense trend
- liability_insight: debts and debt-to-asset ratio

Each field is 1-3 sentences, concrete and actionable. Use only facts from the memo and
metrics. Leave a field null when there is nothing meaningful to say (e.g. no liabilities)."""

INSIGHTS_USER = """Analysis memo:
{memo}

Metrics:
{metrics_json}"""


def format_analysis_system() -> str:
    """Format the system prompt for the analysis stage."""
    return ANALYSIS_SYSTEM


def format_analysis_user(metrics: AnalyticsMetrics) -> str:
    """Format the user prompt for the analysis stage."""
    return ANALYSIS_USER.format(
        total_score=metrics.health_score.total_score,
        monthly_income=metrics.balance.monthly_income,
        monthly_expense=metrics.balance.monthly_expense,
        savings_rate=metrics.balance.savings_rate,
    )


def format_insights_system() -> str:
    """Format the system prompt for the insights stage."""
    return INSIGHTS_SYSTEM


def format_insights_user(memo: str, metrics: AnalyticsMetrics) -> str:
    """Format the user prompt for the insights stage."""
    return INSIGHTS_USER.format(
        memo=memo,
        metrics_json=metrics.model_dump_json(indent=2),
    )
