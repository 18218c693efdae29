"""
LLM Prompt Templates

Two uses only:
- Value extraction: the last-resort tier before baseline. The model is asked
  for one number and nothing else; anything else is rejected by the
  Value Extractor.
- Executive summary: one sentence describing a finished CCPI reading.

CRITICAL RULES:
- The model never scores anything. All scores come from the Composite Engine.
- A value answer must be a single number, or "null" when unknown.
"""

# =============================================================================
# VALUE EXTRACTION
# =============================================================================

VALUE_SYSTEM_PROMPT = """You are a financial data expert. You answer with a single number and nothing else."""

VALUE_USER_PROMPT_TEMPLATE = """Provide ONLY the current numeric value for: {description}.

CRITICAL RULES:
- Return ONLY a single number, no text, no units, no explanation
- Use the most recent available data (within last 24 hours if possible)
- If data is unavailable, return "null"
- Examples: "34.5" or "150" or "0.89" or "null"

Value:"""


def build_value_prompt(description: str) -> str:
    return VALUE_USER_PROMPT_TEMPLATE.format(description=description)


# =============================================================================
# EXECUTIVE SUMMARY
# =============================================================================

SUMMARY_SYSTEM_PROMPT = """You are a professional financial analyst providing executive summaries for the CCPI (Crash & Correction Prediction Index).

RULES:
1. Write exactly one sentence of at most 50 words.
2. Do NOT use bullet points, headers, or multiple sentences.
3. Do NOT invent numbers. Use only the figures you are given.
4. Return ONLY the summary sentence."""

SUMMARY_USER_PROMPT_TEMPLATE = """Given the following market data:
- CCPI Score: {ccpi}/100 (0 = No risk, 100 = Imminent crash)
- Certainty Score: {certainty}%
- Active Warning Signals: {active_canaries} of {total_indicators} indicators triggered
- Market Regime: {regime_name} ({regime_description})
- Pillar Scores:
  * Momentum & Technical: {momentum}/100
  * Risk Appetite & Volatility: {risk_appetite}/100
  * Valuation: {valuation}/100
  * Macro: {macro}/100

Write a single sentence that:
1. States the CCPI crash prediction score
2. Mentions the certainty level
3. Briefly explains the key active warning signals driving the score
4. Provides actionable context for options traders"""
