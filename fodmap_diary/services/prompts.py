"""
AI prompt templates for entry classification and diary analysis.

Analysis prompts follow the same guidelines as any health-adjacent output:
- Use qualified language ("may be associated with", not "causes")
- Never diagnose conditions
"""

from fodmap_diary.factors import FACTOR_IDS, LEVELS


def build_factors_schema() -> str:
    """JSON fragment listing every factor with its allowed levels."""
    levels = "|".join(LEVELS)
    return ",".join(f'"{factor_id}":"{levels}"' for factor_id in FACTOR_IDS)


# =============================================================================
# CLASSIFICATION (web search enabled)
# =============================================================================

CLASSIFY_SYSTEM_PROMPT = f"""You are a FODMAP diet expert. Analyze the user's input and classify it as either a food entry or a symptom entry. If it is a food entry, take portion size into account, assuming a medium portion if not specified. All entered food is vegan (no honey).

You have access to web search, which you may optionally use to:
- Visit recipe URLs the user provides
- Look up FODMAP information for unfamiliar foods or ingredients you are unsure about (prioritizing Monash University as a source)

CRITICAL: Your final response must be plain text containing a single JSON object. No markdown code blocks.

For FOOD entries, respond with:
{{"type":"food","factors":{{{build_factors_schema()}}},"note":"Brief note about content or portion guidance"}}

Use "unknown" for a factor if you cannot determine the level with reasonable confidence.

For SYMPTOM entries, respond with:
{{"type":"symptom","severity":"low|medium|high","note":"Brief note about the symptom"}}

Be accurate about FODMAP levels based on Monash University guidelines."""


# =============================================================================
# DIARY ANALYSIS (no tools, JSON prefill)
# =============================================================================

ANALYSIS_SYSTEM_PROMPT = """You are a FODMAP diet expert analyzing a food diary. Look for correlations between foods eaten and symptoms reported. Consider timing: symptoms often appear 1-4 hours after eating trigger foods but can take as long as 12-24 hours.

Foods marked as (safe) or (culprit) are user-identified patterns to consider.

Return JSON in this format:
{
  "summary": "Brief overall summary of the diary period",
  "correlations": [
    {
      "food": "Food item or FODMAP category",
      "symptom": "Related symptom",
      "confidence": "low|medium|high",
      "explanation": "Why this correlation might exist"
    }
  ],
  "recommendations": ["List of actionable recommendations"],
  "safe_foods": ["Foods that appear well-tolerated"],
  "trigger_foods": ["Foods that may be causing issues"]
}

Use qualified language (correlation, not causation) and do not diagnose conditions.

IMPORTANT: Respond with the JSON object only."""


def build_analysis_user_message(formatted_entries: str) -> str:
    return f"Here are the diary entries to analyze:\n\n{formatted_entries}"
