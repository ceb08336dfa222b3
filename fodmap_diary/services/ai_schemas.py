"""
Pydantic models for validating structured JSON responses from Claude AI.

Each schema corresponds to one AI method's expected response format.
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, field_validator

from fodmap_diary.services.entries import Level, Severity, clean_factors


# --- Entry Classification (classify) - Discriminated Union ---


class FoodClassificationSchema(BaseModel):
    type: Literal["food"]
    factors: dict[str, Level] = Field(default_factory=dict)
    note: str = ""

    @field_validator("factors", mode="before")
    @classmethod
    def _clean_factors(cls, v: Any) -> dict:
        # Drop factors we don't track; unrecognised levels become "unknown"
        return clean_factors(v)


class SymptomClassificationSchema(BaseModel):
    type: Literal["symptom"]
    severity: Severity
    note: str = ""

    @field_validator("severity", mode="before")
    @classmethod
    def _lower(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v


ClassificationSchema = Annotated[
    FoodClassificationSchema | SymptomClassificationSchema,
    Field(discriminator="type"),
]


# --- Diary Analysis (analyze) ---


class CorrelationSchema(BaseModel):
    food: str
    symptom: str
    confidence: Literal["low", "medium", "high"] = "low"
    explanation: str = ""

    @field_validator("confidence", mode="before")
    @classmethod
    def _lower(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v


class AnalysisSchema(BaseModel):
    summary: str
    correlations: list[CorrelationSchema] = []
    recommendations: list[str] = []
    safe_foods: list[str] = []
    trigger_foods: list[str] = []
