"""Models for calorie estimation results."""

from dataclasses import dataclass

from pydantic import BaseModel, Field

HIGH_CALORIE_THRESHOLD = 5000
HIGH_CALORIE_NOTE = (
    "Estimated calories are unusually high; please review "
    "(possible per-recipe total or units mismatch)"
)


class Prediction(BaseModel):
    """Single food item recognized by the calorie provider."""

    food: str | None = None
    calories: int | None = Field(default=None, ge=0)
    calories_raw: float | None = Field(default=None, serialization_alias="caloriesRaw")
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)
    note: str | None = None


@dataclass(frozen=True)
class EstimationResult:
    """Normalized predictions together with the payload they came from."""

    predictions: list[Prediction]
    raw: object
    attempt: str
