"""Canonicalization of raw provider predictions.

Providers disagree on field names and confidence units, so every lookup is an
ordered table of ``FieldRule`` entries: the first rule whose path resolves and
whose transform yields a value wins. Tables are module constants so their
priority can be asserted directly in tests.
"""

import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

from calorie_estimator.domain.estimation import (
    HIGH_CALORIE_NOTE,
    HIGH_CALORIE_THRESHOLD,
    Prediction,
)

T = TypeVar("T")

PathSegment = str | int

_MAX_CONFIDENCE_DIVISIONS = 5


@dataclass(frozen=True)
class FieldRule(Generic[T]):
    """Path into a raw item paired with a transform for the found value."""

    path: tuple[PathSegment, ...]
    transform: Callable[[object], T | None]

    def apply(self, item: object) -> T | None:
        """Return the transformed value at ``path``, or None when absent."""
        value = resolve_path(item, self.path)
        if value is None:
            return None
        return self.transform(value)


def resolve_path(item: object, path: Sequence[PathSegment]) -> object | None:
    """Walk dict keys and list indexes, returning None on any miss."""
    current = item
    for segment in path:
        if isinstance(segment, int):
            if not isinstance(current, list) or segment >= len(current):
                return None
            current = current[segment]
        else:
            if not isinstance(current, dict):
                return None
            current = current.get(segment)
        if current is None:
            return None
    return current


def first_match(item: object, rules: Sequence[FieldRule[T]]) -> T | None:
    """Evaluate rules in order and return the first non-None result."""
    for rule in rules:
        value = rule.apply(item)
        if value is not None:
            return value
    return None


def as_number(value: object) -> float | None:
    """Coerce numbers and numeric strings to float; reject everything else."""
    if isinstance(value, bool):
        return None
    if not isinstance(value, int | float | str):
        return None
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (ValueError, OverflowError):
        return None
    if not math.isfinite(number):
        return None
    return number


def as_label(value: object) -> str | None:
    """Accept non-empty strings and non-zero numbers as a food label."""
    if isinstance(value, str):
        return value or None
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    return str(value) if value else None


LABEL_RULES: tuple[FieldRule[str], ...] = tuple(
    FieldRule((name,), as_label)
    for name in ("label", "name", "food", "prediction", "class", "title", "group")
)

CALORIE_RULES: tuple[FieldRule[float], ...] = (
    FieldRule(("calories",), as_number),
    FieldRule(("kcal",), as_number),
    FieldRule(("calorie",), as_number),
    FieldRule(("energy_kcal",), as_number),
    FieldRule(("nutrition", "calories"), as_number),
    FieldRule(("nutrition", "kcal"), as_number),
    FieldRule(("nutrients", "calories"), as_number),
    FieldRule(("nutrients", "kcal"), as_number),
    # Composite dishes: fall back to the first component.
    FieldRule(("items", 0, "calories"), as_number),
    FieldRule(("items", 0, "kcal"), as_number),
    FieldRule(("items", 0, "nutrition", "calories"), as_number),
    FieldRule(("items", 0, "nutrition", "kcal"), as_number),
    FieldRule(("items", 0, "nutrients", "calories"), as_number),
    FieldRule(("items", 0, "nutrients", "kcal"), as_number),
    FieldRule(("items", 0, "energy_kcal"), as_number),
)

CONFIDENCE_RULES: tuple[FieldRule[float], ...] = tuple(
    FieldRule((name,), as_number)
    for name in ("confidence", "score", "probability", "prob", "conf")
)


def normalize_confidence(value: float) -> float:
    """Rescale a confidence of unknown units into [0, 1].

    Fractions pass through, percentages and scaled percentages are divided by
    100 while they stay above 1 (at most five times), then the result is
    clamped.
    """
    normalized = value
    divisions = 0
    while normalized > 1 and divisions < _MAX_CONFIDENCE_DIVISIONS:
        normalized = normalized / 100
        divisions += 1
    return min(max(normalized, 0.0), 1.0)


def round_calories(value: float) -> int:
    """Round half up to match the provider-facing client."""
    return math.floor(value + 0.5)


def normalize_prediction(item: object) -> Prediction:
    """Map one raw provider item to a canonical prediction."""
    if isinstance(item, str):
        return Prediction(food=item)
    if not isinstance(item, dict):
        return Prediction()

    calories_raw = first_match(item, CALORIE_RULES)
    calories: int | None = None
    note: str | None = None
    if calories_raw is not None:
        rounded = round_calories(calories_raw)
        if rounded >= 0:
            calories = rounded
            if calories > HIGH_CALORIE_THRESHOLD:
                note = HIGH_CALORIE_NOTE

    return Prediction(
        food=first_match(item, LABEL_RULES),
        calories=calories,
        calories_raw=calories_raw,
        confidence=_resolve_confidence(item),
        note=note,
    )


def normalize_predictions(items: list[object]) -> list[Prediction]:
    """Normalize every raw item, preserving order."""
    return [normalize_prediction(item) for item in items]


def _resolve_confidence(item: dict[str, object]) -> float | None:
    value = first_match(item, CONFIDENCE_RULES)
    if not value:
        nested = _best_nested_confidence(item.get("items"))
        if nested is not None:
            value = nested
    if value is None:
        return None
    return normalize_confidence(value)


def _best_nested_confidence(entries: object) -> float | None:
    """Return the highest confidence-like value among sub-items."""
    if not isinstance(entries, list):
        return None
    best: float | None = None
    for entry in entries:
        value = first_match(entry, CONFIDENCE_RULES)
        if value is not None and (best is None or value > best):
            best = value
    return best
