"""Locate the prediction list inside provider payloads."""

_LIST_FIELDS = ("predictions", "results")


def resolve_prediction_items(payload: object) -> list[object]:
    """Return raw prediction items from an arbitrarily shaped payload.

    Top-level ``predictions`` wins over ``results``; a body that is itself a
    labeled item becomes a one-element list. Anything else yields an empty
    list rather than an error.
    """
    if not isinstance(payload, dict):
        return []
    for field in _LIST_FIELDS:
        candidate = payload.get(field)
        if isinstance(candidate, list):
            return candidate
    if payload.get("label"):
        return [payload]
    return []
