"""Tests for provider payload shape resolution."""

from calorie_estimator.services.shapes import resolve_prediction_items


def test_predictions_field_wins_over_results() -> None:
    payload = {"predictions": [{"label": "a"}], "results": [{"label": "b"}]}

    assert resolve_prediction_items(payload) == [{"label": "a"}]


def test_results_field_used_when_predictions_missing() -> None:
    payload = {"predictions": "not-a-list", "results": [{"name": "b"}]}

    assert resolve_prediction_items(payload) == [{"name": "b"}]


def test_labeled_body_becomes_single_item() -> None:
    payload = {"label": "burger", "calories": 550}

    assert resolve_prediction_items(payload) == [payload]


def test_unrecognized_payloads_yield_empty_list() -> None:
    assert resolve_prediction_items({}) == []
    assert resolve_prediction_items({"label": ""}) == []
    assert resolve_prediction_items({"name": "burger"}) == []
    assert resolve_prediction_items([{"label": "burger"}]) == []
    assert resolve_prediction_items("burger") == []
    assert resolve_prediction_items(None) == []
