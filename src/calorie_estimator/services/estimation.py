"""Calorie estimation pipeline for food photos."""

import asyncio
import logging
from dataclasses import dataclass

from calorie_estimator.domain.estimation import EstimationResult
from calorie_estimator.services.normalization import normalize_predictions
from calorie_estimator.services.preprocessing import ImagePreprocessor
from calorie_estimator.services.shapes import resolve_prediction_items
from calorie_estimator.services.transport import TransportNegotiator

_logger = logging.getLogger(__name__)


@dataclass
class EstimationService:
    """Preprocesses a photo, queries the provider and normalizes the answer."""

    preprocessor: ImagePreprocessor
    negotiator: TransportNegotiator

    async def estimate(self, image_bytes: bytes) -> EstimationResult:
        """Return canonical predictions for an uploaded food photo.

        Raises ``ProviderTransportError`` when both request formats fail.
        """
        processed = await asyncio.to_thread(self.preprocessor.process, image_bytes)
        success = await self.negotiator.negotiate(processed)
        items = resolve_prediction_items(success.payload)
        predictions = normalize_predictions(items)
        _logger.debug(
            "Calorie provider raw response (%s): %s", success.attempt, success.payload
        )
        _logger.info(
            "Calorie estimation finished",
            extra={"attempt": success.attempt, "predictions": len(predictions)},
        )
        return EstimationResult(
            predictions=predictions, raw=success.payload, attempt=success.attempt
        )
