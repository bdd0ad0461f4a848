"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from calorie_estimator.adapters.calorie_provider_client import (
    HttpxCalorieProviderClient,
)
from calorie_estimator.config import Settings, normalize_api_key
from calorie_estimator.services.estimation import EstimationService
from calorie_estimator.services.preprocessing import ImagePreprocessor
from calorie_estimator.services.transport import TransportNegotiator


@dataclass
class AppContainer:
    """Holds application-wide dependencies.

    ``estimation_service`` is None when no provider URL is configured.
    """

    settings: Settings
    estimation_service: EstimationService | None
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    api_url = (resolved_settings.calorie_mama_api_url or "").strip()
    if not api_url:

        async def close_nothing() -> None:
            return None

        return AppContainer(
            settings=resolved_settings,
            estimation_service=None,
            close_resources=close_nothing,
        )

    provider_client = HttpxCalorieProviderClient.create(
        api_url=api_url,
        api_key=normalize_api_key(resolved_settings.calorie_mama_api_key),
        timeout_seconds=resolved_settings.calorie_request_timeout_seconds,
    )
    estimation_service = EstimationService(
        preprocessor=ImagePreprocessor(
            size=resolved_settings.image_target_size,
            jpeg_quality=resolved_settings.image_jpeg_quality,
        ),
        negotiator=TransportNegotiator(client=provider_client),
    )

    async def close_resources() -> None:
        await provider_client.close()

    return AppContainer(
        settings=resolved_settings,
        estimation_service=estimation_service,
        close_resources=close_resources,
    )
