"""Shared test fixtures."""

import io
from dataclasses import dataclass, field

import pytest
from PIL import Image

from calorie_estimator.adapters.calorie_provider_client import CalorieProviderClient
from calorie_estimator.config import Settings
from calorie_estimator.containers import AppContainer
from calorie_estimator.domain.transport import ProviderReply
from calorie_estimator.services.estimation import EstimationService
from calorie_estimator.services.preprocessing import ImagePreprocessor
from calorie_estimator.services.transport import TransportNegotiator


@dataclass
class FakeCalorieProviderClient(CalorieProviderClient):
    """Fake provider that returns scripted replies and records calls."""

    image_reply: ProviderReply = field(
        default_factory=lambda: ProviderReply(
            status_code=200,
            body='{"predictions": [{"label": "rice", "calories": 210, "score": 0.8}]}',
        )
    )
    base64_reply: ProviderReply = field(
        default_factory=lambda: ProviderReply(status_code=200, body="{}")
    )
    calls: list[str] = field(default_factory=list)
    sent_images: list[bytes] = field(default_factory=list)
    sent_base64: list[str] = field(default_factory=list)

    async def post_image(self, image_bytes: bytes) -> ProviderReply:
        self.calls.append("binary")
        self.sent_images.append(image_bytes)
        return self.image_reply

    async def post_base64(self, image_base64: str) -> ProviderReply:
        self.calls.append("json")
        self.sent_base64.append(image_base64)
        return self.base64_reply


def make_image_bytes(
    size: tuple[int, int] = (800, 600), image_format: str = "PNG"
) -> bytes:
    """Render a solid-color test image."""
    buffer = io.BytesIO()
    Image.new("RGB", size, color=(200, 120, 40)).save(buffer, format=image_format)
    return buffer.getvalue()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        calorie_mama_api_url="https://provider.test/v1/foodrecognition",
        calorie_mama_api_key="provider-key",
        environment="test",
    )


@pytest.fixture
def provider_client() -> FakeCalorieProviderClient:
    return FakeCalorieProviderClient()


@pytest.fixture
def estimation_service(
    settings: Settings, provider_client: FakeCalorieProviderClient
) -> EstimationService:
    return EstimationService(
        preprocessor=ImagePreprocessor(size=settings.image_target_size),
        negotiator=TransportNegotiator(client=provider_client),
    )


@pytest.fixture
def container(
    settings: Settings, estimation_service: EstimationService
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        estimation_service=estimation_service,
        close_resources=close_resources,
    )
