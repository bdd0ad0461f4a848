"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException

from calorie_estimator.app_logging import configure_logging
from calorie_estimator.containers import AppContainer
from calorie_estimator.domain.estimation import EstimationResult
from calorie_estimator.services.transport import ProviderTransportError


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(debug=container.settings.environment == "local")
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if app.state.container.estimation_service is None:
            logger.error("CALORIE_MAMA_API_URL not configured")
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/api/estimate-calories")
    async def estimate_calories(request: Request) -> JSONResponse:
        """Estimate calories for a photo uploaded in the ``image`` form field."""
        state_container: AppContainer = request.app.state.container
        max_bytes = state_container.settings.max_upload_bytes
        filename: str | None = None
        try:
            image_bytes, filename = await _read_image_field(request, max_bytes)
            if not image_bytes:
                return _error(status.HTTP_400_BAD_REQUEST, "No image provided")
            if len(image_bytes) > max_bytes:
                return _error(
                    status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                    "Image exceeds maximum upload size",
                )

            service = state_container.estimation_service
            if service is None:
                return _error(
                    status.HTTP_500_INTERNAL_SERVER_ERROR,
                    "Calorie provider URL not configured",
                )

            try:
                result = await service.estimate(image_bytes)
            except ProviderTransportError as exc:
                logger.error(
                    "Calorie service error",
                    extra={"status_code": exc.status_code},
                )
                return _error(
                    status.HTTP_502_BAD_GATEWAY,
                    "Error from calorie service",
                    details=exc.details,
                )
            return JSONResponse(_success_payload(result))
        except Exception:
            logger.exception(
                "Error in /api/estimate-calories",
                extra={"upload_filename": filename},
            )
            return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal error")

    return app


async def _read_image_field(
    request: Request, max_bytes: int
) -> tuple[bytes, str | None]:
    """Return up to ``max_bytes + 1`` bytes of the uploaded image and its name.

    Missing fields, plain text fields and unparseable forms all read as empty.
    """
    try:
        async with request.form() as form:
            upload = form.get("image")
            if not isinstance(upload, UploadFile):
                return b"", None
            return await upload.read(max_bytes + 1), upload.filename
    except HTTPException:
        return b"", None


def _success_payload(result: EstimationResult) -> dict[str, object]:
    """Serialize predictions with their public field names."""
    return {
        "success": True,
        "predictions": [
            prediction.model_dump(by_alias=True) for prediction in result.predictions
        ],
        "raw": result.raw,
    }


def _error(status_code: int, message: str, details: str | None = None) -> JSONResponse:
    """Build the failure envelope shared by every error path."""
    content: dict[str, object] = {"success": False, "message": message}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)
