"""Image normalization before upload to the calorie provider."""

import io
import logging
from dataclasses import dataclass

from PIL import Image, ImageOps

_logger = logging.getLogger(__name__)


@dataclass
class ImagePreprocessor:
    """Center-crops images to a fixed square and re-encodes them as JPEG."""

    size: int = 544
    jpeg_quality: int = 80

    def process(self, image_bytes: bytes) -> bytes:
        """Return resized JPEG bytes, or the original bytes if that fails."""
        try:
            return self._resize(image_bytes)
        except Exception:
            _logger.warning(
                "Image processing failed, using original bytes",
                exc_info=True,
                extra={"size_bytes": len(image_bytes)},
            )
            return image_bytes

    def _resize(self, image_bytes: bytes) -> bytes:
        with Image.open(io.BytesIO(image_bytes)) as image:
            fitted = ImageOps.fit(
                image.convert("RGB"),
                (self.size, self.size),
                method=Image.Resampling.LANCZOS,
                centering=(0.5, 0.5),
            )
        buffer = io.BytesIO()
        fitted.save(buffer, format="JPEG", quality=self.jpeg_quality)
        return buffer.getvalue()
