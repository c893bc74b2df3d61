"""
Crop rasterization and encoding (Qt-free).

Cuts the confirmed rectangle out of the decoded source at native
resolution (a 1:1 crop, never a resize) and encodes it in memory.  The
caller decides what to do with the bytes: upload, save, or preview.
"""

import io
import logging
from dataclasses import dataclass

from PIL import Image

from card_crop_tool.config import (
    JPEG_QUALITY_DEFAULT, MIME_TYPES, MIN_CROP_SIZE, OUTPUT_FORMAT_DEFAULT, PNG_COMPRESS_LEVEL,
)
from card_crop_tool.errors import CropExportError
from card_crop_tool.image_io import output_name
from card_crop_tool.models import CropRect, NaturalImage, clamp_crop

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CropResult:
    """An encoded crop, ready to hand to the caller."""
    file_name: str
    data: bytes
    mime_type: str
    width: int
    height: int

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height


def pixel_box(crop: CropRect, nat: NaturalImage) -> tuple[int, int, int, int]:
    """Integer ``(left, top, right, bottom)`` of exactly ``round(w) x round(h)`` pixels."""
    width = max(1, round(crop.w))
    height = max(1, round(crop.h))
    left = max(0, min(round(crop.x), nat.w - width))
    top = max(0, min(round(crop.y), nat.h - height))
    return left, top, left + width, top + height


def _encode(region: Image.Image, output_format: str, jpeg_quality: int) -> bytes:
    buf = io.BytesIO()
    if output_format == "JPEG":
        region.convert("RGB").save(buf, "JPEG", quality=jpeg_quality, optimize=True)
    else:
        if region.mode not in ("RGB", "RGBA", "L", "LA", "P"):
            region = region.convert("RGBA")
        region.save(buf, "PNG", compress_level=PNG_COMPRESS_LEVEL)
    return buf.getvalue()


def export_crop(
    image: Image.Image,
    crop: CropRect,
    original_name: str = "",
    output_format: str = OUTPUT_FORMAT_DEFAULT,
    jpeg_quality: int = JPEG_QUALITY_DEFAULT,
    min_size: float = MIN_CROP_SIZE,
) -> CropResult:
    """
    Crop *image* to *crop* and encode it.

    Raises CropExportError if the region cannot be cut or the encoder
    produces no data.
    """
    if output_format not in MIME_TYPES:
        raise CropExportError(f"Unsupported output format: {output_format}")

    nat = NaturalImage(image.width or 1, image.height or 1)
    box = pixel_box(clamp_crop(crop, nat, min_size), nat)

    try:
        region = image.crop(box)
        data = _encode(region, output_format, jpeg_quality)
    except (OSError, ValueError) as exc:
        logger.error("Crop export failed for box %s: %s", box, exc)
        raise CropExportError() from exc

    if not data:
        logger.error("Encoder returned no data for box %s", box)
        raise CropExportError()

    result = CropResult(
        file_name=output_name(original_name, output_format),
        data=data,
        mime_type=MIME_TYPES[output_format],
        width=box[2] - box[0],
        height=box[3] - box[1],
    )
    logger.debug("Exported %s %dx%d (%d bytes)", result.file_name, result.width, result.height, len(data))
    return result
