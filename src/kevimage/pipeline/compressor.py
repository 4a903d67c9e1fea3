"""JPEG transcoding with Pillow."""

from __future__ import annotations

import io
import logging

from PIL import Image, ImageOps, UnidentifiedImageError

from kevimage.errors.exceptions import CompressionFailedError

logger = logging.getLogger(__name__)

DEFAULT_QUALITY = 80


class JpegCompressor:
    """Re-encodes any Pillow-readable image as an optimized JPEG."""

    mime_type = "image/jpeg"
    extension = "jpg"

    def compress(self, data: bytes, quality: int = DEFAULT_QUALITY) -> bytes:
        try:
            with Image.open(io.BytesIO(data)) as img:
                img.load()
                img = ImageOps.exif_transpose(img)
                rgb = _flatten(img)
                buf = io.BytesIO()
                rgb.save(buf, format="JPEG", quality=quality, optimize=True)
        except (UnidentifiedImageError, Image.DecompressionBombError) as e:
            raise CompressionFailedError(f"Unsupported or unsafe image: {e}") from e
        except (OSError, ValueError, SyntaxError) as e:
            # Pillow reports truncated or corrupt data through these
            raise CompressionFailedError(f"Could not transcode image: {e}") from e

        out = buf.getvalue()
        logger.debug("Compressed %d -> %d bytes (q=%d)", len(data), len(out), quality)
        return out


def _flatten(img: Image.Image) -> Image.Image:
    """Composite transparency onto white; JPEG has no alpha channel."""
    if img.mode == "P":
        img = img.convert("RGBA")
    if img.mode in ("RGBA", "LA"):
        background = Image.new("RGB", img.size, (255, 255, 255))
        background.paste(img, mask=img.getchannel("A"))
        return background
    if img.mode != "RGB":
        return img.convert("RGB")
    return img
