"""
Image conversion job — re-encodes an image into another format using Pillow.

Example payload:
    {
        "input_path": "/data/photo.png",
        "target_format": "jpg",
        "output_path": "/data/photo.jpg",   # optional
        "quality": "high"                   # low | medium | high, default medium
    }

Example result:
    {
        "input_path": "/data/photo.png",
        "output_path": "/data/photo.jpg",
        "source_format": "PNG",
        "target_format": "jpg",
        "size": [1920, 1080],
        "output_bytes": 183422
    }

Pillow is blocking, so the actual work runs in a worker thread via
asyncio.to_thread — the event loop keeps serving admissions meanwhile.
JPEG and BMP have no alpha channel, so RGBA/P images are flattened to RGB.
"""

import asyncio
import os

from PIL import Image

from config.settings import settings
from jobs.base import AbstractJobHandler

# extension → Pillow format name
SUPPORTED_FORMATS = {
    "jpg": "JPEG",
    "jpeg": "JPEG",
    "png": "PNG",
    "webp": "WEBP",
    "bmp": "BMP",
    "gif": "GIF",
    "tiff": "TIFF",
    "tif": "TIFF",
}

QUALITY_LEVELS = {"low": 60, "medium": 80, "high": 95}

_NO_ALPHA = {"JPEG", "BMP"}


class ImageConvertJob(AbstractJobHandler[dict]):

    def __init__(self, output_dir: str | None = None):
        self._output_dir = output_dir or settings.OUTPUT_DIR

    async def run(self, payload: dict) -> dict:
        input_path = payload.get("input_path")
        if not input_path:
            raise ValueError("Missing 'input_path' in payload")

        target = str(payload.get("target_format", "")).lower().lstrip(".")
        if target not in SUPPORTED_FORMATS:
            raise ValueError(
                f"Unsupported target format: '{target}'. "
                f"Available: {sorted(SUPPORTED_FORMATS)}"
            )

        if not os.path.exists(input_path):
            raise FileNotFoundError(f"Image not found: {input_path}")

        output_path = payload.get("output_path")
        if not output_path:
            # photo.png → <OUTPUT_DIR>/photo.jpg
            stem = os.path.splitext(os.path.basename(input_path))[0]
            output_path = os.path.join(self._output_dir, f"{stem}.{target}")

        quality = QUALITY_LEVELS.get(payload.get("quality", "medium"), QUALITY_LEVELS["medium"])

        return await asyncio.to_thread(
            self._convert, input_path, output_path, target, quality
        )

    def _convert(self, input_path: str, output_path: str, target: str, quality: int) -> dict:
        pil_format = SUPPORTED_FORMATS[target]
        os.makedirs(os.path.dirname(os.path.abspath(output_path)), exist_ok=True)

        with Image.open(input_path) as img:
            source_format = img.format
            size = img.size

            out = img
            if pil_format in _NO_ALPHA and img.mode not in ("RGB", "L"):
                out = img.convert("RGB")

            save_kwargs = {}
            if pil_format in ("JPEG", "WEBP"):
                save_kwargs["quality"] = quality
            if pil_format == "JPEG" and quality >= QUALITY_LEVELS["medium"]:
                save_kwargs["progressive"] = True
            if pil_format == "TIFF":
                save_kwargs["compression"] = "tiff_lzw"

            out.save(output_path, pil_format, **save_kwargs)

        output_bytes = os.path.getsize(output_path)
        if output_bytes == 0:
            raise RuntimeError("Conversion produced empty file")

        return {
            "input_path": input_path,
            "output_path": output_path,
            "source_format": source_format,
            "target_format": target,
            "size": list(size),
            "output_bytes": output_bytes,
        }

    @property
    def job_type(self) -> str:
        return "image_convert"
