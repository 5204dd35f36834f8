"""
Saving rendered fractals to disk.

PNG and TIFF keep the alpha channel and carry the render parameters as an
embedded JSON document, so an image can be traced back to the configuration
that produced it. JPEG has no alpha; transparent pixels of vector renders are
flattened onto black.
"""

import numpy as np
from typing import Dict, Any, Optional, Tuple
from pathlib import Path
from dataclasses import dataclass, asdict, field, fields
import json
import logging
import time
from datetime import datetime

from PIL import Image, PngImagePlugin

logger = logging.getLogger(__name__)

METADATA_KEY = "FractalMetadata"
TIFF_IMAGE_DESCRIPTION = 270

# suffix -> Pillow format name
FORMATS = {
    '.png': 'PNG',
    '.tif': 'TIFF',
    '.tiff': 'TIFF',
    '.jpg': 'JPEG',
    '.jpeg': 'JPEG',
}


@dataclass
class RenderMetadata:
    """Parameters of one render, as embedded in exported images."""

    fractal_type: str
    resolution: Tuple[int, int]  # width, height
    iterations: int

    zoom: float = 1.0
    rotation: float = 0.0
    offset: Tuple[float, float] = (0.0, 0.0)
    color: str = ""  # empty for self-colored rasters

    render_time_seconds: float = 0.0
    timestamp: str = ""
    software_version: str = "1.0.0"

    # julia_c, branch angle, ...
    fractal_parameters: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = datetime.now().isoformat(timespec="seconds")
        self.resolution = tuple(self.resolution)
        self.offset = tuple(self.offset)

    def to_json(self) -> str:
        return json.dumps(asdict(self), sort_keys=True)

    @classmethod
    def from_json(cls, payload: str) -> 'RenderMetadata':
        """Parse metadata written by :meth:`to_json`, ignoring unknown keys."""
        data = json.loads(payload)
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


def default_output_name(shape: str, timestamp_ms: Optional[int] = None) -> str:
    """File name used for downloads: ``fractal-<shape>-<epoch millis>.png``."""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"fractal-{shape}-{timestamp_ms}.png"


class ImageExporter:
    """Writes RGBA fractal images with their render metadata."""

    def __init__(self, jpeg_quality: int = 95):
        """
        Initialize image exporter.

        Args:
            jpeg_quality: JPEG quality (1-100)
        """
        self.jpeg_quality = jpeg_quality

    def save_image(self, image_array: np.ndarray, filepath: Path,
                   metadata: Optional[RenderMetadata] = None) -> Path:
        """
        Save an RGBA image array; the suffix of ``filepath`` selects the format.

        Args:
            image_array: uint8 array of shape (height, width, 4)
            filepath: Output path ending in .png, .tif, .tiff, .jpg or .jpeg
            metadata: Render parameters to embed (ignored for JPEG)

        Returns:
            Path the image was written to
        """
        filepath = Path(filepath)
        image_format = FORMATS.get(filepath.suffix.lower())
        if image_format is None:
            supported = ', '.join(FORMATS)
            raise ValueError(f"Unsupported format '{filepath.suffix}'. Supported: {supported}")

        image = Image.fromarray(_as_rgba(image_array))
        filepath.parent.mkdir(parents=True, exist_ok=True)

        if image_format == 'PNG':
            self._save_png(image, filepath, metadata)
        elif image_format == 'TIFF':
            self._save_tiff(image, filepath, metadata)
        else:
            self._save_jpeg(image, filepath)

        logger.info(f"Saved {image_format} image: {filepath} ({image.width}x{image.height})")
        return filepath

    def _save_png(self, image: Image.Image, filepath: Path,
                  metadata: Optional[RenderMetadata]) -> None:
        pnginfo = PngImagePlugin.PngInfo()
        if metadata:
            pnginfo.add_text("Title", f"Fractal: {metadata.fractal_type}")
            pnginfo.add_text("Software", f"fractal-engine v{metadata.software_version}")
            pnginfo.add_text("Creation Time", metadata.timestamp)
            pnginfo.add_text(METADATA_KEY, metadata.to_json())
        image.save(filepath, "PNG", pnginfo=pnginfo)

    def _save_tiff(self, image: Image.Image, filepath: Path,
                   metadata: Optional[RenderMetadata]) -> None:
        tiffinfo = {TIFF_IMAGE_DESCRIPTION: metadata.to_json()} if metadata else {}
        image.save(filepath, "TIFF", tiffinfo=tiffinfo)

    def _save_jpeg(self, image: Image.Image, filepath: Path) -> None:
        flattened = Image.new("RGB", image.size, (0, 0, 0))
        flattened.paste(image, mask=image.getchannel("A"))
        flattened.save(filepath, "JPEG", quality=self.jpeg_quality, optimize=True)

    def extract_metadata_from_image(self, filepath: Path) -> Optional[RenderMetadata]:
        """
        Read metadata embedded by :meth:`save_image`.

        Returns:
            RenderMetadata, or None when the file carries none
        """
        with Image.open(filepath) as image:
            if image.format == "PNG":
                payload = image.info.get(METADATA_KEY)
            elif image.format == "TIFF":
                payload = image.tag_v2.get(TIFF_IMAGE_DESCRIPTION)
            else:
                payload = None

        return RenderMetadata.from_json(payload) if payload else None

    def get_image_info(self, filepath: Path) -> Dict[str, Any]:
        filepath = Path(filepath)
        with Image.open(filepath) as image:
            info = {
                'format': image.format,
                'mode': image.mode,
                'size': image.size,
                'file_size_bytes': filepath.stat().st_size,
            }
        metadata = self.extract_metadata_from_image(filepath)
        if metadata:
            info['metadata'] = asdict(metadata)
        return info


def _as_rgba(image_array: np.ndarray) -> np.ndarray:
    image_array = np.asarray(image_array)
    if image_array.ndim != 3 or image_array.shape[2] != 4:
        raise ValueError(f"Expected RGBA image array (H, W, 4), got {image_array.shape}")
    if image_array.dtype != np.uint8:
        image_array = np.clip(image_array, 0, 255).astype(np.uint8)
    return np.ascontiguousarray(image_array)
