"""Crop region derivation and extraction.

All crop regions are expressed as percentages of the image's natural
(full resolution) size. Rectangles measured on a resized preview must be
brought back to natural pixels with :func:`scale_region` before they are
turned into a region.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple, Union

import cv2
import numpy as np

from .constants import ASPECT_PRESETS, get_crop_config
from .detection.types import BoundingBox

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CropRegion:
    """Crop rectangle in percent of image width/height."""

    x: float
    y: float
    width: float
    height: float
    aspect_ratio: float

    @classmethod
    def full_image(cls, aspect_ratio: float) -> "CropRegion":
        return cls(0.0, 0.0, 100.0, 100.0, aspect_ratio)

    def to_pixels(self, image_width: int, image_height: int) -> Tuple[int, int, int, int]:
        """Return the region as an integer (x, y, w, h) clipped to the image."""
        x = int(round(self.x * image_width / 100))
        y = int(round(self.y * image_height / 100))
        x = min(max(x, 0), image_width - 1)
        y = min(max(y, 0), image_height - 1)
        w = int(round(self.width * image_width / 100))
        h = int(round(self.height * image_height / 100))
        w = max(1, min(w, image_width - x))
        h = max(1, min(h, image_height - y))
        return (x, y, w, h)

    def to_dict(self) -> dict:
        return {
            "unit": "%",
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "aspect": self.aspect_ratio,
        }


def parse_aspect_ratio(value: Union[str, float, int, None]) -> float:
    """Parse an aspect ratio given as a preset ("4:5"), "W:H" or a number."""
    if value is None or value == "":
        value = get_crop_config().default_aspect

    if isinstance(value, str):
        text = value.strip()
        if text in ASPECT_PRESETS:
            ratio = ASPECT_PRESETS[text]
        elif ":" in text:
            num, _, den = text.partition(":")
            try:
                ratio = float(num) / float(den)
            except (ValueError, ZeroDivisionError):
                raise ValueError(f"Invalid aspect ratio: {value!r}") from None
        else:
            try:
                ratio = float(text)
            except ValueError:
                raise ValueError(f"Invalid aspect ratio: {value!r}") from None
    else:
        ratio = float(value)

    if not np.isfinite(ratio) or ratio <= 0:
        raise ValueError(f"Aspect ratio must be positive, got {value!r}")
    return ratio


def expand_to_aspect(
    box: BoundingBox,
    aspect: float,
    scale: Optional[float] = None,
) -> BoundingBox:
    """Grow a face box around its center to the given aspect ratio.

    The dominant side (width for landscape/square, height for portrait)
    becomes ``scale`` times the face side; the other side follows from the
    aspect ratio.
    """
    if aspect <= 0:
        raise ValueError(f"Aspect ratio must be positive, got {aspect}")
    if scale is None:
        scale = get_crop_config().face_scale

    center_x, center_y = box.center
    if aspect >= 1:
        width = box.width * scale
        height = width / aspect
    else:
        height = box.height * scale
        width = height * aspect

    return BoundingBox(center_x - width / 2, center_y - height / 2, width, height)


def clamp_to_image(rect: BoundingBox, image_width: int, image_height: int) -> BoundingBox:
    """Move the origin inside the image and shrink the size to fit."""
    x = max(rect.x, 0.0)
    y = max(rect.y, 0.0)
    width = min(rect.width, image_width - x)
    height = min(rect.height, image_height - y)
    return BoundingBox(x, y, width, height)


def to_percent(
    rect: BoundingBox,
    image_width: int,
    image_height: int,
    aspect: float,
) -> CropRegion:
    """Express a pixel rectangle as a percentage crop region."""
    return CropRegion(
        x=rect.x / image_width * 100,
        y=rect.y / image_height * 100,
        width=rect.width / image_width * 100,
        height=rect.height / image_height * 100,
        aspect_ratio=aspect,
    )


def derive_crop_region(
    box: BoundingBox,
    aspect: float,
    image_width: int,
    image_height: int,
    scale: Optional[float] = None,
) -> CropRegion:
    """Derive a face-centered crop region inside the image.

    Args:
        box: Face bounding box in natural pixel units
        aspect: Target width/height ratio
        image_width: Natural image width in pixels
        image_height: Natural image height in pixels
        scale: Crop-to-face size factor (config default if None)

    Returns:
        CropRegion in percent. Falls back to the full image when the
        clamped rectangle is empty.
    """
    if image_width <= 0 or image_height <= 0:
        raise ValueError("Image dimensions must be positive")

    expanded = expand_to_aspect(box, aspect, scale)
    clamped = clamp_to_image(expanded, image_width, image_height)

    if clamped.width <= 0 or clamped.height <= 0:
        logger.warning(f"Crop around {box} is empty after clamping, using full image")
        return CropRegion.full_image(aspect)

    return to_percent(clamped, image_width, image_height, aspect)


def centered_aspect_crop(aspect: float, image_width: int, image_height: int) -> CropRegion:
    """Largest region of the given aspect ratio centered in the image."""
    if aspect <= 0:
        raise ValueError(f"Aspect ratio must be positive, got {aspect}")

    if image_width / image_height > aspect:
        height = float(image_height)
        width = height * aspect
    else:
        width = float(image_width)
        height = width / aspect

    rect = BoundingBox((image_width - width) / 2, (image_height - height) / 2, width, height)
    return to_percent(rect, image_width, image_height, aspect)


def scale_region(
    rect: BoundingBox,
    from_size: Tuple[int, int],
    to_size: Tuple[int, int],
) -> BoundingBox:
    """Rescale a pixel rectangle between two renderings of the same image.

    Args:
        rect: Rectangle measured on an image of ``from_size``
        from_size: (width, height) the rectangle was measured on
        to_size: (width, height) to convert into, usually the natural size
    """
    from_w, from_h = from_size
    to_w, to_h = to_size
    if from_w <= 0 or from_h <= 0:
        raise ValueError("Source dimensions must be positive")

    scale_x = to_w / from_w
    scale_y = to_h / from_h
    return BoundingBox(
        rect.x * scale_x,
        rect.y * scale_y,
        rect.width * scale_x,
        rect.height * scale_y,
    )


def extract_crop(image: np.ndarray, region: CropRegion) -> np.ndarray:
    """Cut the region out of the natural-size image."""
    h, w = image.shape[:2]
    x, y, cw, ch = region.to_pixels(w, h)
    return image[y:y + ch, x:x + cw].copy()


def encode_png(image: np.ndarray) -> bytes:
    """Encode an image as PNG bytes."""
    ok, buffer = cv2.imencode(".png", image)
    if not ok:
        raise RuntimeError("Failed to encode image as PNG")
    return buffer.tobytes()


def decode_image(data: bytes) -> Optional[np.ndarray]:
    """Decode encoded image bytes into a BGR array, or None."""
    if not data:
        return None
    nparr = np.frombuffer(data, np.uint8)
    return cv2.imdecode(nparr, cv2.IMREAD_COLOR)
