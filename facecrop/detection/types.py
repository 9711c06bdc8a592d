"""Detected face and bounding box data types."""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned rectangle in pixel or normalized [0, 1] units."""

    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> Tuple[float, float]:
        """Return center point of the box."""
        return (self.x + self.width / 2, self.y + self.height / 2)

    def to_pixels(self, image_width: int, image_height: int) -> "BoundingBox":
        """Convert a normalized box to pixel units."""
        return BoundingBox(
            x=self.x * image_width,
            y=self.y * image_height,
            width=self.width * image_width,
            height=self.height * image_height,
        )

    def to_normalized(self, image_width: int, image_height: int) -> "BoundingBox":
        """Convert a pixel box to normalized units."""
        if image_width <= 0 or image_height <= 0:
            raise ValueError("Image dimensions must be positive")
        return BoundingBox(
            x=self.x / image_width,
            y=self.y / image_height,
            width=self.width / image_width,
            height=self.height / image_height,
        )

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass
class DetectedFace:
    """Represents a detected face with bounding box and confidence."""

    x: int
    y: int
    width: int
    height: int
    confidence: float = 1.0

    @property
    def bbox(self) -> Tuple[int, int, int, int]:
        """Return bounding box as (x, y, w, h)."""
        return (self.x, self.y, self.width, self.height)

    @property
    def box(self) -> BoundingBox:
        """Return the pixel bounding box."""
        return BoundingBox(float(self.x), float(self.y), float(self.width), float(self.height))

    @property
    def area(self) -> int:
        """Return area of bounding box."""
        return self.width * self.height
