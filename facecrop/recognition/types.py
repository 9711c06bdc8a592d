"""Face recognition types."""

from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from ..detection.types import BoundingBox

UNKNOWN_LABEL = "unknown"


@dataclass(frozen=True)
class FaceMatch:
    """Nearest identity for a descriptor."""

    label: str
    distance: float

    @property
    def is_unknown(self) -> bool:
        return self.label == UNKNOWN_LABEL

    def to_string(self, with_distance: bool = True) -> str:
        if not with_distance:
            return self.label
        return f"{self.label} ({round(self.distance, 2)})"

    def __str__(self) -> str:
        return self.to_string()


@dataclass
class LabeledDescriptors:
    """Reference descriptors bound to one identity name."""

    label: str
    descriptors: List[np.ndarray] = field(default_factory=list)

    def __post_init__(self):
        if not self.descriptors:
            raise ValueError(f"{self.label}: at least one descriptor is required")


@dataclass
class FaceDetectionResult:
    """A detected face with its descriptor and best identity match."""

    bounding_box: BoundingBox
    descriptor: Optional[np.ndarray]
    match: Optional[FaceMatch]

    @property
    def label(self) -> str:
        return str(self.match) if self.match is not None else UNKNOWN_LABEL

    def to_dict(self) -> dict:
        return {
            "boundingBox": self.bounding_box.to_dict(),
            "label": self.label,
            "identity": self.match.label if self.match else UNKNOWN_LABEL,
            "distance": round(self.match.distance, 4) if self.match else None,
        }
