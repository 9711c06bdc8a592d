"""Detection-and-crop orchestration and result rendering."""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import cv2
import numpy as np

from .crop import (
    CropRegion,
    centered_aspect_crop,
    derive_crop_region,
    encode_png,
    extract_crop,
)
from .detection import BaseFaceDetector, DetectedFace
from .recognition import FaceDetectionResult

logger = logging.getLogger(__name__)

BOX_COLOR = (0, 255, 0)
UNKNOWN_COLOR = (0, 0, 255)


@dataclass
class AutoCropResult:
    """Outcome of an automatic face-centered crop."""

    region: CropRegion
    face: Optional[DetectedFace]
    image: np.ndarray

    @property
    def face_centered(self) -> bool:
        return self.face is not None

    def to_png(self) -> bytes:
        return encode_png(self.image)


def suggest_crop(
    image: np.ndarray,
    aspect: float,
    detector: BaseFaceDetector,
) -> Tuple[CropRegion, Optional[DetectedFace]]:
    """Suggest a crop region centered on the first detected face.

    Without a face the region is the largest centered crop of the aspect
    ratio, as a starting point for manual adjustment.
    """
    h, w = image.shape[:2]
    faces = detector.detect(image)
    if not faces:
        logger.info("No face detected, suggesting a centered crop")
        return centered_aspect_crop(aspect, w, h), None

    face = faces[0]
    region = derive_crop_region(face.box, aspect, w, h)
    logger.info(f"Crop centered on face at {face.bbox}: {region}")
    return region, face


def auto_crop(
    image: np.ndarray,
    aspect: float,
    detector: BaseFaceDetector,
    region: Optional[CropRegion] = None,
) -> AutoCropResult:
    """Crop an image around its primary face.

    Args:
        image: Natural-size BGR image
        aspect: Target width/height ratio
        detector: Face detector
        region: User-confirmed region that overrides the suggestion
    """
    face = None
    if region is None:
        region, face = suggest_crop(image, aspect, detector)
    return AutoCropResult(region=region, face=face, image=extract_crop(image, region))


def draw_labeled_boxes(
    image: np.ndarray,
    results: List[FaceDetectionResult],
    thickness: int = 2,
) -> np.ndarray:
    """Draw each face box with its match label on a copy of the image."""
    output = image.copy()

    for result in results:
        box = result.bounding_box
        x1, y1 = int(round(box.x)), int(round(box.y))
        x2, y2 = int(round(box.x + box.width)), int(round(box.y + box.height))
        color = UNKNOWN_COLOR if result.match is None or result.match.is_unknown else BOX_COLOR

        cv2.rectangle(output, (x1, y1), (x2, y2), color, thickness)

        label = result.label
        (text_w, text_h), baseline = cv2.getTextSize(label, cv2.FONT_HERSHEY_SIMPLEX, 0.5, 1)
        text_y = max(y1 - baseline, text_h)
        cv2.rectangle(output, (x1, text_y - text_h - baseline), (x1 + text_w, text_y + baseline), color, -1)
        cv2.putText(output, label, (x1, text_y), cv2.FONT_HERSHEY_SIMPLEX, 0.5, (255, 255, 255), 1)

    return output
