"""FaceCrop: face-centered image cropping and face recognition.

Quick Start:
    # Crop an image around its primary face
    python -m facecrop crop --image photo.jpg --aspect 4:5 --output out.png

    # Start the API server
    python -m facecrop api --port 8000

    # As library
    from facecrop import FaceDetector, auto_crop, parse_aspect_ratio

    result = auto_crop(image, parse_aspect_ratio("16:9"), FaceDetector())
"""

__version__ = "1.0.0"

from .crop import (
    CropRegion,
    centered_aspect_crop,
    derive_crop_region,
    extract_crop,
    parse_aspect_ratio,
)
from .detection import BoundingBox, DetectedFace, FaceDetector
from .recognition import FaceLabeler, FaceMatch, FaceMatcher
from .service import AutoCropResult, auto_crop, draw_labeled_boxes

__all__ = [
    "__version__",
    "CropRegion",
    "centered_aspect_crop",
    "derive_crop_region",
    "extract_crop",
    "parse_aspect_ratio",
    "BoundingBox",
    "DetectedFace",
    "FaceDetector",
    "FaceLabeler",
    "FaceMatch",
    "FaceMatcher",
    "AutoCropResult",
    "auto_crop",
    "draw_labeled_boxes",
]
