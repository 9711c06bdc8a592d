"""FastAPI routes for face detection, cropping and recognition.

Endpoints:
    POST /api                    - Cloud face detection (AWS Rekognition)
    GET  /api/health             - Health check
    GET  /api/aspect-ratios      - Crop aspect ratio presets
    POST /api/crop               - Face-centered crop, returned as PNG
    POST /api/recognize          - Label faces against reference identities
    POST /api/recognize/overlay  - Same, drawn onto the image as PNG
"""

import json
import logging
import math
from typing import List, Optional

from fastapi import APIRouter, FastAPI, File, Form, Request, UploadFile, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from . import __version__
from .cloud import detect_first_face, set_rekognition_client
from .constants import ASPECT_PRESETS, get_crop_config
from .crop import CropRegion, decode_image, encode_png, parse_aspect_ratio
from .detection import BaseFaceDetector, FaceDetector
from .recognition import FaceLabeler
from .service import auto_crop, draw_labeled_boxes

logger = logging.getLogger(__name__)


# =============================================================================
# Pydantic Schemas
# =============================================================================

class DetectFaceRequest(BaseModel):
    image: Optional[str] = None


class FaceBoundingBox(BaseModel):
    x: float
    y: float
    width: float
    height: float


class DetectFaceResponse(BaseModel):
    success: bool
    faceBoundingBox: FaceBoundingBox


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str
    version: str
    detection_backend: str
    models_loaded: bool
    identities: List[str]


class RecognizedFace(BaseModel):
    boundingBox: FaceBoundingBox
    label: str
    identity: str
    distance: Optional[float] = None


class RecognizeResponse(BaseModel):
    faces_detected: int
    faces: List[RecognizedFace]


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


# =============================================================================
# Service Layer
# =============================================================================

_detector: Optional[BaseFaceDetector] = None
_labeler: Optional[FaceLabeler] = None
_labeler_error: Optional[str] = None


def get_detector() -> BaseFaceDetector:
    """Get the global face detector instance."""
    global _detector
    if _detector is None:
        _detector = FaceDetector()
    return _detector


def set_detector(detector: Optional[BaseFaceDetector]) -> None:
    """Set the global face detector instance."""
    global _detector
    _detector = detector


def get_labeler() -> Optional[FaceLabeler]:
    """Get the global face labeler, loading reference identities once.

    Returns None when loading failed; the reason is kept for responses.
    """
    global _labeler, _labeler_error
    if _labeler is None and _labeler_error is None:
        try:
            _labeler = FaceLabeler.from_config(detector=get_detector())
        except Exception as e:
            logger.error(f"Error loading models or creating face matcher: {e}")
            _labeler_error = f"Error loading models: {e}"
    return _labeler


def set_labeler(labeler: Optional[FaceLabeler]) -> None:
    """Set the global face labeler instance."""
    global _labeler, _labeler_error
    _labeler = labeler
    _labeler_error = None


async def _read_image(file: UploadFile):
    content = await file.read()
    return decode_image(content)


# =============================================================================
# Router
# =============================================================================

router = APIRouter(prefix="/api", tags=["faces"])


@router.post(
    "",
    response_model=DetectFaceResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Detect the first face with AWS Rekognition",
)
async def detect_face(body: DetectFaceRequest):
    """Return the first face's bounding box in normalized coordinates."""
    if not body.image:
        return error_response(status.HTTP_400_BAD_REQUEST, "No image provided")

    try:
        box = await run_in_threadpool(detect_first_face, body.image)
        if box is None:
            return error_response(status.HTTP_404_NOT_FOUND, "No faces detected")
        return DetectFaceResponse(success=True, faceBoundingBox=FaceBoundingBox(**box.to_dict()))
    except Exception as e:
        logger.error(f"Error detecting face: {e}")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error")


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health_check():
    """Health check endpoint."""
    detector = _detector
    return HealthResponse(
        status="healthy",
        version=__version__,
        detection_backend=getattr(detector, "backend_name", type(detector).__name__) if detector else "not loaded",
        models_loaded=_labeler is not None,
        identities=_labeler.identities if _labeler else [],
    )


@router.get("/aspect-ratios", summary="Crop aspect ratio presets")
async def aspect_ratios():
    return {"presets": ASPECT_PRESETS, "default": get_crop_config().default_aspect}


@router.post(
    "/crop",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}, 400: {"model": ErrorResponse}},
    summary="Crop an image around its primary face",
)
async def crop_image(
    file: UploadFile = File(..., description="Image file to crop"),
    aspect: str = Form("", description="Aspect ratio preset (1:1, 4:5, 16:9), W:H or number"),
    x: Optional[float] = Form(None, description="Crop left edge, percent"),
    y: Optional[float] = Form(None, description="Crop top edge, percent"),
    width: Optional[float] = Form(None, description="Crop width, percent"),
    height: Optional[float] = Form(None, description="Crop height, percent"),
):
    """Crop around the first detected face, or to a user-confirmed region."""
    try:
        ratio = parse_aspect_ratio(aspect)
    except ValueError as e:
        return error_response(status.HTTP_400_BAD_REQUEST, str(e))

    region = None
    manual = [x, y, width, height]
    if any(v is not None for v in manual):
        if any(v is None for v in manual):
            return error_response(status.HTTP_400_BAD_REQUEST, "x, y, width and height must be given together")
        if not all(math.isfinite(v) for v in manual):
            return error_response(status.HTTP_400_BAD_REQUEST, "Crop region values must be finite numbers")
        if x < 0 or y < 0 or width <= 0 or height <= 0 or x + width > 100 or y + height > 100:
            return error_response(status.HTTP_400_BAD_REQUEST, "Crop region must lie within the image")
        region = CropRegion(x, y, width, height, ratio)

    image = await _read_image(file)
    if image is None:
        return error_response(status.HTTP_400_BAD_REQUEST, "Could not decode image")

    try:
        result = auto_crop(image, ratio, get_detector(), region=region)
        png = result.to_png()
    except Exception as e:
        logger.error(f"Crop failed: {e}")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error")

    filename = get_crop_config().download_filename
    return Response(
        content=png,
        media_type="image/png",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "X-Crop-Region": json.dumps(result.region.to_dict()),
            "X-Face-Centered": str(result.face_centered).lower(),
        },
    )


async def _label_upload(file: UploadFile):
    """Shared path of the recognize endpoints: (image, results) or an error response."""
    labeler = get_labeler()
    if labeler is None:
        return None, error_response(status.HTTP_503_SERVICE_UNAVAILABLE, _labeler_error or "Models not loaded")

    image = await _read_image(file)
    if image is None:
        return None, error_response(status.HTTP_400_BAD_REQUEST, "Could not decode image")

    try:
        return (image, labeler.label(image)), None
    except Exception as e:
        logger.error(f"Error detecting faces: {e}")
        return None, error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error")


@router.post(
    "/recognize",
    response_model=RecognizeResponse,
    responses={400: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
    summary="Label faces against reference identities",
)
async def recognize_faces(file: UploadFile = File(..., description="Image file to analyze")):
    """Detect all faces and label each with the nearest identity."""
    labeled, error = await _label_upload(file)
    if error is not None:
        return error

    _, results = labeled
    return RecognizeResponse(
        faces_detected=len(results),
        faces=[RecognizedFace(**r.to_dict()) for r in results],
    )


@router.post(
    "/recognize/overlay",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}, 400: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
    summary="Draw labeled face boxes onto the image",
)
async def recognize_overlay(file: UploadFile = File(..., description="Image file to analyze")):
    labeled, error = await _label_upload(file)
    if error is not None:
        return error

    image, results = labeled
    return Response(content=encode_png(draw_labeled_boxes(image, results)), media_type="image/png")


# =============================================================================
# Application Factory
# =============================================================================

def create_app(
    detector: Optional[BaseFaceDetector] = None,
    labeler: Optional[FaceLabeler] = None,
    rekognition_client=None,
    cors_origins: Optional[List[str]] = None,
    debug: bool = False,
) -> FastAPI:
    """Create FastAPI application.

    Args:
        detector: Optional face detector for the crop endpoint
        labeler: Optional face labeler for the recognize endpoints
        rekognition_client: Optional boto3 Rekognition client
        cors_origins: List of allowed CORS origins
        debug: Enable debug mode

    Returns:
        FastAPI application
    """
    app = FastAPI(
        title="FaceCrop API",
        description="Face-centered image cropping and face recognition",
        version=__version__,
        debug=debug,
    )

    if cors_origins is None:
        cors_origins = ["*"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if detector is not None:
        set_detector(detector)
    if labeler is not None:
        set_labeler(labeler)
    if rekognition_client is not None:
        set_rekognition_client(rekognition_client)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Invalid request to {request.url.path}: {exc.errors()}")
        return error_response(status.HTTP_400_BAD_REQUEST, "Invalid request body")

    app.include_router(router)

    @app.get("/", tags=["root"])
    async def root():
        return {
            "message": "FaceCrop API",
            "docs": "/docs",
            "health": "/api/health",
        }

    return app
