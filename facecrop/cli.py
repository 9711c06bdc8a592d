#!/usr/bin/env python3
"""Command line interface for FaceCrop.

Usage:
    facecrop crop --image photo.jpg --aspect 4:5 --output cropped.png
    facecrop detect --image photo.jpg --output boxes.png
    facecrop recognize --image photo.jpg --output labeled.png
    facecrop cloud-detect --image photo.jpg
    facecrop api --port 8000
"""

import argparse
import base64
import dataclasses
import json
import logging
import sys
from pathlib import Path

import cv2

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def _load_image(path: str):
    image = cv2.imread(path)
    if image is None:
        logger.error(f"Could not load image: {path}")
        sys.exit(1)
    return image


def cmd_crop(args):
    """Crop an image around its primary face."""
    from .crop import parse_aspect_ratio
    from .detection import FaceDetector
    from .service import auto_crop

    try:
        aspect = parse_aspect_ratio(args.aspect)
    except ValueError as e:
        logger.error(str(e))
        return 2

    image = _load_image(args.image)
    detector = FaceDetector(backend=args.backend)
    result = auto_crop(image, aspect, detector)

    if result.face_centered:
        logger.info(f"Centered on face at {result.face.bbox}")
    else:
        logger.info("No face detected, using a centered crop")

    region = result.region
    logger.info(
        f"Crop: x={region.x:.1f}% y={region.y:.1f}% "
        f"w={region.width:.1f}% h={region.height:.1f}%"
    )

    output = Path(args.output)
    output.write_bytes(result.to_png())
    logger.info(f"Saved to: {output}")
    return 0


def cmd_detect(args):
    """Detect faces and optionally draw their boxes."""
    from .detection import FaceDetector
    from .recognition import FaceDetectionResult
    from .service import draw_labeled_boxes

    image = _load_image(args.image)
    detector = FaceDetector(backend=args.backend)
    faces = detector.detect(image)
    logger.info(f"Found {len(faces)} face(s)")

    for i, face in enumerate(faces):
        x, y, w, h = face.bbox
        logger.info(f"  [{i+1}] pos=({x},{y}) size={w}x{h} conf={face.confidence:.0%}")

    if args.output:
        results = [FaceDetectionResult(face.box, None, None) for face in faces]
        cv2.imwrite(args.output, draw_labeled_boxes(image, results))
        logger.info(f"Saved to: {args.output}")
    return 0


def cmd_recognize(args):
    """Label faces against the reference identities."""
    from .constants import get_recognition_config
    from .detection import FaceDetector
    from .recognition import FaceLabeler, ReferenceLoadError
    from .service import draw_labeled_boxes

    config = get_recognition_config()
    if args.threshold is not None:
        config = dataclasses.replace(config, distance_threshold=args.threshold)

    try:
        labeler = FaceLabeler.from_config(config, detector=FaceDetector(backend=args.backend))
    except (ReferenceLoadError, RuntimeError) as e:
        logger.error(f"Error loading models: {e}")
        return 1

    image = _load_image(args.image)
    results = labeler.label(image)
    logger.info(f"Detected faces ({len(results)}):")
    for i, result in enumerate(results):
        logger.info(f"  Face {i+1}: {result.label}")

    if args.output:
        cv2.imwrite(args.output, draw_labeled_boxes(image, results))
        logger.info(f"Saved to: {args.output}")
    return 0


def cmd_cloud_detect(args):
    """Detect the first face with AWS Rekognition."""
    from botocore.exceptions import BotoCoreError, ClientError

    from .cloud import detect_first_face

    try:
        payload = base64.b64encode(Path(args.image).read_bytes()).decode("ascii")
        box = detect_first_face(payload)
    except OSError as e:
        logger.error(f"Could not read image: {e}")
        return 1
    except (BotoCoreError, ClientError) as e:
        logger.error(f"Error detecting face: {e}")
        return 1

    if box is None:
        logger.error("No faces detected")
        return 1

    print(json.dumps({"success": True, "faceBoundingBox": box.to_dict()}, indent=2))
    return 0


def cmd_api(args):
    """Start the API server."""
    import uvicorn
    from .api import create_app
    from .constants import get_api_config

    api_config = get_api_config()
    host = args.host or api_config.host
    port = args.port or api_config.port

    app = create_app(cors_origins=api_config.cors_origins, debug=args.debug)

    logger.info("Starting FaceCrop API")
    logger.info(f"  URL: http://{host}:{port}")
    logger.info(f"  Docs: http://{host}:{port}/docs")

    uvicorn.run(app, host=host, port=port, log_level="warning")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="facecrop",
        description="Face-centered image cropping and face recognition",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  facecrop crop --image photo.jpg --aspect 16:9 --output out.png
  facecrop recognize --image photo.jpg --output labeled.png
  facecrop api --port 8000
        """
    )
    parser.add_argument("--config", help="Path to config.yaml")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    backends = ["opencv_dnn", "haar_cascade"]

    crop_parser = subparsers.add_parser("crop", help="Crop around the primary face")
    crop_parser.add_argument("--image", "-i", required=True, help="Input image path")
    crop_parser.add_argument("--aspect", "-a", default=None, help="1:1, 4:5, 16:9, W:H or a number")
    crop_parser.add_argument("--output", "-o", default="cropped-image.png", help="Output PNG path")
    crop_parser.add_argument("--backend", "-b", default=None, choices=backends, help="Detection backend")

    detect_parser = subparsers.add_parser("detect", help="Detect faces")
    detect_parser.add_argument("--image", "-i", required=True, help="Input image path")
    detect_parser.add_argument("--output", "-o", help="Output image path")
    detect_parser.add_argument("--backend", "-b", default=None, choices=backends, help="Detection backend")

    recognize_parser = subparsers.add_parser("recognize", help="Label faces with reference identities")
    recognize_parser.add_argument("--image", "-i", required=True, help="Input image path")
    recognize_parser.add_argument("--output", "-o", help="Output image path")
    recognize_parser.add_argument("--backend", "-b", default=None, choices=backends, help="Detection backend")
    recognize_parser.add_argument("--threshold", "-t", type=float, default=None, help="Distance threshold")

    cloud_parser = subparsers.add_parser("cloud-detect", help="Detect a face with AWS Rekognition")
    cloud_parser.add_argument("--image", "-i", required=True, help="Input image path")

    api_parser = subparsers.add_parser("api", help="Start API server")
    api_parser.add_argument("--host", default=None, help="Host to bind to")
    api_parser.add_argument("--port", "-p", type=int, default=None, help="Port to bind to")

    return parser


def main(argv=None):
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.config:
        from .constants import get_config
        get_config().reload(Path(args.config))

    commands = {
        "crop": cmd_crop,
        "detect": cmd_detect,
        "recognize": cmd_recognize,
        "cloud-detect": cmd_cloud_detect,
        "api": cmd_api,
    }

    result = commands[args.command](args)
    sys.exit(result or 0)


if __name__ == "__main__":
    main()
