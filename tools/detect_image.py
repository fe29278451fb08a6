#!/usr/bin/env python3
"""
Run the detection pipeline on a single image without the queue.

This utility helps verify that:
1. The ONNX model loads and accepts the configured input size
2. Postprocessing produces sensible boxes for a known image
3. The remap convention lines boxes up with the source image

Usage:
    python tools/detect_image.py --image path/to/image.jpg
    python tools/detect_image.py --image photo.png --config config/config.yaml --output boxes.png
"""

import argparse
import json
import os
import sys
import time

# Add project directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src"))

import cv2

from imaging.preprocess import prepare_input, read_image
from inference.onnx_backend import OnnxConfig, OnnxDetector
from inference.postprocess import PostprocessConfig, Postprocessor
from main import load_config
from models.config import Config
from models.detection import detections_to_json
from models.job import ImageFormat
from ops.errors import JobFailure


def main():
    parser = argparse.ArgumentParser(description="Run detection on one image")
    parser.add_argument("--image", required=True, help="PNG or JPEG image to process")
    parser.add_argument("--config", default="config/config.yaml", help="Path to configuration file")
    parser.add_argument("--model", default=None, help="Override detector.model_path")
    parser.add_argument("--output", default=None, help="Write an annotated copy of the image here")
    args = parser.parse_args()

    config = Config.from_dict(load_config(args.config))
    detector_cfg = config.detector
    model_path = args.model or detector_cfg.model_path

    ext = os.path.splitext(args.image)[1].lower()
    image_format = ImageFormat.PNG if ext == ".png" else ImageFormat.JPEG

    print(f"📦 Loading model: {model_path}")
    start = time.time()
    detector = OnnxDetector(OnnxConfig(model_path=model_path, num_threads=detector_cfg.num_threads))
    print(f"   Model loaded in {time.time() - start:.2f}s")

    postprocessor = Postprocessor(PostprocessConfig.from_detector_config(detector_cfg))

    try:
        image = read_image(args.image, image_format)
        tensor = prepare_input(
            image,
            (detector_cfg.input_width, detector_cfg.input_height),
            detector_cfg.mean,
            detector_cfg.std,
            detector_cfg.resize_mode,
        )
        start = time.time()
        raw = detector.infer(tensor)
        detections = postprocessor.process(raw, image.shape[1], image.shape[0])
    except JobFailure as e:
        print(f"❌ {type(e).__name__}: {e}")
        return 1

    print(f"✅ {len(detections)} detections in {(time.time() - start) * 1000:.1f}ms")
    print(json.dumps(detections_to_json(detections)))

    if args.output:
        for det in detections:
            x1, y1, x2, y2 = det.box
            cv2.rectangle(image, (x1, y1), (x2, y2), (0, 255, 0), 2)
            cv2.putText(image, f"{det.confidence:.2f}", (x1 + 2, max(12, y1 - 4)),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.5, (0, 255, 0), 1)
        cv2.imwrite(args.output, image)
        print(f"   Annotated image written to {args.output}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
