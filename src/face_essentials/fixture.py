"""Synthetic test image, image loading and result drawing.

All drawing uses OpenCV primitives on BGR numpy images. OpenCV is imported
directly rather than through the bound environment: these helpers need the
image backend only, never dlib or ONNX Runtime, and calling them does not
bind the environment.
"""

import logging
from pathlib import Path
from typing import List, Optional, Tuple, Union

import cv2
import numpy as np

from .constants import get_fixture_config
from .types import FaceDescription

logger = logging.getLogger(__name__)


def hex_to_bgr(color: str) -> Tuple[int, int, int]:
    """Convert '#rrggbb' to an OpenCV BGR tuple."""
    value = color.lstrip("#")
    if len(value) != 6:
        raise ValueError(f"Expected #rrggbb color, got {color!r}")
    r, g, b = (int(value[i:i + 2], 16) for i in (0, 2, 4))
    return (b, g, r)


BACKGROUND = hex_to_bgr("#f0d0b0")
SKIN = hex_to_bgr("#ffdbac")
BLACK = (0, 0, 0)


def create_test_image(size: Optional[int] = None) -> np.ndarray:
    """Draw the placeholder face used as the detection fixture.

    The layout is defined on a 200x200 canvas and scaled to ``size``:
    background, face ellipse, two eyes, a triangular nose and an arc mouth.
    The image is deterministic and is not guaranteed to be detectable.

    Args:
        size: Edge length in pixels (uses config default if None)

    Returns:
        BGR image of shape (size, size, 3)
    """
    size = size or get_fixture_config().size
    s = size / 200.0

    def pt(x: float, y: float) -> Tuple[int, int]:
        return (int(round(x * s)), int(round(y * s)))

    def ln(v: float) -> int:
        return max(1, int(round(v * s)))

    image = np.empty((size, size, 3), dtype=np.uint8)
    image[:] = BACKGROUND

    # Face oval
    cv2.ellipse(image, pt(100, 100), (ln(60), ln(80)), 0, 0, 360, SKIN, -1, cv2.LINE_AA)

    # Eyes
    cv2.circle(image, pt(80, 85), ln(8), BLACK, -1, cv2.LINE_AA)
    cv2.circle(image, pt(120, 85), ln(8), BLACK, -1, cv2.LINE_AA)

    # Nose
    nose = np.array([pt(100, 90), pt(95, 110), pt(105, 110)], dtype=np.int32)
    cv2.fillPoly(image, [nose], BLACK, cv2.LINE_AA)

    # Mouth: lower half circle, stroked
    cv2.ellipse(image, pt(100, 125), (ln(20), ln(20)), 0, 0, 180, BLACK, 1, cv2.LINE_AA)

    return image


def load_image(path: Union[str, Path]) -> np.ndarray:
    """Read an image file as BGR.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If OpenCV cannot decode it
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Image not found: {path}")

    data = np.fromfile(str(path), dtype=np.uint8)
    image = cv2.imdecode(data, cv2.IMREAD_COLOR)
    if image is None:
        raise ValueError(f"Could not decode image: {path}")
    return image


def save_image(image: np.ndarray, path: Union[str, Path]) -> Path:
    """Write a BGR image, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if not cv2.imwrite(str(path), image):
        raise ValueError(f"Could not write image: {path}")
    logger.info(f"Saved image to {path}")
    return path


def draw_detections(
    image: np.ndarray,
    results: List[FaceDescription],
    color: Tuple[int, int, int] = (0, 255, 0),
    thickness: int = 2,
    show_score: bool = True,
    show_landmarks: bool = True,
    show_expression: bool = True,
) -> np.ndarray:
    """Draw boxes, landmarks and top expression on a copy of ``image``."""
    output = image.copy()

    for result in results:
        box = result.box.round()
        cv2.rectangle(
            output,
            (box.left, box.top),
            (box.right, box.bottom),
            color,
            thickness,
        )

        labels = []
        if show_score:
            labels.append(f"{result.score:.0%}")
        if show_expression and result.expressions is not None:
            label, _ = result.expressions.as_sorted_list()[0]
            labels.append(label)
        if labels:
            cv2.putText(
                output, " ".join(labels),
                (box.left, max(box.top - 10, 10)),
                cv2.FONT_HERSHEY_SIMPLEX, 0.5, color, 1
            )

        if show_landmarks and result.landmarks is not None:
            for x, y in result.landmarks.positions.tolist():
                cv2.circle(output, (int(round(x)), int(round(y))), 2, (0, 0, 255), -1)

    return output
