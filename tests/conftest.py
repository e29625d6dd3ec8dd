"""Pytest configuration and fixtures."""

import sys
from pathlib import Path
from typing import List, Optional

import numpy as np
import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from face_essentials.environment import reset_environment  # noqa: E402
from face_essentials.nets import BaseNet, Nets  # noqa: E402
from face_essentials.types import (  # noqa: E402
    Box,
    FaceDetection,
    FaceExpressions,
    FaceLandmarks68,
)


class FakeNet(BaseNet):
    """Stand-in net that needs no model files."""

    def __init__(self, name: str, display_name: str, fail: bool = False):
        super().__init__()
        self.name = name
        self.display_name = display_name
        self.fail = fail
        self.load_calls = 0

    @property
    def model_files(self) -> List[str]:
        return []

    def _load(self, paths):
        self.load_calls += 1
        if self.fail:
            raise RuntimeError(f"corrupt {self.name} model")
        return object()


class FakeDetectorNet(FakeNet):
    def __init__(self, boxes: Optional[List[tuple]] = None, raises: bool = False, **kwargs):
        super().__init__("face_detector", "FaceDetectorNet", **kwargs)
        self.boxes = boxes or []
        self.raises = raises

    def detect(self, image, options=None):
        self.model
        if self.raises:
            raise RuntimeError("detector exploded")
        h, w = image.shape[:2]
        return [
            FaceDetection(
                box=Box(x, y, bw, bh).clip_at_image_borders(w, h),
                score=score,
                image_width=w,
                image_height=h,
            )
            for (x, y, bw, bh, score) in self.boxes
        ]


class FakeLandmarkNet(FakeNet):
    def __init__(self, **kwargs):
        super().__init__("face_landmark_68", "FaceLandmark68Net", **kwargs)

    def predict(self, image, box):
        self.model
        t = np.linspace(0.0, 1.0, 68)
        points = np.stack([box.x + t * box.width, box.y + t * box.height], axis=1)
        return FaceLandmarks68(points)


class FakeRecognitionNet(FakeNet):
    def __init__(self, **kwargs):
        super().__init__("face_recognition", "FaceRecognitionNet", **kwargs)

    def compute_descriptor(self, image, landmarks):
        self.model
        rng = np.random.default_rng(int(landmarks.positions.sum()) % 1000)
        return rng.standard_normal(128).astype(np.float32) * 0.1


class FakeExpressionNet(FakeNet):
    def __init__(self, raises: bool = False, **kwargs):
        super().__init__("face_expression", "FaceExpressionNet", **kwargs)
        self.raises = raises

    def predict(self, image, box):
        self.model
        if self.raises:
            raise RuntimeError("expression model exploded")
        return FaceExpressions.from_scores([3.0, 1.0, 0.5, 0.2, 0.1, 0.0, -1.0, -2.0])


@pytest.fixture
def make_nets():
    """Factory for a bundle of fake nets.

    Args (of the returned function):
        boxes: (x, y, w, h, score) tuples the detector returns
        fail: names of nets whose load raises
        detector_raises / expression_raises: make inference raise
    """
    def _make(boxes=None, fail=(), detector_raises=False, expression_raises=False) -> Nets:
        return Nets(
            face_detector=FakeDetectorNet(
                boxes=boxes, raises=detector_raises, fail="face_detector" in fail
            ),
            face_landmark_68=FakeLandmarkNet(fail="face_landmark_68" in fail),
            face_recognition=FakeRecognitionNet(fail="face_recognition" in fail),
            face_expression=FakeExpressionNet(
                raises=expression_raises, fail="face_expression" in fail
            ),
        )
    return _make


@pytest.fixture
def one_face():
    """A single detection covering the fixture's face oval."""
    return [(40.0, 20.0, 120.0, 160.0, 0.93)]


@pytest.fixture
def sample_image():
    """Create a sample test image."""
    return np.random.default_rng(0).integers(0, 255, (240, 320, 3), dtype=np.uint8)


@pytest.fixture
def random_descriptor():
    """Create a random 128D descriptor."""
    return np.random.default_rng(42).standard_normal(128).astype(np.float32)


@pytest.fixture(autouse=True)
def clean_environment():
    """Forget memoized library handles around every test."""
    reset_environment()
    yield
    reset_environment()
