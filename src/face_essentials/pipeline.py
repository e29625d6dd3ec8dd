"""Combined detection + landmarks + descriptor + expression call.

Usage:
    results = (
        detect_all_faces(image, nets)
        .with_face_landmarks()
        .with_face_descriptors()
        .with_face_expressions()
        .run()
    )
"""

import logging
from typing import List, Optional

import numpy as np

from .nets import FaceDetectorOptions, Nets
from .types import FaceDescription

logger = logging.getLogger(__name__)


class DetectAllFacesTask:
    """Detection call with optional per-face stages.

    Each ``with_*`` method enables a stage and returns self for chaining.
    Descriptors are computed from the aligned landmarks, so enabling
    descriptors also enables landmarks.
    """

    def __init__(
        self,
        image: np.ndarray,
        nets: Nets,
        options: Optional[FaceDetectorOptions] = None,
    ):
        if image is None or image.size == 0:
            raise ValueError("Cannot run detection on an empty image")

        self.image = image
        self.nets = nets
        self.options = options
        self.landmarks = False
        self.descriptors = False
        self.expressions = False

    def with_face_landmarks(self) -> "DetectAllFacesTask":
        self.landmarks = True
        return self

    def with_face_descriptors(self) -> "DetectAllFacesTask":
        self.landmarks = True
        self.descriptors = True
        return self

    def with_face_expressions(self) -> "DetectAllFacesTask":
        self.expressions = True
        return self

    def run(self) -> List[FaceDescription]:
        """Run detection and every enabled stage on each detected face."""
        detections = self.nets.face_detector.detect(self.image, self.options)

        results = []
        for detection in detections:
            result = FaceDescription(detection=detection)

            if self.landmarks:
                result.landmarks = self.nets.face_landmark_68.predict(self.image, detection.box)

            if self.descriptors:
                result.descriptor = self.nets.face_recognition.compute_descriptor(
                    self.image, result.landmarks
                )

            if self.expressions:
                # Classify on the landmark-aligned region when available
                region = result.landmarks.bounding_box() if result.landmarks is not None else detection.box
                result.expressions = self.nets.face_expression.predict(self.image, region)

            results.append(result)

        logger.debug(
            f"Processed {len(results)} face(s) "
            f"(landmarks={self.landmarks}, descriptors={self.descriptors}, "
            f"expressions={self.expressions})"
        )
        return results


def detect_all_faces(
    image: np.ndarray,
    nets: Nets,
    options: Optional[FaceDetectorOptions] = None,
) -> DetectAllFacesTask:
    """Start a detection call on ``image``; chain ``with_*`` then ``run()``."""
    return DetectAllFacesTask(image, nets, options)
