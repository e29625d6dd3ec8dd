"""SSD ResNet-10 face detector running on OpenCV DNN."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

import numpy as np

from ..constants import get_face_detector_config, get_model_config
from ..environment import get_environment
from ..types import Box, FaceDetection
from .base import BaseNet

logger = logging.getLogger(__name__)


@dataclass
class FaceDetectorOptions:
    """Per-call detector options."""
    input_size: Tuple[int, int] = (300, 300)
    score_threshold: float = 0.5
    nms_threshold: float = 0.4

    @classmethod
    def from_config(cls) -> "FaceDetectorOptions":
        """Options taken from the face_detector config section."""
        config = get_face_detector_config()
        return cls(
            input_size=config.input_size,
            score_threshold=config.score_threshold,
            nms_threshold=config.nms_threshold,
        )


class FaceDetectorNet(BaseNet):
    """Face detector using OpenCV DNN module with the pre-trained SSD model.

    Pros: Good accuracy, comes with OpenCV, scores are probabilities
    Cons: Needs two model files (prototxt + caffemodel)
    """

    name = "face_detector"
    display_name = "FaceDetectorNet"
    download_url = (
        "https://raw.githubusercontent.com/opencv/opencv_3rdparty/"
        "dnn_samples_face_detector_20170830/res10_300x300_ssd_iter_140000.caffemodel"
    )

    def __init__(
        self,
        config_file: Optional[str] = None,
        weights_file: Optional[str] = None,
    ):
        """Initialize the detector wrapper.

        Args:
            config_file: Prototxt file name (uses config default if None)
            weights_file: Caffemodel file name (uses config default if None)
        """
        super().__init__()
        models = get_model_config()
        self.config_file = config_file or models.detector_config
        self.weights_file = weights_file or models.detector_weights
        self._mean_values = get_face_detector_config().mean_values

    @property
    def model_files(self) -> List[str]:
        return [self.config_file, self.weights_file]

    def _load(self, paths: List[Path]):
        cv2 = get_environment().cv2
        config_path, weights_path = paths

        net = cv2.dnn.readNetFromCaffe(str(config_path), str(weights_path))
        net.setPreferableBackend(cv2.dnn.DNN_BACKEND_OPENCV)
        net.setPreferableTarget(cv2.dnn.DNN_TARGET_CPU)
        return net

    def detect(
        self,
        image: np.ndarray,
        options: Optional[FaceDetectorOptions] = None,
    ) -> List[FaceDetection]:
        """Detect faces in a BGR image.

        Returns detections sorted by score, boxes clipped to the image.
        """
        options = options or FaceDetectorOptions.from_config()
        net = self.model
        cv2 = get_environment().cv2

        h, w = image.shape[:2]
        if image.ndim == 2:
            image = cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)

        blob = cv2.dnn.blobFromImage(
            image, 1.0, tuple(options.input_size),
            self._mean_values,
            swapRB=False, crop=False
        )
        net.setInput(blob)
        detections = net.forward()

        boxes = []
        scores = []

        for i in range(detections.shape[2]):
            score = float(detections[0, 0, i, 2])
            if score < options.score_threshold or score > 1.0:
                continue

            x1, y1, x2, y2 = (detections[0, 0, i, 3:7] * np.array([w, h, w, h])).tolist()
            box = Box(x=x1, y=y1, width=x2 - x1, height=y2 - y1).clip_at_image_borders(w, h)
            if box.width <= 0 or box.height <= 0:
                continue

            boxes.append(box)
            scores.append(score)

        if not boxes:
            return []

        keep = cv2.dnn.NMSBoxes(
            [[b.x, b.y, b.width, b.height] for b in boxes],
            scores,
            options.score_threshold,
            options.nms_threshold,
        )

        detected = []
        for i in np.array(keep).reshape(-1):
            idx = int(i)
            detected.append(FaceDetection(
                box=boxes[idx],
                score=scores[idx],
                image_width=w,
                image_height=h,
            ))

        detected.sort(key=lambda d: d.score, reverse=True)
        logger.debug(f"Detected {len(detected)} face(s) in {w}x{h} image")
        return detected
