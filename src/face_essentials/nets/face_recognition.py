"""128D face descriptors using dlib's ResNet recognition model."""

import logging
from pathlib import Path
from typing import List, Optional

import numpy as np

from ..constants import get_model_config
from ..environment import get_environment
from ..types import FaceLandmarks68
from .base import BaseNet

logger = logging.getLogger(__name__)


class FaceRecognitionNet(BaseNet):
    """Face embedding using dlib's face recognition model (128D).

    The descriptor is computed on a face chip aligned from the 68 landmarks,
    so landmarks are required.
    """

    name = "face_recognition"
    display_name = "FaceRecognitionNet"
    download_url = "http://dlib.net/files/dlib_face_recognition_resnet_model_v1.dat.bz2"

    def __init__(self, model_file: Optional[str] = None, num_jitters: int = 0):
        """Initialize the recognition wrapper.

        Args:
            model_file: Model file name (uses config default if None)
            num_jitters: Times to re-sample the face when computing the
                descriptor (0 = single pass)
        """
        super().__init__()
        self.model_file = model_file or get_model_config().recognition
        self.num_jitters = num_jitters

    @property
    def model_files(self) -> List[str]:
        return [self.model_file]

    @property
    def embedding_dim(self) -> int:
        return 128

    def _load(self, paths: List[Path]):
        dlib = get_environment().dlib
        return dlib.face_recognition_model_v1(str(paths[0]))

    def compute_descriptor(
        self,
        image: np.ndarray,
        landmarks: FaceLandmarks68,
    ) -> np.ndarray:
        """Compute the descriptor of one face.

        Args:
            image: BGR image as numpy array
            landmarks: Landmarks of the face in image coordinates

        Returns:
            128D float32 descriptor
        """
        model = self.model
        env = get_environment()
        dlib = env.dlib

        rgb = env.cv2.cvtColor(image, env.cv2.COLOR_BGR2RGB) if image.ndim == 3 else image

        r = landmarks.bounding_box().round()
        rect = dlib.rectangle(r.left, r.top, r.right, r.bottom)
        points = dlib.points()
        for x, y in landmarks.positions.tolist():
            points.append(dlib.point(int(round(x)), int(round(y))))
        shape = dlib.full_object_detection(rect, points)

        descriptor = model.compute_face_descriptor(rgb, shape, self.num_jitters)
        return np.asarray(descriptor, dtype=np.float32).reshape(-1)
