"""68-point landmark regression using dlib's shape predictor."""

import logging
from pathlib import Path
from typing import List, Optional

import numpy as np

from ..constants import get_model_config
from ..environment import get_environment
from ..types import Box, FaceLandmarks68
from .base import BaseNet

logger = logging.getLogger(__name__)


class FaceLandmark68Net(BaseNet):
    """dlib shape predictor trained on iBUG 300-W (68 points)."""

    name = "face_landmark_68"
    display_name = "FaceLandmark68Net"
    download_url = "http://dlib.net/files/shape_predictor_68_face_landmarks.dat.bz2"

    def __init__(self, model_file: Optional[str] = None):
        super().__init__()
        self.model_file = model_file or get_model_config().landmark_68

    @property
    def model_files(self) -> List[str]:
        return [self.model_file]

    def _load(self, paths: List[Path]):
        dlib = get_environment().dlib
        return dlib.shape_predictor(str(paths[0]))

    def predict(self, image: np.ndarray, box: Box) -> FaceLandmarks68:
        """Locate the 68 landmarks of the face inside ``box``.

        Args:
            image: BGR image as numpy array
            box: Face bounding box in image coordinates

        Returns:
            FaceLandmarks68 in image coordinates
        """
        predictor = self.model
        env = get_environment()

        rgb = env.cv2.cvtColor(image, env.cv2.COLOR_BGR2RGB) if image.ndim == 3 else image
        r = box.round()
        rect = env.dlib.rectangle(r.left, r.top, r.right, r.bottom)

        shape = predictor(rgb, rect)
        positions = np.array(
            [(shape.part(i).x, shape.part(i).y) for i in range(shape.num_parts)],
            dtype=np.float32,
        )
        return FaceLandmarks68(positions)
