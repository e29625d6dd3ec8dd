"""Facial expression classification with the FER+ ONNX model."""

import logging
from pathlib import Path
from typing import List, Optional

import numpy as np

from ..constants import get_face_expression_config, get_model_config
from ..environment import get_environment
from ..types import Box, FaceExpressions
from .base import BaseNet

logger = logging.getLogger(__name__)


class FaceExpressionNet(BaseNet):
    """FER+ expression classifier run with ONNX Runtime.

    Input: 64x64 grayscale crop, raw 0-255 values, NCHW float32.
    Output: (1, 8) unnormalized scores in FaceExpressions.LABELS order.
    """

    name = "face_expression"
    display_name = "FaceExpressionNet"
    download_url = (
        "https://github.com/onnx/models/raw/main/validated/vision/"
        "body_analysis/emotion_ferplus/model/emotion-ferplus-8.onnx"
    )

    def __init__(self, model_file: Optional[str] = None):
        super().__init__()
        self.model_file = model_file or get_model_config().expression
        self.in_w, self.in_h = get_face_expression_config().input_size
        self._in_name: Optional[str] = None
        self._out_name: Optional[str] = None

    @property
    def model_files(self) -> List[str]:
        return [self.model_file]

    def _load(self, paths: List[Path]):
        ort = get_environment().onnxruntime
        sess = ort.InferenceSession(str(paths[0]), providers=["CPUExecutionProvider"])
        self._in_name = sess.get_inputs()[0].name
        self._out_name = sess.get_outputs()[0].name
        logger.debug(
            f"[expression] input: {self._in_name} {sess.get_inputs()[0].shape}, "
            f"output: {self._out_name} {sess.get_outputs()[0].shape}"
        )
        return sess

    def _preprocess(self, image: np.ndarray, box: Box) -> np.ndarray:
        cv2 = get_environment().cv2

        h, w = image.shape[:2]
        r = box.clip_at_image_borders(w, h).round()
        if r.width <= 0 or r.height <= 0:
            raise ValueError(f"Empty face region: {r.to_dict()}")

        crop = image[r.top:r.bottom, r.left:r.right]
        gray = cv2.cvtColor(crop, cv2.COLOR_BGR2GRAY) if crop.ndim == 3 else crop
        gray = cv2.resize(gray, (self.in_w, self.in_h), interpolation=cv2.INTER_LINEAR)
        return gray.astype(np.float32)[None, None, ...]

    def predict(self, image: np.ndarray, box: Box) -> FaceExpressions:
        """Classify the expression of the face inside ``box``.

        Args:
            image: BGR image as numpy array
            box: Face region in image coordinates

        Returns:
            FaceExpressions with softmax probabilities
        """
        sess = self.model
        x = self._preprocess(image, box)
        y = sess.run([self._out_name], {self._in_name: x})[0]
        return FaceExpressions.from_scores(np.asarray(y).reshape(-1))
