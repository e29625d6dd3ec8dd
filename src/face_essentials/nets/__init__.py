"""Model wrappers and the four-model bundle.

Available nets:
- face_detector: SSD ResNet-10 via OpenCV DNN
- face_landmark_68: dlib 68-point shape predictor
- face_recognition: dlib ResNet 128D descriptor
- face_expression: FER+ expression classifier via ONNX Runtime
"""

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Union

from .base import BaseNet, ModelLoadError, NetNotLoadedError
from .face_detector import FaceDetectorNet, FaceDetectorOptions
from .face_expression import FaceExpressionNet
from .face_landmark_68 import FaceLandmark68Net
from .face_recognition import FaceRecognitionNet

logger = logging.getLogger(__name__)


class ModelBundleLoadError(RuntimeError):
    """Raised when one or more nets of the bundle fail to load."""

    def __init__(self, failures: Dict[str, Exception]):
        self.failures = failures
        details = "; ".join(str(e) for e in failures.values())
        super().__init__(f"{len(failures)} model(s) failed to load: {details}")


class Nets:
    """The four nets the pipeline runs, loaded together."""

    def __init__(
        self,
        face_detector: Optional[BaseNet] = None,
        face_landmark_68: Optional[BaseNet] = None,
        face_recognition: Optional[BaseNet] = None,
        face_expression: Optional[BaseNet] = None,
    ):
        self.face_detector = face_detector or FaceDetectorNet()
        self.face_landmark_68 = face_landmark_68 or FaceLandmark68Net()
        self.face_recognition = face_recognition or FaceRecognitionNet()
        self.face_expression = face_expression or FaceExpressionNet()

    def __iter__(self) -> Iterator[BaseNet]:
        yield self.face_detector
        yield self.face_landmark_68
        yield self.face_recognition
        yield self.face_expression

    @property
    def all_loaded(self) -> bool:
        return all(net.is_loaded for net in self)

    def load_from_disk(self, model_dir: Union[str, Path]) -> None:
        """Load all four nets concurrently; all must succeed.

        Every load is submitted before any is awaited, and every load is
        awaited before failures are reported.

        Raises:
            ModelBundleLoadError: Listing every net that failed
        """
        nets: List[BaseNet] = list(self)

        with ThreadPoolExecutor(max_workers=len(nets), thread_name_prefix="model-load") as pool:
            futures = {pool.submit(net.load_from_disk, model_dir): net for net in nets}
            wait(futures)

        failures: Dict[str, Exception] = {}
        for future, net in futures.items():
            error = future.exception()
            if error is not None:
                failures[net.name] = error

        if failures:
            for name, error in failures.items():
                logger.error(f"Failed to load {name}: {error}")
            raise ModelBundleLoadError(failures)

        logger.info(f"Loaded {len(nets)} models from {model_dir}")

    def dispose(self) -> None:
        for net in self:
            net.dispose()


__all__ = [
    "BaseNet",
    "ModelLoadError",
    "NetNotLoadedError",
    "ModelBundleLoadError",
    "FaceDetectorNet",
    "FaceDetectorOptions",
    "FaceLandmark68Net",
    "FaceRecognitionNet",
    "FaceExpressionNet",
    "Nets",
]
