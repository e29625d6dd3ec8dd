"""Centralized constants and configuration loader.

This module provides access to configuration values and sensible defaults
for the model bundle, the detector, the expression classifier, the matcher
and the synthetic fixture. Values are loaded from config/config.yaml when
available, otherwise the defaults below are used unchanged.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)

# Path to the default configuration file
DEFAULT_CONFIG_PATH = Path("config") / "config.yaml"


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """Load configuration from YAML file.

    Args:
        config_path: Path to config file. Uses default if None.

    Returns:
        Configuration dictionary.
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    try:
        if path.exists():
            with open(path, "r") as f:
                return yaml.safe_load(f) or {}
        logger.warning(f"Config file not found: {path}, using defaults")
    except Exception as e:
        logger.warning(f"Failed to load config from {path}: {e}")

    return {}


def _get_nested(config: Dict, *keys: str, default: Any = None) -> Any:
    """Get nested config value with default fallback."""
    value = config
    for key in keys:
        if isinstance(value, dict):
            value = value.get(key)
        else:
            return default
        if value is None:
            return default
    return value


# ============================================================
# Model Bundle
# ============================================================

@dataclass
class ModelConfig:
    """Location and file names of the four model artifacts."""
    directory: str = "./model"
    # SSD ResNet-10 face detector (Caffe)
    detector_config: str = "deploy.prototxt"
    detector_weights: str = "res10_300x300_ssd_iter_140000.caffemodel"
    # dlib 68-point shape predictor
    landmark_68: str = "shape_predictor_68_face_landmarks.dat"
    # dlib ResNet face descriptor (128D)
    recognition: str = "dlib_face_recognition_resnet_model_v1.dat"
    # FER+ expression classifier (ONNX)
    expression: str = "emotion-ferplus-8.onnx"

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "ModelConfig":
        """Create from config dictionary."""
        models = _get_nested(config, "models") or {}

        return cls(
            directory=str(models.get("directory", "./model")),
            detector_config=models.get("detector_config", "deploy.prototxt"),
            detector_weights=models.get(
                "detector_weights", "res10_300x300_ssd_iter_140000.caffemodel"
            ),
            landmark_68=models.get("landmark_68", "shape_predictor_68_face_landmarks.dat"),
            recognition=models.get("recognition", "dlib_face_recognition_resnet_model_v1.dat"),
            expression=models.get("expression", "emotion-ferplus-8.onnx"),
        )


# ============================================================
# Face Detector Constants
# ============================================================

@dataclass
class FaceDetectorConfig:
    """SSD face detector constants."""
    # Input size for SSD detector
    input_size: Tuple[int, int] = (300, 300)
    # Mean values for blob normalization (BGR)
    mean_values: Tuple[float, float, float] = (104.0, 177.0, 123.0)
    # Minimum score for a detection to be kept
    score_threshold: float = 0.5
    # IoU threshold for non-maximum suppression
    nms_threshold: float = 0.4

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "FaceDetectorConfig":
        """Create from config dictionary."""
        det = _get_nested(config, "face_detector") or {}

        input_size = det.get("input_size", [300, 300])
        mean_values = det.get("mean_values", [104.0, 177.0, 123.0])

        return cls(
            input_size=tuple(input_size),
            mean_values=tuple(mean_values),
            score_threshold=det.get("score_threshold", 0.5),
            nms_threshold=det.get("nms_threshold", 0.4),
        )


# ============================================================
# Expression Classifier Constants
# ============================================================

@dataclass
class FaceExpressionConfig:
    """Expression classifier constants."""
    # FER+ takes a single-channel 64x64 crop
    input_size: Tuple[int, int] = (64, 64)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "FaceExpressionConfig":
        """Create from config dictionary."""
        expr = _get_nested(config, "face_expression") or {}
        input_size = expr.get("input_size", [64, 64])

        return cls(input_size=tuple(input_size))


# ============================================================
# Matcher Constants
# ============================================================

@dataclass
class MatcherConfig:
    """Face matcher constants."""
    # Euclidean distance below which a match is accepted
    distance_threshold: float = 0.6

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "MatcherConfig":
        """Create from config dictionary."""
        matcher = _get_nested(config, "matcher") or {}

        return cls(distance_threshold=matcher.get("distance_threshold", 0.6))


# ============================================================
# Fixture Constants
# ============================================================

@dataclass
class FixtureConfig:
    """Synthetic test image constants."""
    size: int = 200

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "FixtureConfig":
        """Create from config dictionary."""
        fixture = _get_nested(config, "fixture") or {}

        return cls(size=int(fixture.get("size", 200)))


# ============================================================
# Global Config Instance (lazy loaded)
# ============================================================

class Config:
    """Global configuration singleton."""

    _instance: Optional["Config"] = None
    _config: Dict[str, Any] = {}

    def __new__(cls) -> "Config":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._load()
        return cls._instance

    def _load(self, config_path: Optional[Path] = None) -> None:
        """Load configuration from file."""
        self._config = load_config(config_path)
        self._models: Optional[ModelConfig] = None
        self._face_detector: Optional[FaceDetectorConfig] = None
        self._face_expression: Optional[FaceExpressionConfig] = None
        self._matcher: Optional[MatcherConfig] = None
        self._fixture: Optional[FixtureConfig] = None

    def reload(self, config_path: Optional[Path] = None) -> None:
        """Reload configuration from file."""
        self._load(config_path)

    @property
    def models(self) -> ModelConfig:
        """Get model bundle config."""
        if self._models is None:
            self._models = ModelConfig.from_config(self._config)
        return self._models

    @property
    def face_detector(self) -> FaceDetectorConfig:
        """Get face detector config."""
        if self._face_detector is None:
            self._face_detector = FaceDetectorConfig.from_config(self._config)
        return self._face_detector

    @property
    def face_expression(self) -> FaceExpressionConfig:
        """Get expression classifier config."""
        if self._face_expression is None:
            self._face_expression = FaceExpressionConfig.from_config(self._config)
        return self._face_expression

    @property
    def matcher(self) -> MatcherConfig:
        """Get matcher config."""
        if self._matcher is None:
            self._matcher = MatcherConfig.from_config(self._config)
        return self._matcher

    @property
    def fixture(self) -> FixtureConfig:
        """Get fixture config."""
        if self._fixture is None:
            self._fixture = FixtureConfig.from_config(self._config)
        return self._fixture

    def get(self, *keys: str, default: Any = None) -> Any:
        """Get a config value by key path."""
        return _get_nested(self._config, *keys, default=default)


def get_config() -> Config:
    """Get the global configuration instance."""
    return Config()


# Convenience accessors
def get_model_config() -> ModelConfig:
    """Get model bundle configuration."""
    return get_config().models


def get_face_detector_config() -> FaceDetectorConfig:
    """Get face detector configuration."""
    return get_config().face_detector


def get_face_expression_config() -> FaceExpressionConfig:
    """Get expression classifier configuration."""
    return get_config().face_expression


def get_matcher_config() -> MatcherConfig:
    """Get matcher configuration."""
    return get_config().matcher


def get_fixture_config() -> FixtureConfig:
    """Get fixture configuration."""
    return get_config().fixture
