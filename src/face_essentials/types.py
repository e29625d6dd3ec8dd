"""Detection result data types."""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np


@dataclass
class Box:
    """Axis-aligned rectangle in pixel coordinates."""

    x: float
    y: float
    width: float
    height: float

    @property
    def left(self) -> float:
        return self.x

    @property
    def top(self) -> float:
        return self.y

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def area(self) -> float:
        """Return area of the box."""
        return self.width * self.height

    @property
    def center(self) -> Tuple[float, float]:
        """Return center point of the box."""
        return (self.x + self.width / 2, self.y + self.height / 2)

    def round(self) -> "Box":
        """Return a copy with integer fields."""
        return Box(
            x=int(round(self.x)),
            y=int(round(self.y)),
            width=int(round(self.width)),
            height=int(round(self.height)),
        )

    def clip_at_image_borders(self, image_width: int, image_height: int) -> "Box":
        """Return a copy clipped to [0, image_width] x [0, image_height]."""
        x1 = min(max(self.left, 0.0), float(image_width))
        y1 = min(max(self.top, 0.0), float(image_height))
        x2 = min(max(self.right, 0.0), float(image_width))
        y2 = min(max(self.bottom, 0.0), float(image_height))
        return Box(x=x1, y=y1, width=x2 - x1, height=y2 - y1)

    def to_dict(self) -> Dict[str, int]:
        """Rounded box as a dictionary, for display."""
        r = self.round()
        return {"x": r.x, "y": r.y, "width": r.width, "height": r.height}


@dataclass
class FaceDetection:
    """A detected face: bounding box plus detector score."""

    box: Box
    score: float
    image_width: int
    image_height: int

    @property
    def image_dims(self) -> Tuple[int, int]:
        return (self.image_width, self.image_height)


class FaceLandmarks68:
    """68-point facial landmarks in the iBUG 300-W layout."""

    JAW_OUTLINE = slice(0, 17)
    LEFT_EYE_BROW = slice(17, 22)
    RIGHT_EYE_BROW = slice(22, 27)
    NOSE = slice(27, 36)
    LEFT_EYE = slice(36, 42)
    RIGHT_EYE = slice(42, 48)
    MOUTH = slice(48, 68)

    NUM_POINTS = 68

    def __init__(self, positions: np.ndarray):
        points = np.asarray(positions, dtype=np.float32).reshape(-1, 2)
        if points.shape[0] != self.NUM_POINTS:
            raise ValueError(
                f"Expected {self.NUM_POINTS} landmark points, got {points.shape[0]}"
            )
        self._positions = points

    @property
    def positions(self) -> np.ndarray:
        """All points as a (68, 2) array of (x, y)."""
        return self._positions

    def get_jaw_outline(self) -> np.ndarray:
        return self._positions[self.JAW_OUTLINE]

    def get_left_eye_brow(self) -> np.ndarray:
        return self._positions[self.LEFT_EYE_BROW]

    def get_right_eye_brow(self) -> np.ndarray:
        return self._positions[self.RIGHT_EYE_BROW]

    def get_nose(self) -> np.ndarray:
        return self._positions[self.NOSE]

    def get_left_eye(self) -> np.ndarray:
        return self._positions[self.LEFT_EYE]

    def get_right_eye(self) -> np.ndarray:
        return self._positions[self.RIGHT_EYE]

    def get_mouth(self) -> np.ndarray:
        return self._positions[self.MOUTH]

    def bounding_box(self) -> Box:
        """Tight box around all points."""
        min_xy = self._positions.min(axis=0)
        max_xy = self._positions.max(axis=0)
        return Box(
            x=float(min_xy[0]),
            y=float(min_xy[1]),
            width=float(max_xy[0] - min_xy[0]),
            height=float(max_xy[1] - min_xy[1]),
        )

    def __len__(self) -> int:
        return self.NUM_POINTS

    def __repr__(self) -> str:
        return f"FaceLandmarks68(box={self.bounding_box().to_dict()})"


class FaceExpressions:
    """Expression label -> probability mapping."""

    LABELS = (
        "neutral",
        "happy",
        "surprised",
        "sad",
        "angry",
        "disgusted",
        "fearful",
        "contempt",
    )

    def __init__(self, probabilities: Dict[str, float]):
        for label, prob in probabilities.items():
            if prob < 0:
                raise ValueError(f"Negative probability for {label}: {prob}")
        self._probabilities = {label: float(p) for label, p in probabilities.items()}

    @classmethod
    def from_scores(cls, scores: np.ndarray) -> "FaceExpressions":
        """Build from raw classifier outputs (one score per label), applying softmax."""
        scores = np.asarray(scores, dtype=np.float64).reshape(-1)
        if scores.shape[0] != len(cls.LABELS):
            raise ValueError(
                f"Expected {len(cls.LABELS)} expression scores, got {scores.shape[0]}"
            )
        exp = np.exp(scores - scores.max())
        probs = exp / exp.sum()
        return cls(dict(zip(cls.LABELS, probs.tolist())))

    def as_sorted_list(self) -> List[Tuple[str, float]]:
        """(label, probability) pairs, most probable first."""
        return sorted(self._probabilities.items(), key=lambda kv: kv[1], reverse=True)

    def top(self, n: int = 3) -> List[Tuple[str, float]]:
        return self.as_sorted_list()[:n]

    def __getitem__(self, label: str) -> float:
        return self._probabilities[label]

    def __contains__(self, label: object) -> bool:
        return label in self._probabilities

    def __len__(self) -> int:
        return len(self._probabilities)

    def items(self):
        return self._probabilities.items()

    def to_dict(self) -> Dict[str, float]:
        return dict(self._probabilities)


@dataclass
class FaceDescription:
    """Everything computed for one face by the combined inference call."""

    detection: FaceDetection
    landmarks: Optional[FaceLandmarks68] = None
    descriptor: Optional[np.ndarray] = None
    expressions: Optional[FaceExpressions] = None

    @property
    def box(self) -> Box:
        return self.detection.box

    @property
    def score(self) -> float:
        return self.detection.score
