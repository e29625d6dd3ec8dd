"""Labeled descriptors and nearest-label face matching.

A FaceMatcher holds one or more labeled sets of descriptors. The distance
from a query to a label is the mean Euclidean distance to that label's
descriptors; the best match is the label with the smallest distance, or
"unknown" when that distance is not below the threshold.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

import numpy as np

from .constants import get_matcher_config
from .types import FaceDescription

logger = logging.getLogger(__name__)

UNKNOWN_LABEL = "unknown"


def euclidean_distance(a: np.ndarray, b: np.ndarray) -> float:
    """Calculate Euclidean distance between two descriptors."""
    a = np.asarray(a, dtype=np.float32).reshape(-1)
    b = np.asarray(b, dtype=np.float32).reshape(-1)
    if a.shape[0] != b.shape[0]:
        raise ValueError(
            f"Descriptor length mismatch: {a.shape[0]} != {b.shape[0]}"
        )
    return float(np.linalg.norm(a - b))


class LabeledFaceDescriptors:
    """A label together with one or more descriptors of that person."""

    def __init__(self, label: str, descriptors: Sequence[np.ndarray]):
        if not isinstance(label, str):
            raise TypeError(f"label must be a string, got {type(label).__name__}")
        if not isinstance(descriptors, (list, tuple)) or not descriptors:
            raise TypeError("descriptors must be a non-empty list of arrays")

        arrays = []
        for d in descriptors:
            if not isinstance(d, np.ndarray):
                raise TypeError(
                    f"descriptors must be numpy arrays, got {type(d).__name__}"
                )
            arrays.append(d.astype(np.float32).reshape(-1))

        self._label = label
        self._descriptors = arrays

    @property
    def label(self) -> str:
        return self._label

    @property
    def descriptors(self) -> List[np.ndarray]:
        return self._descriptors

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "label": self._label,
            "descriptors": [d.tolist() for d in self._descriptors],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LabeledFaceDescriptors":
        return cls(
            data["label"],
            [np.asarray(d, dtype=np.float32) for d in data["descriptors"]],
        )

    def __repr__(self) -> str:
        return f"LabeledFaceDescriptors({self._label!r}, n={len(self._descriptors)})"


@dataclass
class FaceMatch:
    """Result of matching a query descriptor."""
    label: str
    distance: float

    def to_string(self, with_distance: bool = True) -> str:
        if with_distance:
            return f"{self.label} ({self.distance:.2f})"
        return self.label

    def __str__(self) -> str:
        return self.to_string()


MatcherInput = Union[
    LabeledFaceDescriptors,
    FaceDescription,
    np.ndarray,
    Sequence[Union[LabeledFaceDescriptors, FaceDescription, np.ndarray]],
]


class FaceMatcher:
    """Find the closest labeled descriptor set for a query descriptor."""

    def __init__(
        self,
        inputs: MatcherInput,
        distance_threshold: Optional[float] = None,
    ):
        """Build a matcher.

        Args:
            inputs: A LabeledFaceDescriptors, a FaceDescription with a
                descriptor, a bare descriptor, or a list of any of these.
                Unlabeled inputs are named "person 1", "person 2", ...
            distance_threshold: Distances at or above this are "unknown"
                (uses config default if None)
        """
        if distance_threshold is None:
            distance_threshold = get_matcher_config().distance_threshold
        self._distance_threshold = float(distance_threshold)

        if isinstance(inputs, (LabeledFaceDescriptors, FaceDescription, np.ndarray)):
            items = [inputs]
        else:
            items = list(inputs)

        if not items:
            raise ValueError("FaceMatcher expects at least one input")

        labeled: List[LabeledFaceDescriptors] = []
        for i, item in enumerate(items):
            if isinstance(item, LabeledFaceDescriptors):
                labeled.append(item)
            elif isinstance(item, np.ndarray):
                labeled.append(LabeledFaceDescriptors(f"person {i + 1}", [item]))
            elif isinstance(item, FaceDescription):
                if item.descriptor is None:
                    raise ValueError(f"Input {i} has no descriptor")
                labeled.append(LabeledFaceDescriptors(f"person {i + 1}", [item.descriptor]))
            else:
                raise TypeError(
                    "FaceMatcher inputs must be LabeledFaceDescriptors, "
                    f"FaceDescription or numpy arrays, got {type(item).__name__}"
                )

        self._labeled_descriptors = labeled

    @property
    def labeled_descriptors(self) -> List[LabeledFaceDescriptors]:
        return self._labeled_descriptors

    @property
    def distance_threshold(self) -> float:
        return self._distance_threshold

    def compute_mean_distance(
        self,
        query: np.ndarray,
        descriptors: Sequence[np.ndarray],
    ) -> float:
        """Mean Euclidean distance from ``query`` to each descriptor."""
        return float(np.mean([euclidean_distance(query, d) for d in descriptors]))

    def match_descriptor(self, query: np.ndarray) -> List[FaceMatch]:
        """Distance from ``query`` to every label, in insertion order."""
        return [
            FaceMatch(ld.label, self.compute_mean_distance(query, ld.descriptors))
            for ld in self._labeled_descriptors
        ]

    def find_best_match(self, query: np.ndarray) -> FaceMatch:
        """Closest label, or "unknown" when it is not below the threshold."""
        matches = self.match_descriptor(query)
        best = min(matches, key=lambda m: m.distance)

        logger.debug(f"Best match {best.label} at {best.distance:.4f}")
        if best.distance < self._distance_threshold:
            return best
        return FaceMatch(UNKNOWN_LABEL, best.distance)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "distance_threshold": self._distance_threshold,
            "labeled_descriptors": [ld.to_dict() for ld in self._labeled_descriptors],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FaceMatcher":
        labeled = [LabeledFaceDescriptors.from_dict(d) for d in data["labeled_descriptors"]]
        return cls(labeled, distance_threshold=data["distance_threshold"])
