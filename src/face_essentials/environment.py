"""Environment binding for the image backend and inference libraries.

OpenCV serves as the image/drawing backend (the "canvas"), dlib runs the
landmark and recognition models and ONNX Runtime runs the expression
classifier. The handles are resolved once and reused for the lifetime of
the process.
"""

import importlib
import logging
from dataclasses import dataclass
from types import ModuleType
from typing import Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)

# (import name, distribution name on the package index)
REQUIRED_MODULES: Tuple[Tuple[str, str], ...] = (
    ("cv2", "opencv-python"),
    ("dlib", "dlib"),
    ("onnxruntime", "onnxruntime"),
)


class EnvironmentBindError(ImportError):
    """Raised when the image backend or an inference library is missing."""

    def __init__(self, missing: List[Tuple[str, str, str]]):
        self.missing = missing
        names = ", ".join(module for module, _, _ in missing)
        details = "; ".join(f"{module}: {reason}" for module, _, reason in missing)
        super().__init__(f"Could not load {names} ({details})")

    @property
    def install_hint(self) -> str:
        """pip command installing every missing distribution."""
        return "pip install " + " ".join(dist for _, dist, _ in self.missing)


@dataclass(frozen=True)
class Environment:
    """Resolved library handles."""

    cv2: ModuleType
    dlib: ModuleType
    onnxruntime: ModuleType

    @property
    def versions(self) -> dict:
        """Library versions, for diagnostics."""
        return {
            "opencv": getattr(self.cv2, "__version__", "unknown"),
            "dlib": getattr(self.dlib, "__version__", "unknown"),
            "onnxruntime": getattr(self.onnxruntime, "__version__", "unknown"),
        }


_environment: Optional[Environment] = None


def bind_environment(
    importer: Callable[[str], ModuleType] = importlib.import_module,
) -> Environment:
    """Resolve the image backend and inference libraries.

    Args:
        importer: Function used to import a module by name

    Returns:
        The memoized Environment

    Raises:
        EnvironmentBindError: If any required module cannot be imported
    """
    global _environment

    if _environment is not None:
        return _environment

    modules = {}
    missing = []
    for module_name, dist_name in REQUIRED_MODULES:
        try:
            modules[module_name] = importer(module_name)
        except ImportError as e:
            missing.append((module_name, dist_name, str(e)))

    if missing:
        raise EnvironmentBindError(missing)

    _environment = Environment(**modules)
    logger.info(f"Environment bound: {_environment.versions}")
    return _environment


def get_environment() -> Environment:
    """Return the bound environment, binding it on first use."""
    return bind_environment()


def reset_environment() -> None:
    """Forget the memoized handles (used by tests)."""
    global _environment
    _environment = None
