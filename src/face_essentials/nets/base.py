"""Base model wrapper interface."""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, List, Optional, Union

logger = logging.getLogger(__name__)


class ModelLoadError(RuntimeError):
    """Raised when a model artifact cannot be loaded."""

    def __init__(self, net_name: str, message: str):
        self.net_name = net_name
        super().__init__(f"{net_name}: {message}")


class NetNotLoadedError(RuntimeError):
    """Raised when inference is attempted before the model was loaded."""


class BaseNet(ABC):
    """Abstract base class for a model loadable from a local directory.

    Subclasses declare the artifact file names they need and implement
    ``_load`` to turn those files into a ready-to-run model object.
    """

    # Short name used in diagnostics
    name: str = "net"
    # Name shown in the harness summary
    display_name: str = "Net"
    # Where to fetch the artifacts when they are missing
    download_url: str = ""

    def __init__(self):
        self._model: Optional[Any] = None
        self._model_dir: Optional[Path] = None

    @property
    @abstractmethod
    def model_files(self) -> List[str]:
        """File names, relative to the model directory, this net loads."""
        pass

    @abstractmethod
    def _load(self, paths: List[Path]) -> Any:
        """Load the model from the resolved artifact paths."""
        pass

    @property
    def is_loaded(self) -> bool:
        return self._model is not None

    @property
    def model(self) -> Any:
        """The loaded model object."""
        if self._model is None:
            raise NetNotLoadedError(
                f"{self.display_name} is not loaded - call load_from_disk() first"
            )
        return self._model

    def load_from_disk(self, model_dir: Union[str, Path]) -> None:
        """Load the model artifacts from a directory.

        Args:
            model_dir: Directory containing ``model_files``

        Raises:
            ModelLoadError: If a file is missing or the library rejects it
        """
        model_dir = Path(model_dir)
        paths = [model_dir / filename for filename in self.model_files]

        for path in paths:
            if not path.exists():
                hint = f". Download from: {self.download_url}" if self.download_url else ""
                raise ModelLoadError(self.name, f"model file not found: {path}{hint}")

        try:
            self._model = self._load(paths)
        except ModelLoadError:
            raise
        except Exception as e:
            raise ModelLoadError(self.name, f"failed to load from {model_dir}: {e}") from e

        self._model_dir = model_dir
        logger.info(f"Loaded {self.display_name} from {model_dir}")

    def dispose(self) -> None:
        """Release the loaded model."""
        self._model = None
        self._model_dir = None
