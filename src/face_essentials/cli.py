#!/usr/bin/env python3
"""Command line entry point for the face essentials check.

Usage:
    python -m face_essentials
    python -m face_essentials --model-path ./model
    python -m face_essentials --image photo.jpg --output annotated.jpg
    python -m face_essentials --save-fixture fixture.png

Exit codes:
    0  every stage ran (faces found or not)
    1  image backend / inference library missing, a model failed to load,
       or an unexpected error
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .environment import EnvironmentBindError, bind_environment

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="face-essentials",
        description="Verify that the face detection, landmark, recognition "
                    "and expression models load and run",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--model-path", "-m",
        type=str,
        default=None,
        help="Directory containing the model files (default: ./model)",
    )
    parser.add_argument(
        "--image", "-i",
        type=str,
        default=None,
        help="Run on this photo instead of the synthetic test image",
    )
    parser.add_argument(
        "--save-fixture",
        type=str,
        default=None,
        help="Write the synthetic test image to this path",
    )
    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Write the input image annotated with detections to this path",
    )
    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to configuration file (default: config/config.yaml)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Run the check; returns the process exit code."""
    args = parse_args(argv)
    _configure_logging(args.debug)

    try:
        env = bind_environment()
    except EnvironmentBindError as e:
        print(f"\n❌ Error loading dependencies: {e}")
        print("\n📦 Please install the missing packages first:")
        print(f"   {e.install_hint}\n")
        return 1

    logger.debug(f"Library versions: {env.versions}")

    try:
        if args.config:
            from .constants import get_config
            get_config().reload(Path(args.config))

        from .harness import EssentialsCheck

        check = EssentialsCheck(
            model_path=args.model_path,
            image_path=args.image,
            save_fixture=args.save_fixture,
            output_path=args.output,
        )
        return check.run()
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 1
    except Exception as e:
        logger.debug("Unhandled error", exc_info=True)
        print(f"\n❌ Test failed with error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
