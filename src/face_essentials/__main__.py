"""Entry point for running the check as a module.

Usage:
    python -m face_essentials [--model-path DIR] [--image PATH]
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
