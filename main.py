#!/usr/bin/env python3
"""Main entry point for the Face Essentials check.

Simplified entry point that delegates to the CLI module.

Usage:
    python main.py                        # Run the check on the synthetic image
    python main.py --image photo.jpg      # Run the check on a real photo
    python main.py --help                 # All options

Or use the CLI directly:
    python -m face_essentials
"""

import sys
from pathlib import Path

# Run from a checkout without installing
sys.path.insert(0, str(Path(__file__).parent / "src"))


def main():
    """Main entry point - delegates to CLI."""
    from face_essentials.cli import main as cli_main
    sys.exit(cli_main())


if __name__ == "__main__":
    main()
