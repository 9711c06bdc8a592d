#!/usr/bin/env python3
"""Main entry point for FaceCrop.

Delegates to the CLI module.

Usage:
    python main.py crop --image photo.jpg --aspect 4:5
    python main.py recognize --image photo.jpg
    python main.py api --port 8000

Or use the CLI directly:
    python -m facecrop crop --image photo.jpg
"""

import sys


def main():
    """Main entry point - delegates to CLI."""
    if len(sys.argv) == 1:
        print(__doc__)
        print("Run 'python main.py --help' for more options")
        sys.exit(0)

    from facecrop.cli import main as cli_main
    cli_main()


if __name__ == "__main__":
    main()
