"""Entry point for ``python -m facecrop``."""

from .cli import main

if __name__ == "__main__":
    main()
