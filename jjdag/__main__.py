"""Module entrypoint for ``python -m jjdag``.

Argument parsing and runtime setup happen in ``jjdag.cli``.
"""

import sys

from .cli import main


if __name__ == "__main__":
    sys.exit(main())
