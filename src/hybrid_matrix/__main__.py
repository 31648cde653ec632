"""Entry point for ``python -m hybrid_matrix``."""

import sys

from hybrid_matrix.cli import main

if __name__ == "__main__":
    sys.exit(main())
