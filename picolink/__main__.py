"""
picolink entry point

    python -m picolink --list-ports
"""

import sys

from .cli import main


if __name__ == "__main__":
    sys.exit(main())
