"""Allow ``python -m typestringer``."""

import sys

from .cli import main

main(sys.argv[1:])
