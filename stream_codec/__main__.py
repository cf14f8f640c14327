"""Allow ``python -m stream_codec``."""

import sys

from .cli import main

sys.exit(main(["python -m stream_codec", *sys.argv[1:]]))
