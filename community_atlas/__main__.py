"""Allows `python -m community_atlas ...`."""

import sys

from community_atlas.cli import main

sys.exit(main())
