"""CLI entrypoint for rendering swipe videos."""

import sys

from swipe_video.cli import main

if __name__ == "__main__":
    sys.exit(main())
