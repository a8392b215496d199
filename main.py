#!/usr/bin/env python3
"""
embedsub Entry Point Script

This script initializes the CLI handler and translates the subtitle of one video.
"""

import sys
from embedsub.cli import CLIHandler

if __name__ == "__main__":
    if sys.version_info < (3, 8):
        sys.stderr.write("embedsub requires Python 3.8 or later.\n")
        sys.exit(1)

    cli = CLIHandler()
    cli.run()
