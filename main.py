#!/usr/bin/env python3
"""
SentClip Entry Point Script

This script initializes the CLI handler and splits one recording into sentence clips.
"""

import sys
from sentclip.cli import CLIHandler

if __name__ == "__main__":
    if sys.version_info < (3, 8):
        sys.stderr.write("SentClip requires Python 3.8 or later.\n")
        sys.exit(1)

    cli = CLIHandler()
    cli.run()
