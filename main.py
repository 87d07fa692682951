#!/usr/bin/env python3
"""Main entry point for ShareWatch."""

import sys

from sharewatch.cli import main

if __name__ == "__main__":
    sys.exit(main())
