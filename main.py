#!/usr/bin/env python3
"""
PrismTrace - A Python Ray Tracer

Main entry point for rendering scene files.
"""

import sys

from prismtrace.cli import main


if __name__ == '__main__':
    sys.exit(main())
