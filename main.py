#!/usr/bin/env python3
"""
New Relic Export - Development CLI wrapper.

Convenience script for running the CLI without installing the package.
For production use, install the package and use: newrelic-export

Usage:
    python main.py
    python main.py --mode summary --output-dir exports
"""

import sys

from newrelic_export.cli import main

if __name__ == "__main__":
    sys.exit(main())
