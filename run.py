#!/usr/bin/env python3
"""Convenience runner for the run distance breakdown tool.

Usage:
    python run.py routes.json [--output report.xlsx]
"""
import logging
import sys

from run_atlas.main import main

if __name__ == "__main__":
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    sys.exit(main())
