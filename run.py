#!/usr/bin/env python3
"""Convenience runner for the senseBox to OpenBikeSensor exporter.

Usage:
    python run.py [--dry-run] [--box-id ID] [--output-dir DIR] [--verbose]
"""
import sys

from sense_to_obs.main import main

if __name__ == "__main__":
    sys.exit(main())
