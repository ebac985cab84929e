#!/usr/bin/env python3
"""
Riplog - CD rip log checker.

Scans a file or directory for rip logs, scores each one with an evaluation
server and shows the results in an interactive terminal dashboard.
"""

from src.interface.cli import app

if __name__ == "__main__":
    app()
