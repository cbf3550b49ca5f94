#!/usr/bin/env python3
"""
Convenience entry point for running salonschedule directly.

Usage: python salonschedule_cli.py [command] [options]
"""

from salonschedule.cli.app import app

if __name__ == "__main__":
    app()
