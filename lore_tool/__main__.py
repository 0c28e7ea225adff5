#!/usr/bin/env python3
"""
Entry point for the TrackLore CLI.

Run with: python -m lore_tool
"""

from .cli import cli

if __name__ == '__main__':
    cli()
