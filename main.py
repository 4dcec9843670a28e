#!/usr/bin/env python3
"""Thin wrapper entrypoint for the netmanager CLI.

Delegates the full CLI implementation to `netmanager.cli.run()` so the
top-level module remains small and import-safe.
"""
import sys

from netmanager.cli import run


def main():
    sys.exit(run())


if __name__ == "__main__":
    main()
