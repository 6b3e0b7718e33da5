#!/usr/bin/env python3
"""
branchflow CLI entry point.
Allows running with `python -m branchflow`
"""

from .cli.main import main

if __name__ == "__main__":
    main()
