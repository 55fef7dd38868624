#!/usr/bin/env python3
"""
Entry point for secrets-sync.
Wraps secrets_sync/cli.py to ensure correct import resolution.
"""
import sys
import os

# Ensure project root is in python path
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

# SECURITY: first action of the process. Nothing may print before this.
from secrets_sync.bootstrap import install

install()

from secrets_sync.__main__ import main

if __name__ == "__main__":
    main()
