#!/usr/bin/env python3
"""
Launcher script for ncmdecrypt.
Run this script to convert .ncm files without installing the package.
"""

import sys
import os

# Add the current directory to Python path so we can import ncmdecrypt
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from ncmdecrypt.main import main

if __name__ == "__main__":
    sys.exit(main())
