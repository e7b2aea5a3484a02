"""Pytest configuration for the Jerboa test suite."""

import sys
from pathlib import Path

# Add src directory to path for jerboa imports, and this directory for the
# shared .tests reader
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent))
