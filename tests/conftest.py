"""
pytest configuration for servicebase tests.

Adds src directory to Python path so tests run without an install.
"""

import sys
from pathlib import Path

src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))
