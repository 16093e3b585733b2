"""
Pytest configuration for the opensubsonic test suite.

This module configures the Python path so tests can import the package from
the src directory without installing it.
"""
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent

src_dir = project_root / "src"
if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))
