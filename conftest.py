"""
Root conftest.py for pytest configuration
"""

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.absolute()
SRC_PATH = PROJECT_ROOT / "src"

# Run against the src tree when the package is not installed
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))
