"""
Virtual Service Architect - Scoping Engine
Service matching and work breakdown structure generation for IT service providers.
"""

__version__ = "1.0.0"
__author__ = "Virtual Service Architect"

from pathlib import Path

# Package paths
PACKAGE_ROOT = Path(__file__).parent
DATA_DIR = PACKAGE_ROOT / "data"
