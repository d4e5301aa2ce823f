"""
SCSI Listing Protocol Package

Re-exports constants, enums and helpers used across the package.
"""

# Import all constants
from .constants import *  # noqa: F401,F403

# Import all enums and types
from .types import *  # noqa: F401,F403

# Import utility functions
from .utils import *  # noqa: F401,F403
