"""
Core command line and natural break logic for breaktime.
"""

from .commands import Command  # noqa: F401
from .duration import INVALID_DURATION, parse_duration  # noqa: F401
from .natural_breaks import NaturalBreaksManager  # noqa: F401
