"""
breaktime package.

Holds the runtime support shared by the entry point and the core modules.
"""

__all__ = [
    "logger",
]
