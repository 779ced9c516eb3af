"""
Version information for the outreach pipeline.

This file is the single source of truth for version numbers.
Both the library and the API import from here.
"""

__version__ = "0.3.0"
__version_info__ = (0, 3, 0)
