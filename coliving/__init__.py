"""Async client for the co-living rental API.

Session persistence, the booking price calculator, backend endpoint
wrappers, and the screen-level flows built on top of them.
"""

__version__ = "0.1.0"
