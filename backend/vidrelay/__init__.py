"""Resolve video links into selectable formats and stream them to the client"""

__version__ = "1.0.0"
