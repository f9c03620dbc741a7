"""
Terminal rendering for taskreview.
"""

from .renderer import ReviewRenderer, format_age

__all__ = ["ReviewRenderer", "format_age"]
