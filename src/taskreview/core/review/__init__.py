"""
Interactive review of a working set.
"""

from .machine import ReviewMachine, ReviewState, ReviewTerminal
from .session import ReviewSession

__all__ = [
    "ReviewMachine",
    "ReviewSession",
    "ReviewState",
    "ReviewTerminal",
]
