"""
taskreview - keyboard-driven review console for Taskwarrior.

Accumulate a filter, page through the matching tasks and edit them one key
at a time. Writes are guarded against concurrent modification.
"""

__version__ = "0.2.0"

# Re-export core models for convenience
from taskreview.core.config.models import ReviewConfig
from taskreview.core.tasks.models import Task, TaskStatus

__all__ = ["ReviewConfig", "Task", "TaskStatus", "__version__"]
