"""Core review engine: tasks, keys, review state machine and configuration."""
