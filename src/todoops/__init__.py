"""todoops: task-tracking service with a constrained status workflow."""

__version__ = "1.0.0"
