"""Aurora planner: tasks, learned patterns and LLM scheduling suggestions."""

__version__ = "0.3.0"
