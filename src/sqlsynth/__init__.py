"""Schema-grounded natural language to SQL synthesis."""

__version__ = "0.1.0"
