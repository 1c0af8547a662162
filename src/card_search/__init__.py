"""Free-text query understanding and retrieval for a sports card catalog."""

__version__ = "0.1.0"
