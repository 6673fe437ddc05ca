"""Door camera clip capture and access record service."""

__version__ = "0.1.0"
