"""Authentication and session service for the groov dance catalogue."""

__version__ = "0.1.0"
