"""Organization metrics and management for the admin console."""

__version__ = "0.1.0"
