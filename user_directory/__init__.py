"""User profile directory service with dual-key identity resolution."""

__version__ = "1.0.0"
