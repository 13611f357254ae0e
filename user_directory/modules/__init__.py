"""Feature modules of the user directory service."""
